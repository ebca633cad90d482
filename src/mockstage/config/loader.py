"""
Configuration Loader.

Loads and validates mockstage configuration from YAML files with
environment variable substitution.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mockstage.config.environment import ensure_dotenv_loaded
from mockstage.config.models import MockStageConfig

# Default configuration file locations
DEFAULT_CONFIG_PATHS = [
    "mockstage.yaml",
    "mockstage.yml",
    ".mockstage.yaml",
    ".mockstage.yml",
]

# Environment variable for config path
CONFIG_ENV_VAR = "MOCKSTAGE_CONFIG"

# Maps env var name to config path (dot-separated)
ENV_VAR_OVERRIDES = {
    "MOCKSTAGE_DATA_DIR": "data_dir",
    "MOCKSTAGE_CACHE_TTL": "cache_ttl",
    "MOCKSTAGE_LOG_LEVEL": "logging.level",
    "MOCKSTAGE_LOG_FILE": "logging.file",
    "MOCKSTAGE_LOG_JSON": "logging.json_format",
}


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        errors: list[dict] | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            errors: List of validation errors (from Pydantic)
            path: Path to the config file that caused the error
        """
        super().__init__(message)
        self.errors = errors or []
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path:
            msg = f"{msg} (file: {self.path})"
        if self.errors:
            error_details = []
            for err in self.errors[:5]:
                loc = ".".join(str(x) for x in err.get("loc", []))
                error_msg = err.get("msg", "Unknown error")
                error_details.append(f"  - {loc}: {error_msg}")
            if len(self.errors) > 5:
                error_details.append(f"  ... and {len(self.errors) - 5} more errors")
            msg = f"{msg}\n" + "\n".join(error_details)
        return msg


class ConfigLoader:
    """Loads configuration from YAML files.

    Supports:
    - YAML configuration files (optional; defaults apply without one)
    - Environment variable substitution (${VAR} and ${VAR:-default} syntax)
    - MOCKSTAGE_* overrides
    - Validation via Pydantic

    Usage:
        loader = ConfigLoader("mockstage.yaml")
        config = loader.load()

        # Discover from MOCKSTAGE_CONFIG or default locations
        config = ConfigLoader().load_from_env()
    """

    # Matches ${VAR_NAME}, ${VAR_NAME:-default} and ${VAR_NAME:default}
    ENV_PATTERN = re.compile(r"\$\{(\w+)(?::-?([^}]*))?\}")

    def __init__(
        self,
        config_path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the config loader.

        Args:
            config_path: Path to YAML config file (optional)
            environ: Variable mapping (defaults to os.environ after loading .env)
        """
        self._config_path = Path(config_path) if config_path else None
        self._environ = environ
        self._config: MockStageConfig | None = None
        self._loaded_from_path: Path | None = None

    @property
    def environ(self) -> Mapping[str, str]:
        if self._environ is None:
            ensure_dotenv_loaded()
            return os.environ
        return self._environ

    @property
    def config_path(self) -> Path | None:
        """Get config file path."""
        return self._config_path

    @property
    def loaded_from_path(self) -> Path | None:
        """Get the path the config was actually loaded from."""
        return self._loaded_from_path

    @property
    def config(self) -> MockStageConfig | None:
        """Get loaded configuration, None if not loaded yet."""
        return self._config

    def load(self, path: str | Path | None = None) -> MockStageConfig:
        """Load and validate configuration.

        Args:
            path: Optional path overriding the one set in __init__.
                Without any path the defaults plus env overrides are used.

        Returns:
            Validated MockStageConfig

        Raises:
            ConfigurationError: If config is invalid
            FileNotFoundError: If config file not found
        """
        if path is not None:
            self._config_path = Path(path)

        if self._config_path:
            raw = self._load_yaml()
            self._loaded_from_path = self._config_path
        else:
            raw = {}
            self._loaded_from_path = None

        processed = self._substitute_env_vars(raw)
        processed = self._apply_env_overrides(processed)
        # YAML parses empty sections as None; drop them so defaults apply
        processed = self._clean_none_values(processed)

        try:
            self._config = MockStageConfig(**processed)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.error_count()} errors",
                errors=e.errors(),
                path=self._loaded_from_path,
            ) from e

        return self._config

    def load_from_env(self) -> MockStageConfig:
        """Load configuration from MOCKSTAGE_CONFIG or default locations.

        Falls back to defaults when no file exists. A MOCKSTAGE_CONFIG that
        points to a missing file is an error.

        Raises:
            ConfigurationError: If config is invalid
            FileNotFoundError: If MOCKSTAGE_CONFIG names a missing file
        """
        env_config_path = self.environ.get(CONFIG_ENV_VAR)
        if env_config_path:
            config_path = Path(env_config_path)
            if not config_path.exists():
                raise FileNotFoundError(
                    f"Config file specified by {CONFIG_ENV_VAR} not found: {env_config_path}"
                )
            self._config_path = config_path
            return self.load()

        for default_path in DEFAULT_CONFIG_PATHS:
            path = Path(default_path)
            if path.exists():
                self._config_path = path
                return self.load()

        self._config_path = None
        return self.load()

    def _load_yaml(self) -> dict[str, Any]:
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", path=self._config_path) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping", path=self._config_path
            )
        return data

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ${VAR} references in config values."""
        if isinstance(data, dict):
            return {k: self._substitute_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            return self._substitute_string(data)
        return data

    def _clean_none_values(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: self._clean_none_values(v) for k, v in data.items() if v is not None}
        elif isinstance(data, list):
            return [self._clean_none_values(item) for item in data]
        return data

    def _substitute_string(self, value: str) -> Any:
        env = self.environ

        # A value that is exactly one reference gets type coercion
        full_match = self.ENV_PATTERN.fullmatch(value)
        if full_match:
            var_name, default = full_match.group(1), full_match.group(2)
            env_value = env.get(var_name)
            resolved = env_value if env_value is not None else default
            if resolved is not None:
                return self._coerce_type(resolved)
            return value

        def replace(match: re.Match[str]) -> str:
            env_value = env.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return self.ENV_PATTERN.sub(replace, value)

    def _coerce_type(self, value: str) -> Any:
        if value == "":
            return None

        lower_value = value.lower()
        if lower_value in ("true", "yes", "on"):
            return True
        if lower_value in ("false", "no", "off"):
            return False

        try:
            if "." not in value and "e" not in lower_value:
                return int(value)
            return float(value)
        except ValueError:
            pass

        return value

    def _apply_env_overrides(self, config_dict: dict[str, Any]) -> dict[str, Any]:
        """Apply MOCKSTAGE_* overrides; they take precedence over the file."""
        env = self.environ
        for env_var, config_path in ENV_VAR_OVERRIDES.items():
            env_value = env.get(env_var)
            if env_value is not None:
                self._set_nested_value(config_dict, config_path, self._coerce_type(env_value))
        return config_dict

    def _set_nested_value(self, config_dict: dict[str, Any], path: str, value: Any) -> None:
        parts = path.split(".")
        current = config_dict
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> MockStageConfig:
    """Load configuration from a file, or discover it when no path is given.

    Args:
        config_path: Path to YAML config file
        environ: Variable mapping (defaults to os.environ)

    Returns:
        Validated MockStageConfig
    """
    loader = ConfigLoader(config_path, environ=environ)
    if config_path is not None:
        return loader.load()
    return loader.load_from_env()
