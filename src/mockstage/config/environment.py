"""
Environment Variable Handling.

Loads .env files with python-dotenv and answers questions about the
runtime environment (production or not).

IMPORTANT: Call ensure_dotenv_loaded() early in application startup so
FF_* flags from .env are visible to FeatureFlagManager.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv

# Track whether dotenv has been loaded
_dotenv_loaded: bool = False

# Variables naming the deployment environment, checked in order
ENVIRONMENT_VARS = ("MOCKSTAGE_ENV", "APP_ENV")

PRODUCTION_ENVIRONMENTS = frozenset({"production", "prod"})

DEFAULT_ENVIRONMENT = "development"


def ensure_dotenv_loaded(env_file: str = ".env") -> bool:
    """Ensure .env file is loaded into os.environ.

    Existing environment variables win over .env values.

    Args:
        env_file: Path to .env file (relative or absolute)

    Returns:
        True if a .env file was found and loaded, False otherwise
    """
    global _dotenv_loaded

    if _dotenv_loaded:
        return True

    env_paths = [
        Path(env_file),
        Path.cwd() / env_file,
    ]

    _dotenv_loaded = True
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path, override=False)
            return True

    # No .env file found, that's okay - use defaults
    return False


def get_environment_name(environ: Mapping[str, str] | None = None) -> str:
    """Return the deployment environment name.

    Args:
        environ: Variable mapping (defaults to os.environ)

    Returns:
        Lowercased environment name, "development" when unset
    """
    env = os.environ if environ is None else environ
    for var in ENVIRONMENT_VARS:
        value = env.get(var)
        if value and value.strip():
            return value.strip().lower()
    return DEFAULT_ENVIRONMENT


def is_production(environ: Mapping[str, str] | None = None) -> bool:
    """Check whether the environment is production-like."""
    return get_environment_name(environ) in PRODUCTION_ENVIRONMENTS

