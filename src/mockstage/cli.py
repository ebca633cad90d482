"""
mockstage Command Line Interface.

This module provides the CLI entry points: fixture validation, flag
inspection, and one-off mock service calls.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mockstage.config import (
    ConfigurationError,
    FeatureFlagManager,
    LoggingConfig,
    MockStageConfig,
    get_valid_scenarios,
    load_config,
    normalize_scenario,
)
from mockstage.data import FixtureError, ResponseStore
from mockstage.models import FrankensteinMode, Locale, ResponseType
from mockstage.services import (
    MockAIAnalysisService,
    MockFrankensteinService,
    MockServiceError,
    PreconditionError,
)
from mockstage.version import __version__

console = Console()

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

TYPE_CHOICE = click.Choice([t.value for t in ResponseType])


def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.run(coro)


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure stdlib logging for CLI runs.

    Args:
        config: Logging configuration
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.value)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    log_format = (
        "%(message)s"
        if config.json_format
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logging.basicConfig(level=level, format=log_format, handlers=handlers, force=True)
    logging.getLogger("mockstage").setLevel(level)


def _load_config_or_exit(config_path: str | None) -> MockStageConfig:
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def _get_config(ctx: click.Context) -> MockStageConfig:
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = _load_config_or_exit(ctx.obj.get("config_path"))
    return ctx.obj["config"]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="mockstage")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """mockstage: Scenario-Driven Mock AI Backend.

    Validate fixture files, inspect mock-mode flags and run mock service
    calls without a live AI provider.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(_get_config(ctx).logging, verbose=verbose)


# =============================================================================
# Fixture validation
# =============================================================================


def _validate_type(store: ResponseStore, response_type: ResponseType, verbose: bool) -> bool:
    """Validate one response type and print its summary.

    Returns:
        True if every variant is valid
    """
    console.print(f"\n[bold]Validating {response_type.value} mock responses...[/bold]")

    try:
        results = store.validate_all_responses(response_type)
    except FixtureError as e:
        console.print(f"  [red]Failed to validate {response_type.value}:[/red] {e}")
        return False

    total_variants = 0
    failed_variants = 0
    for scenario, scenario_results in results.items():
        total_variants += len(scenario_results)
        failed = [r for r in scenario_results if not r.valid]
        failed_variants += len(failed)

        if failed:
            console.print(f"  [red]✗ Scenario: {scenario}[/red]")
            for result in failed:
                if verbose:
                    for error in result.errors:
                        console.print(f"      - {error}", markup=False)
                else:
                    console.print(f"      {len(result.errors)} validation error(s)")
        elif verbose:
            console.print(
                f"  [green]✓ Scenario: {scenario}[/green] ({len(scenario_results)} variant(s))"
            )

    success_rate = (
        (total_variants - failed_variants) / total_variants * 100 if total_variants else 0.0
    )

    summary_table = Table(title=f"{response_type.value} summary", show_header=False, box=None)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Total scenarios", str(len(results)))
    summary_table.add_row("Total variants", str(total_variants))
    summary_table.add_row("Failed variants", str(failed_variants))
    summary_table.add_row("Success rate", f"{success_rate:.1f}%")
    console.print(summary_table)

    if failed_variants == 0 and total_variants > 0:
        console.print(f"  [green]All {response_type.value} mock responses are valid![/green]")
        return True
    return False


def run_validation(
    data_dir: str | Path | None,
    response_type: str | None,
    strict: bool,
    verbose: bool,
) -> int:
    """Validate fixture files and return the process exit code.

    Args:
        data_dir: Fixture directory (bundled fixtures when None)
        response_type: Single type to validate, or None for all
        strict: Exit 1 when any variant fails
        verbose: Print per-field errors

    Returns:
        0 on success or non-strict failure, 1 on strict failure
    """
    console.print(Panel("[bold blue]Mock Response Validation[/bold blue]"))

    # Load without validating; validation is reported here instead
    store = ResponseStore(data_dir, validate_on_load=False)
    types = [ResponseType(response_type)] if response_type else list(ResponseType)

    all_valid = True
    for rtype in types:
        all_valid = _validate_type(store, rtype, verbose) and all_valid

    console.print()
    if all_valid:
        console.print("[bold green]All mock responses are valid![/bold green]")
        return 0

    console.print("[bold red]Some mock responses have validation errors.[/bold red]")
    if strict:
        console.print("[dim]Exiting with error code due to --strict flag.[/dim]")
        return 1

    console.print("[dim]Run with --strict to exit with an error code on validation failure.[/dim]")
    if not verbose:
        console.print("[dim]Run with --verbose to see detailed error messages.[/dim]")
    return 0


_validate_options = [
    click.option(
        "--type",
        "-t",
        "response_type",
        type=TYPE_CHOICE,
        default=None,
        help="Validate a specific type only",
    ),
    click.option(
        "--strict",
        "-s",
        is_flag=True,
        help="Exit with error code if any validation fails",
    ),
    click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Show detailed validation results",
    ),
    click.option(
        "--data-dir",
        "-d",
        type=click.Path(exists=True, file_okay=False),
        default=None,
        help="Fixture directory (defaults to the configured or bundled fixtures)",
    ),
]


def validate_options(func):
    """Attach the shared validation options to a command."""
    for option in reversed(_validate_options):
        func = option(func)
    return func


@main.command()
@validate_options
@click.pass_context
def validate(
    ctx: click.Context,
    response_type: str | None,
    strict: bool,
    verbose: bool,
    data_dir: str | None,
) -> None:
    """Validate mock response fixture files against their schemas."""
    verbose = verbose or ctx.obj.get("verbose", False)
    cfg = _get_config(ctx)
    try:
        exit_code = run_validation(data_dir or cfg.data_dir, response_type, strict, verbose)
    except Exception as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)
    sys.exit(exit_code)


@click.command(context_settings=CONTEXT_SETTINGS)
@validate_options
def validate_mocks(
    response_type: str | None,
    strict: bool,
    verbose: bool,
    data_dir: str | None,
) -> None:
    """Mock Response Validation Tool.

    Validates every scenario and variant of the fixture files.
    """
    cfg = _load_config_or_exit(None)
    configure_logging(cfg.logging, verbose=verbose)
    try:
        exit_code = run_validation(data_dir or cfg.data_dir, response_type, strict, verbose)
    except Exception as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)
    sys.exit(exit_code)


# =============================================================================
# Flags
# =============================================================================


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Display resolved mock-mode flags and validate the environment."""
    cfg = _get_config(ctx)
    flags = FeatureFlagManager(defaults=cfg.flags)

    console.print(Panel("[bold blue]mockstage Configuration[/bold blue]", title="Configuration"))

    console.print("[bold]General[/bold]")
    console.print(f"  Environment: {flags.environment_name}")
    console.print(f"  Data Directory: {cfg.data_dir or '(bundled fixtures)'}")
    console.print(f"  Cache TTL: {cfg.cache_ttl}s")
    console.print(f"  Log Level: {cfg.logging.level.value}")
    console.print()

    flag_table = Table(title="Feature Flags")
    flag_table.add_column("Flag", style="cyan")
    flag_table.add_column("Value", style="green")
    for name, value in flags.get_all_flags().items():
        flag_table.add_row(name, value if value is not None else "[dim]unset[/dim]")
    console.print(flag_table)
    console.print()

    service_config = flags.get_mock_service_config()
    console.print("[bold]Mock Mode[/bold]")
    console.print(f"  Enabled: {flags.is_mock_mode_enabled()}")
    console.print(f"  Scenario: {service_config.default_scenario.value}")
    console.print(f"  Variability: {service_config.enable_variability}")
    console.print(
        f"  Simulate Latency: {service_config.simulate_latency} "
        f"({service_config.min_latency}-{service_config.max_latency}ms)"
    )
    console.print(f"  Log Requests: {service_config.log_requests}")
    console.print(f"  Strict Validation: {flags.is_strict_validation()}")
    console.print()

    validation = flags.validate_environment()
    for warning in validation.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    for error in validation.errors:
        console.print(f"[red]Error:[/red] {error}")
    if not validation.is_valid:
        sys.exit(1)
    console.print("[green]Environment is valid.[/green]")


# =============================================================================
# Mock service calls
# =============================================================================


def _build_service(ctx: click.Context, service_cls, scenario: str | None, data_dir: str | None):
    cfg = _get_config(ctx)
    flags = FeatureFlagManager(defaults=cfg.flags)
    service_config = flags.get_mock_service_config()
    if scenario is not None:
        service_config = service_config.model_copy(
            update={"default_scenario": normalize_scenario(scenario)}
        )
    store = ResponseStore(
        data_dir or cfg.data_dir,
        cache_ttl=cfg.cache_ttl,
        strict=flags.is_strict_validation(),
    )
    return service_cls(
        store,
        service_config,
        log_performance=flags.is_performance_logging(),
        json_logs=cfg.logging.json_format,
    )


def _run_service_call(coro) -> None:
    try:
        result = run_async(coro)
    except PreconditionError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        sys.exit(2)
    except MockServiceError as e:
        console.print(f"[red]{e.code} ({e.status_code}):[/red] {e}")
        sys.exit(1)
    except FixtureError as e:
        console.print(f"[red]Fixture error:[/red] {e}")
        sys.exit(1)
    console.print_json(data=result.model_dump(mode="json"))


_scenario_option = click.option(
    "--scenario",
    type=click.Choice(get_valid_scenarios()),
    default=None,
    help="Scenario to follow (defaults to FF_MOCK_SCENARIO)",
)

_data_dir_option = click.option(
    "--data-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Fixture directory",
)


@main.command()
@click.argument("elements", nargs=-1, required=True)
@click.option(
    "--mode",
    "-m",
    type=click.Choice([m.value for m in FrankensteinMode]),
    default=FrankensteinMode.COMPANIES.value,
    help="Generation mode",
)
@click.option(
    "--language",
    "-l",
    type=click.Choice([loc.value for loc in Locale]),
    default=Locale.EN.value,
    help="Response language",
)
@_scenario_option
@_data_dir_option
@click.pass_context
def frankenstein(
    ctx: click.Context,
    elements: tuple[str, ...],
    mode: str,
    language: str,
    scenario: str | None,
    data_dir: str | None,
) -> None:
    """Generate a mock Frankenstein idea from ELEMENTS.

    Each element is a name, optionally followed by ":description".
    """
    parsed = []
    for element in elements:
        name, _, description = element.partition(":")
        parsed.append({"name": name.strip(), "description": description.strip() or None})

    service = _build_service(ctx, MockFrankensteinService, scenario, data_dir)
    _run_service_call(service.generate_frankenstein_idea(parsed, mode, language))


@main.command()
@click.argument("idea")
@click.option(
    "--locale",
    "-l",
    type=click.Choice([loc.value for loc in Locale]),
    default=Locale.EN.value,
    help="Response language",
)
@_scenario_option
@_data_dir_option
@click.pass_context
def analyze(
    ctx: click.Context,
    idea: str,
    locale: str,
    scenario: str | None,
    data_dir: str | None,
) -> None:
    """Run a mock analysis of IDEA."""
    service = _build_service(ctx, MockAIAnalysisService, scenario, data_dir)
    _run_service_call(service.analyze_idea(idea, locale))


if __name__ == "__main__":
    main()
