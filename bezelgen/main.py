from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import typer

from bezelgen.config import Settings, get_settings
from bezelgen.docs import generate_docs
from bezelgen.errors import BezelGenError
from bezelgen.orchestrator import run_generate, run_single_device
from bezelgen.reporter import print_batch_summary
from bezelgen.utils.console import ConsoleWriter
from bezelgen.utils.logging import configure_logging, rotate_log_file

app = typer.Typer(help="Tools for generating and documenting BezelKit device data.")


def _effective_settings(**overrides: Any) -> Settings:
    update: Dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}
    return get_settings().model_copy(update=update)


def _start_logging(settings: Settings) -> None:
    log_file = rotate_log_file(settings.log_dir) if settings.verbose else None
    configure_logging(
        level=settings.log_level,
        json_logs=settings.json_logs,
        log_file=log_file,
        stream=False,
    )


def _fail(writer: ConsoleWriter, exc: Exception) -> NoReturn:
    writer.error(str(exc))
    raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def _default(ctx: typer.Context) -> None:
    """
    Runs `generate` when no subcommand is given.
    """
    if ctx.invoked_subcommand is None:
        _generate({})


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"database={settings.database_path} output={settings.output_path} | "
        f"project={settings.project_path} scheme={settings.scheme} bundle={settings.bundle_id} | "
        f"settle={settings.launch_settle_seconds:g}s/{settings.teardown_settle_seconds:g}s"
    )


@app.command()
def generate(
    database: Optional[Path] = typer.Option(
        None, "--database", help="Path to the Apple device database JSON file."
    ),
    project: Optional[Path] = typer.Option(
        None, "--project", help="Path to the FetchBezel Xcode project."
    ),
    scheme: Optional[str] = typer.Option(
        None, "--scheme", help="Scheme name for the FetchBezel Xcode project."
    ),
    bundle_id: Optional[str] = typer.Option(
        None, "--bundle-id", "-b", help="Bundle ID for the FetchBezel app."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", help="Output path for the minified bezel.min.json package resource."
    ),
    app_output: Optional[Path] = typer.Option(
        None, "--app-output", help="Output directory for Xcode build artifacts."
    ),
    verbose: Optional[bool] = typer.Option(
        None,
        "--verbose/--no-verbose",
        help="Enable verbose logging. Use --no-verbose to silence output.",
    ),
) -> None:
    """
    Extract bezel (corner radius) data from iOS simulators into the database.
    """
    _generate(
        {
            "database_path": database,
            "project_path": project,
            "scheme": scheme,
            "bundle_id": bundle_id,
            "output_path": output,
            "app_output_dir": app_output,
            "verbose": verbose,
        }
    )


def _generate(overrides: Dict[str, Any]) -> None:
    settings = _effective_settings(**overrides)
    _start_logging(settings)
    writer = ConsoleWriter(verbose=settings.verbose)

    try:
        report = run_generate(settings, writer=writer)
    except BezelGenError as exc:
        _fail(writer, exc)

    if settings.verbose and report.batch.outcomes:
        print_batch_summary(report.batch)


@app.command("generate-docs")
def generate_docs_command(
    input_path: Optional[Path] = typer.Option(
        None, "--input", help="Path to the minified bezel.min.json input file."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", help="Output path for SupportedDeviceList.md."
    ),
) -> None:
    """
    Generate SupportedDeviceList.md from the minified bezel.min.json resource.
    """
    settings = _effective_settings(docs_input_path=input_path, docs_output_path=output)
    writer = ConsoleWriter(verbose=True)
    try:
        target = generate_docs(settings.docs_input_path, settings.docs_output_path)
    except (BezelGenError, OSError) as exc:
        _fail(writer, exc)
    typer.echo(f"Generated: {target}")


@app.command("test")
def test_device(
    name: str = typer.Option(
        ..., "--name", "-n", help='Simulator display name to test (e.g. "iPhone 16 Pro").'
    ),
    project: Optional[Path] = typer.Option(None, "--project"),
    scheme: Optional[str] = typer.Option(None, "--scheme"),
    bundle_id: Optional[str] = typer.Option(None, "--bundle-id", "-b"),
    app_output: Optional[Path] = typer.Option(None, "--app-output"),
) -> None:
    """
    Run the simulator pipeline on one device without touching the database.
    """
    settings = _effective_settings(
        project_path=project,
        scheme=scheme,
        bundle_id=bundle_id,
        app_output_dir=app_output,
        verbose=True,
    )
    _start_logging(settings)
    writer = ConsoleWriter(verbose=True)
    try:
        outcome = run_single_device(name, settings, writer=writer)
    except BezelGenError as exc:
        _fail(writer, exc)
    if not outcome.succeeded:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
