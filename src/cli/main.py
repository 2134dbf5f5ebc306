"""jellyfin-cleaner CLI (Typer).

The CLI only wires things together: settings, logging, the Jellyfin session
provider and the cleanup pipeline. Every decision lives in `core.services`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.jellyfin import JellyfinSessionProvider
from adapters.json_exporter import export_run_report
from cli import doctor
from cli.ui_components import build_summary_table, print_banner
from core.config import load_settings
from core.domain.errors import CleanerError, ConfigurationError
from core.logging_config import get_project_logger, setup_logging
from core.services.cleanup_pipeline import clean as run_clean

app = typer.Typer(
    no_args_is_help=True,
    help="Delete watched media older than a retention threshold from a Jellyfin/Emby server.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.command()
def clean(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="JSON config file (overrides environment variables).",
    ),
    test_mode: Optional[bool] = typer.Option(
        None,
        "--test-mode/--no-test-mode",
        help="Only log the items that would be deleted.",
    ),
    print_ignored: Optional[bool] = typer.Option(
        None,
        "--print-ignored/--no-print-ignored",
        help="Log items protected by the ignore lists.",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        min=1,
        help="Retention threshold in days.",
    ),
    report_json: Optional[Path] = typer.Option(
        None,
        "--report-json",
        dir_okay=False,
        help="Write the run result to this JSON file.",
    ),
    banner: bool = typer.Option(True, "--banner/--no-banner", help="Show the start banner."),
) -> None:
    """Run one cleanup pass."""

    try:
        settings = load_settings(
            config,
            retention_days=days,
            test_mode=test_mode,
            print_ignored=print_ignored,
        )
    except ConfigurationError as exc:
        setup_logging()
        get_project_logger().error(
            "Configuration error: %s",
            exc,
            extra={"payload": {"code": exc.code, "details": exc.details}},
        )
        _console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    setup_logging(settings)
    log = get_project_logger()

    if banner:
        print_banner(_console, dry_run=settings.test_mode)

    try:
        result = asyncio.run(run_clean(settings, JellyfinSessionProvider(logger=log), logger=log))
    except CleanerError as exc:
        log.error(
            "Cleanup aborted: %s",
            exc,
            extra={"payload": {"code": exc.code, "details": exc.details}},
        )
        raise typer.Exit(code=1) from exc

    _console.print(build_summary_table(result))

    if report_json is not None:
        out = export_run_report(result=result, output_path=report_json)
        _console.print(f"[green]Report saved to:[/green] {out}")


def run() -> None:
    app()
