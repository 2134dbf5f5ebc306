"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.jellyfin import JellyfinSessionProvider
from core.config import AppSettings, load_settings, write_user_env_vars
from core.domain.errors import CleanerError

app = typer.Typer(no_args_is_help=True, help="Configuration and server connectivity checks.")

_console = Console()


async def _check_server(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("/System/Info/Public")
        response.raise_for_status()
        info = response.json()
        return True, f"{info.get('ServerName', '?')} {info.get('Version', '')}".strip()
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _check_login(settings: AppSettings) -> tuple[bool, str]:
    try:
        session = await JellyfinSessionProvider().authenticate(settings)
        async with session:
            users = await session.list_users()
        return True, f"{len(users)} user(s) visible"
    except CleanerError as exc:
        return False, str(exc)


@app.command()
def check(
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
) -> None:
    """Validate the configuration and reach the server."""

    table = Table(title="jellyfin-cleaner doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        settings = load_settings(config)
    except CleanerError as exc:
        table.add_row("Configuration", "FAIL", str(exc))
        _console.print(table)
        raise typer.Exit(code=1) from exc

    table.add_row("Configuration", "OK", settings.connection.endpoint)
    table.add_row("Retention", "OK", f"{settings.retention_days} day(s)")
    table.add_row("Mode", "OK", "test (no deletes)" if settings.test_mode else "delete")
    if settings.connection.api_key:
        table.add_row("Auth", "WARN", "API key: may be read-only, deletes can fail")
    else:
        table.add_row("Auth", "OK", f"username/password ({settings.connection.username})")

    ok_server, detail_server = asyncio.run(_check_server(settings))
    table.add_row("Server", "OK" if ok_server else "FAIL", detail_server)

    ok_login = False
    if ok_server:
        ok_login, detail_login = asyncio.run(_check_login(settings))
        table.add_row("Login", "OK" if ok_login else "FAIL", detail_login)

    _console.print(table)
    if not (ok_server and ok_login):
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive connection setup (stored in the user config .env)."""

    endpoint = typer.prompt("Server URL", default="http://localhost:8096", show_default=True).strip()
    username = typer.prompt("Username").strip()
    password = typer.prompt("Password", hide_input=True, default="", show_default=False)

    if not endpoint or not username:
        raise typer.BadParameter("server URL and username are required")

    env_path = write_user_env_vars(
        {
            "JELLYFIN_CLEANER_CONNECTION__ENDPOINT": endpoint,
            "JELLYFIN_CLEANER_CONNECTION__USERNAME": username,
            "JELLYFIN_CLEANER_CONNECTION__PASSWORD": password,
        }
    )

    _console.print(f"[green]Saved connection config to:[/green] {env_path}")
