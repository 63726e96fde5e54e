"""Typer CLI entry point for repo-showcase."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from repo_showcase import __version__
from repo_showcase.api.server import run_server
from repo_showcase.config import Settings, build_cache, format_validation_error
from repo_showcase.exceptions import UpstreamUnavailable
from repo_showcase.logging import configure_logging

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="repo-showcase",
    help="Cached GitHub repository listings for portfolio sites.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config YAML file."),
]
AccountOption = Annotated[
    str | None,
    typer.Option("--account", "-a", help="GitHub account (defaults to config)."),
]


def _load_settings(
    config_path: Path | None = None,
    **overrides: Any,
) -> Settings:
    """Load settings and configure logging, exiting on invalid configuration."""
    try:
        settings = Settings.load(config_path=config_path, **overrides)
    except ValidationError as exc:
        err_console.print(
            Panel(
                format_validation_error(exc),
                title="Configuration Error",
                border_style="red",
            )
        )
        raise typer.Exit(code=1) from exc

    configure_logging(
        level=settings.logging.level,
        fmt=settings.logging.format,
        log_file=settings.logging.file,
    )
    return settings


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]repo-showcase[/bold] {__version__}")
        raise typer.Exit


@app.callback()
def common(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """repo-showcase global options."""


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[
        int | None,
        typer.Option("--port", help="Port to bind the FastAPI server."),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Host/interface to bind the FastAPI server."),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Run the repo-showcase API server with the refresh scheduler."""
    settings = _load_settings(config)
    if port is not None:
        settings.api.port = port
    if host is not None:
        settings.api.host = host
    logger.info("starting_server", host=settings.api.host, port=settings.api.port)
    run_server(settings)


@app.command()
def repos(
    account: AccountOption = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the listing as JSON."),
    ] = False,
    config: ConfigOption = None,
) -> None:
    """Fetch and print the featured repositories for an account."""
    settings = _load_settings(config)
    cache = build_cache(settings)
    try:
        listing = cache.fetch_pinned_listing(account or settings.github.account)
    finally:
        cache.close()

    if as_json:
        payload = {
            "source": listing.source.value,
            "repos": [repo.model_dump(by_alias=True) for repo in listing.repos],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=f"Repositories ({listing.source.value})", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Language")
    table.add_column("Stars", justify="right")
    table.add_column("Updated")
    table.add_column("Description")
    for repo in listing.repos:
        table.add_row(
            repo.name,
            repo.language,
            str(repo.star_count),
            repo.updated_at[:10],
            repo.description,
        )
    console.print(table)


@app.command()
def profile(
    account: AccountOption = None,
    config: ConfigOption = None,
) -> None:
    """Fetch and print the GitHub profile for an account."""
    settings = _load_settings(config)
    cache = build_cache(settings)
    try:
        result = cache.fetch_profile(account or settings.github.account)
    except UpstreamUnavailable as exc:
        err_console.print(f"[red]GitHub profile unavailable:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        cache.close()

    table = Table(title=result.login, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field_name, value in result.model_dump().items():
        table.add_row(field_name, "" if value is None else str(value))
    console.print(table)


@app.command(name="config")
def show_config(config: ConfigOption = None) -> None:
    """Print the resolved configuration (secrets masked)."""
    settings = _load_settings(config)
    typer.echo(settings.model_dump_json(indent=2))


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
