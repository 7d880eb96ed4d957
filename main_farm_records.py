"""Mini README: Entry point CLI for launching the Dairy Ledger service.

This script exposes a Typer CLI that starts the FastAPI application under
uvicorn with configurable host, port and production flags. Defaults come
from ``DAIRYLEDGER_*`` environment variables via the settings model.
"""

from __future__ import annotations

import typer
import uvicorn

from dairyledger.configuration import get_settings
from dairyledger.logging_utils import configure_root_logger

cli = typer.Typer(help="Launch and manage the Dairy Ledger record-keeping service.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # 0.0.0.0 and :: are bind addresses, not something a browser can open.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        "Starting Dairy Ledger on "
        f"{effective_host}:{effective_port} ({settings.environment}).\n"
        "API available at "
        f"http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "dairyledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
        log_level=settings.log_level.lower(),
    )


@cli.command("settings")
def show_settings() -> None:
    """Print the effective configuration."""

    for name, value in get_settings().dict().items():
        typer.echo(f"{name}={value}")


if __name__ == "__main__":
    cli()
