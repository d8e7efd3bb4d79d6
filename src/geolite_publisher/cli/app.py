"""Typer CLI root application."""

import typer

from geolite_publisher.core.config import get_settings
from geolite_publisher.core.logging import setup_logging

app = typer.Typer(name="geolite-publisher", help="Republish MaxMind GeoLite2 databases to npm and R2")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_commands() -> None:
    """Register all CLI commands."""
    from geolite_publisher.cli.publish_cmd import editions_command, run_command

    app.command("run")(run_command)
    app.command("editions")(editions_command)


_register_commands()


def main() -> None:
    """Console script entry point."""
    app()
