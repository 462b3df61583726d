"""Entry point for running the ToolKeeper service.

Loads settings, configures logging and hands over to the startup
orchestrator. Configuration errors are reported before any logging is set
up, so a misconfigured process exits without writing log files.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from toolkeeper.app.config import (DEFAULT_CONFIG_FILE, ConfigurationError,
                                   Settings, load_settings)
from toolkeeper.app.startup import StartupError, StartupOrchestrator
from toolkeeper.infrastructure.observability import (configure_logging,
                                                     shutdown_logging)

console = Console()


def configure_from_settings(settings: Settings):
    cfg = settings.logging
    return configure_logging(
        directory=cfg.directory,
        file_name=cfg.file_name,
        console_level=cfg.console_level,
        file_level=cfg.file_level,
        retention_days=cfg.retention_days,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    envvar="TOOLKEEPER_CONFIG",
    show_default=True,
    help="Base JSON settings file.",
)
@click.option(
    "--environment",
    envvar="TOOLKEEPER_ENVIRONMENT",
    default=None,
    help="Environment name; overlays appsettings.<environment>.json.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path, environment: str | None) -> None:
    """Run the ToolKeeper API service."""
    try:
        settings = load_settings(config_path, environment=environment)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error: {escape(str(exc))}[/red]")
        ctx.exit(1)

    logger = configure_from_settings(settings)
    try:
        asyncio.run(StartupOrchestrator(settings, logger).run())
    except StartupError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        shutdown_logging()


if __name__ == "__main__":
    cli()
