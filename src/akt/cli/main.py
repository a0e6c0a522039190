"""CLI entry point."""

from __future__ import annotations

import logging
import sys

import typer

from akt import __version__
from akt.cli.key_commands import audit, show_keys
from akt.config import LOG_LEVELS, settings

LOG_FORMAT = "%(asctime)s [akt] %(levelname)s %(message)s"

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

app = typer.Typer(
    name="akt",
    help="Authorized Keys Tool for SSH.",
    no_args_is_help=True,
)

app.command("show-keys")(show_keys)
app.command("audit")(audit)


def init_logging(log_level: str) -> None:
    """Send akt logs to stderr at the given level; "off" silences them."""
    akt_logger = logging.getLogger("akt")
    level = log_level.lower()
    if level == "off":
        akt_logger.setLevel(logging.CRITICAL + 1)
        return

    logging.basicConfig(level=_LEVELS[level], format=LOG_FORMAT, stream=sys.stderr)
    akt_logger.setLevel(_LEVELS[level])


def _version_callback(value: bool):
    if value:
        typer.echo(f"akt {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str = typer.Option(
        settings.log_level, "--log-level",
        help=f"Logging level: {', '.join(LOG_LEVELS)}",
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit",
    ),
):
    """Find authorized keys that have not been used recently."""
    if log_level.lower() not in LOG_LEVELS:
        raise typer.BadParameter(f"expected one of: {', '.join(LOG_LEVELS)}",
                                 param_hint="--log-level")
    init_logging(log_level)


if __name__ == "__main__":
    app()
