"""Authorized key CLI commands."""

from __future__ import annotations

import logging
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from akt.cli.output import OutputFormat, print_keys, print_report
from akt.config import settings
from akt.core.audit import get_keys_older_than
from akt.core.authorized_keys import get_authorized_keys_from_file
from akt.core.errors import SourceUnavailableError
from akt.core.fingerprint import SUPPORTED_ALGORITHMS
from akt.core.log_reader import LOG_SOURCES, get_auth_logs_provider

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)

EXIT_CODE_ERROR = 1


def _fail(e: Exception) -> NoReturn:
    err_console.print(f"[red]{escape(str(e))}[/red]")
    raise typer.Exit(EXIT_CODE_ERROR)


def _check_choice(value: str, choices: tuple[str, ...], option: str) -> str:
    value = value.lower()
    if value not in choices:
        raise typer.BadParameter(f"expected one of: {', '.join(choices)}", param_hint=option)
    return value


def _audit(
    older_than_days: int,
    file_path: str | None,
    auth_log_path: str | None,
    log_source: str | None,
    fingerprint_algorithm: str | None,
    output_format: OutputFormat,
):
    file_path = file_path or settings.authorized_keys_path
    log_source = _check_choice(log_source or settings.log_source, LOG_SOURCES, "--log-source")
    algorithm = _check_choice(
        fingerprint_algorithm or settings.fingerprint_algorithm,
        SUPPORTED_ALGORITHMS,
        "--fingerprint-algorithm",
    )

    provider = get_auth_logs_provider(
        log_source,
        auth_log_path or settings.auth_log_path,
        settings.journalctl_command,
    )
    logger.info("path to authorized_keys file '%s'", file_path)

    try:
        report = get_keys_older_than(provider, older_than_days, file_path, algorithm=algorithm)
    except SourceUnavailableError as e:
        _fail(e)

    print_report(report, output_format)


def show_keys(
    older_than_days: int | None = typer.Option(
        None, "--older-than-days", min=0,
        help="Show only keys last used more than this many days ago",
    ),
    file_path: str | None = typer.Option(None, "--file-path", help="Path to authorized_keys file"),
    auth_log_path: str | None = typer.Option(
        None, "--auth-log-path", help="Auth log file or directory (default: /var/log)",
    ),
    log_source: str | None = typer.Option(None, "--log-source", help="Log source: file or journal"),
    fingerprint_algorithm: str | None = typer.Option(
        None, "--fingerprint-algorithm", help="Fingerprint hash: sha256 or md5",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.DEFAULT, "--format", help="Output format"),
):
    """Show authorized keys, or with --older-than-days only the unused ones."""
    logger.info("command: show public keys")

    if older_than_days is not None:
        _audit(older_than_days, file_path, auth_log_path, log_source,
               fingerprint_algorithm, output_format)
        return

    file_path = file_path or settings.authorized_keys_path
    logger.info("path to authorized_keys file '%s'", file_path)
    try:
        keys = get_authorized_keys_from_file(file_path)
    except SourceUnavailableError as e:
        _fail(e)

    algorithm = _check_choice(
        fingerprint_algorithm or settings.fingerprint_algorithm,
        SUPPORTED_ALGORITHMS,
        "--fingerprint-algorithm",
    )
    print_keys(keys, output_format, algorithm)


def audit(
    older_than_days: int = typer.Option(
        settings.older_than_days, "--older-than-days", min=0,
        help="Report keys last used more than this many days ago",
    ),
    file_path: str | None = typer.Option(None, "--file-path", help="Path to authorized_keys file"),
    auth_log_path: str | None = typer.Option(
        None, "--auth-log-path", help="Auth log file or directory (default: /var/log)",
    ),
    log_source: str | None = typer.Option(None, "--log-source", help="Log source: file or journal"),
    fingerprint_algorithm: str | None = typer.Option(
        None, "--fingerprint-algorithm", help="Fingerprint hash: sha256 or md5",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.DEFAULT, "--format", help="Output format"),
):
    """Report authorized keys unused for longer than the threshold."""
    logger.info("command: audit public keys")
    _audit(older_than_days, file_path, auth_log_path, log_source,
           fingerprint_algorithm, output_format)
