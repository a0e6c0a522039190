"""Result rendering for the CLI."""

from __future__ import annotations

import enum
import json

import typer
from rich.console import Console
from rich.table import Table

from akt.core.authorized_keys import AuthorizedKey
from akt.core.errors import FingerprintError
from akt.core.fingerprint import fingerprint_of
from akt.schemas.report import AuditReport, AuthorizedKeyItem

console = Console()


class OutputFormat(str, enum.Enum):
    DEFAULT = "default"
    JSON = "json"
    TABLE = "table"


def _key_line(item: AuthorizedKeyItem) -> str:
    if item.comment:
        return f"{item.key_type} {item.key} {item.comment}"
    return f"{item.key_type} {item.key}"


def print_keys(keys: list[AuthorizedKey], output_format: OutputFormat, algorithm: str = "sha256"):
    items = [AuthorizedKeyItem.model_validate(key) for key in keys]

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps([item.model_dump() for item in items], indent=2))
        return

    if output_format == OutputFormat.TABLE:
        table = Table(title="Authorized Keys")
        table.add_column("Line", style="dim")
        table.add_column("Type")
        table.add_column("Fingerprint")
        table.add_column("Comment")

        for key in keys:
            try:
                fingerprint = fingerprint_of(str(key), algorithm).fingerprint
            except FingerprintError:
                fingerprint = "-"
            table.add_row(str(key.origin_index + 1), key.key_type, fingerprint, key.comment or "-")

        console.print(table)
        return

    for item in items:
        typer.echo(_key_line(item))


def print_report(report: AuditReport, output_format: OutputFormat):
    if output_format == OutputFormat.JSON:
        typer.echo(report.model_dump_json(indent=2))
        return

    if output_format == OutputFormat.TABLE:
        if not report.candidates:
            console.print(
                f"[green]No keys unused for more than {report.days_threshold} day(s).[/green]"
            )
            return

        table = Table(title=f"Keys unused for more than {report.days_threshold} day(s)")
        table.add_column("Line", style="dim")
        table.add_column("Type")
        table.add_column("Fingerprint")
        table.add_column("Comment")
        table.add_column("Last Used")
        table.add_column("User")
        table.add_column("Days", justify="right")

        for item in report.candidates:
            table.add_row(
                str(item.origin_index + 1),
                item.key_type,
                item.fingerprint,
                item.comment or "-",
                item.last_used.strftime("%Y-%m-%d %H:%M:%S"),
                item.username or "-",
                str(item.days_since_use),
            )

        console.print(table)
        return

    for item in report.candidates:
        typer.echo(_key_line(item))
