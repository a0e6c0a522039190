"""Auth log sources: log files on disk and the systemd journal."""

from __future__ import annotations

import gzip
import logging
import re
import shlex
import subprocess
import zlib
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Protocol

from akt.core.errors import SourceUnavailableError
from akt.core.log_parser import JOURNALD_SOURCE, LoginAttempt, parse_journalctl_output, parse_log

logger = logging.getLogger(__name__)

# auth.log, auth.log.1, auth.log.2.gz, secure, secure-20240105, syslog.0 ...
_LOG_NAME_RE = re.compile(r"^(?:auth\.log|secure|syslog)(?:\.\d+|-\d{8})?(?:\.gz)?$")

LOG_SOURCES = ("file", "journal")


class AuthLogsProvider(Protocol):
    """Anything that can hand out successful key logins, one batch per source."""

    name: str

    def read_batches(self) -> Iterator[tuple[str, list[LoginAttempt]]]: ...


class FileAuthLogsProvider:
    """Reads a single log file, or every auth log found in a directory.

    Rotated files (auth.log.1, secure-20240105, *.gz) are included and read
    oldest first. Each file's mtime anchors the year of its syslog timestamps.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self.name = str(self.path)

    def log_files(self) -> list[Path]:
        if not self.path.exists():
            raise SourceUnavailableError(str(self.path), "path doesn't exist")

        if self.path.is_file():
            return [self.path]

        try:
            candidates = [
                p for p in self.path.iterdir()
                if p.is_file() and _LOG_NAME_RE.match(p.name)
            ]
            return sorted(candidates, key=lambda p: p.stat().st_mtime)
        except OSError as e:
            raise SourceUnavailableError(str(self.path), e.strerror or str(e)) from e

    def read_batches(self) -> Iterator[tuple[str, list[LoginAttempt]]]:
        files = self.log_files()
        if not files:
            logger.warning("no auth log files found in '%s'", self.path)
            return

        for log_file in files:
            content, mtime = self._read(log_file)
            attempts = parse_log(content, reference_time=mtime, source=str(log_file))
            logger.info("success login attempts in '%s': %d", log_file, len(attempts))
            yield str(log_file), attempts

    @staticmethod
    def _read(log_file: Path) -> tuple[str, datetime]:
        try:
            mtime = datetime.fromtimestamp(log_file.stat().st_mtime)
            if log_file.suffix == ".gz":
                with gzip.open(log_file, "rt", encoding="utf-8", errors="replace") as f:
                    return f.read(), mtime
            return log_file.read_text(encoding="utf-8", errors="replace"), mtime
        except (OSError, EOFError, zlib.error) as e:
            raise SourceUnavailableError(str(log_file), str(e)) from e


class JournalctlAuthLogsProvider:
    """Reads sshd records from the systemd journal via journalctl."""

    name = JOURNALD_SOURCE

    def __init__(self, command: str = "journalctl"):
        self.command = command

    def build_command(self) -> list[str]:
        return shlex.split(self.command) + [
            "-o", "json", "--no-pager",
            "SYSLOG_IDENTIFIER=sshd", "SYSLOG_IDENTIFIER=sshd-session",
        ]

    def read_batches(self) -> Iterator[tuple[str, list[LoginAttempt]]]:
        cmd = self.build_command()
        logger.debug("running %s", cmd)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise SourceUnavailableError(JOURNALD_SOURCE, str(e)) from e

        if result.returncode != 0:
            reason = result.stderr.strip() or f"journalctl exited with {result.returncode}"
            raise SourceUnavailableError(JOURNALD_SOURCE, reason)

        attempts = parse_journalctl_output(result.stdout)
        logger.info("success login attempts in journal: %d", len(attempts))
        yield JOURNALD_SOURCE, attempts


def successful_key_logins(source: AuthLogsProvider) -> list[LoginAttempt]:
    """Every successful public key login the source knows about."""
    attempts: list[LoginAttempt] = []
    for _, batch in source.read_batches():
        attempts.extend(batch)
    return attempts


def get_auth_logs_provider(
    kind: str,
    path: str | Path | None = None,
    journalctl_command: str = "journalctl",
) -> AuthLogsProvider:
    if kind == "journal":
        return JournalctlAuthLogsProvider(journalctl_command)
    if kind == "file":
        if path is None:
            raise ValueError("a log path is required for file log sources")
        return FileAuthLogsProvider(path)
    raise ValueError(f"unknown log source: {kind}")
