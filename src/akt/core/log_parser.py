"""sshd auth log parsing for successful public key logins.

Handles Debian/Ubuntu (/var/log/auth.log) and RHEL (/var/log/secure) syslog
files, AIX syslog, RFC 3339 timestamped rsyslog output and journald JSON.
All timestamps are returned as naive host-local datetimes.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from akt.core.fingerprint import fingerprint_algorithm

logger = logging.getLogger(__name__)

JOURNALD_SOURCE = "journald"


@dataclass(frozen=True)
class LoginAttempt:
    """A successful public key authentication recorded by sshd."""

    timestamp: datetime
    fingerprint: str  # as logged: SHA256:xxx or MD5:xx:xx:...
    fingerprint_algorithm: str  # SHA256 | MD5
    username: str = ""
    key_type: str = ""  # sshd label: RSA, ED25519, ECDSA, ...
    key_offset: int = 0  # byte offset of the record in its source
    source_ip: str | None = None
    port: int | None = None
    source: str | None = None


# Accepted publickey for root from 10.0.0.1 port 52222 ssh2: RSA SHA256:abcd1234
_ACCEPTED_MESSAGE = (
    r"Accepted\s+publickey\s+"
    r"for\s+(?P<username>\S+)\s+"
    r"from\s+(?P<ip>[\d.]+|[0-9a-fA-F:]+)\s+"
    r"port\s+(?P<port>\d+)"
    r"(?:\s+ssh2)?:\s+(?P<key_type>\S+)\s+(?P<fingerprint>\S+)"
)

_SSHD = r"sshd(?:-session)?\[(?P<pid>\d+)\]:\s+"

_ACCEPTED_MESSAGE_RE = re.compile(_ACCEPTED_MESSAGE)

# Format: Mon DD HH:MM:SS hostname sshd[PID]: message
_SYSLOG_ACCEPTED_RE = re.compile(
    r"(?P<timestamp>\w{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})\s+"
    r"(?P<hostname>\S+)\s+" + _SSHD + _ACCEPTED_MESSAGE
)

# AIX: timestamp hostname auth|security:info sshd[PID]: message
_AIX_ACCEPTED_RE = re.compile(
    r"(?P<timestamp>\w{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})\s+"
    r"(?P<hostname>\S+)\s+(?:auth|security)[|:]\S*\s+" + _SSHD + _ACCEPTED_MESSAGE
)

# rsyslog RFC 3339: 2024-01-05T14:23:01.123456+01:00 hostname sshd[PID]: message
_RFC3339_ACCEPTED_RE = re.compile(
    r"(?P<timestamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)\s+"
    r"(?P<hostname>\S+)\s+" + _SSHD + _ACCEPTED_MESSAGE
)

_PATTERNS = (
    (_SYSLOG_ACCEPTED_RE, "syslog"),
    (_AIX_ACCEPTED_RE, "syslog"),
    (_RFC3339_ACCEPTED_RE, "rfc3339"),
)


def _local_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def _parse_syslog_timestamp(ts_str: str, reference_time: datetime | None = None) -> datetime:
    """Parse a syslog timestamp (e.g., 'Jan  5 14:23:01') into a datetime.

    Syslog timestamps lack a year, so the reference time's year is used. A
    result more than a day past the reference time belongs to the previous
    year (the log spans a year boundary). Feb 29 that doesn't exist in the
    reference year is taken from the previous year.
    """
    reference_time = _local_naive(reference_time or datetime.now())

    # Normalize whitespace (syslog uses double space for single-digit days)
    ts_str = re.sub(r"\s+", " ", ts_str.strip())
    try:
        dt = datetime.strptime(f"{reference_time.year} {ts_str}", "%Y %b %d %H:%M:%S")
    except ValueError:
        return datetime.strptime(f"{reference_time.year - 1} {ts_str}", "%Y %b %d %H:%M:%S")

    if dt - reference_time > timedelta(days=1):
        dt = datetime.strptime(f"{reference_time.year - 1} {ts_str}", "%Y %b %d %H:%M:%S")

    return dt


def _parse_rfc3339_timestamp(ts_str: str) -> datetime:
    ts_str = ts_str.replace("Z", "+00:00")
    ts_str = re.sub(r"([+-]\d{2})(\d{2})$", r"\1:\2", ts_str)
    return _local_naive(datetime.fromisoformat(ts_str))


def _build_attempt(
    groups: dict[str, str],
    timestamp: datetime,
    offset: int,
    source: str | None,
) -> LoginAttempt:
    fingerprint = groups["fingerprint"]
    return LoginAttempt(
        timestamp=timestamp,
        fingerprint=fingerprint,
        fingerprint_algorithm=fingerprint_algorithm(fingerprint),
        username=groups["username"],
        key_type=groups["key_type"],
        key_offset=offset,
        source_ip=groups["ip"],
        port=int(groups["port"]) if groups.get("port") else None,
        source=source,
    )


def parse_line(
    line: str,
    reference_time: datetime | None = None,
    offset: int = 0,
    source: str | None = None,
) -> LoginAttempt | None:
    """Parse a single log line into a LoginAttempt.

    Returns None for anything other than a successful public key login, and
    for login lines whose timestamp cannot be read.
    """
    line = line.strip()
    if not line or "Accepted publickey" not in line:
        return None

    for pattern, ts_format in _PATTERNS:
        m = pattern.match(line)
        if not m:
            continue
        groups = m.groupdict()
        try:
            if ts_format == "rfc3339":
                timestamp = _parse_rfc3339_timestamp(groups["timestamp"])
            else:
                timestamp = _parse_syslog_timestamp(groups["timestamp"], reference_time)
        except ValueError as e:
            logger.warning("skipping login record with unreadable timestamp '%s': %s",
                           groups["timestamp"], e)
            return None
        return _build_attempt(groups, timestamp, offset, source)

    logger.debug("unrecognized login line: '%s'", line)
    return None


def parse_log(
    content: str,
    reference_time: datetime | None = None,
    source: str | None = None,
) -> list[LoginAttempt]:
    """Parse an entire log file content into a list of LoginAttempts."""
    attempts = []
    offset = 0
    for line in content.splitlines(keepends=True):
        attempt = parse_line(line, reference_time, offset, source)
        if attempt:
            attempts.append(attempt)
        offset += len(line.encode("utf-8"))
    return attempts


def parse_journalctl_json(json_line: str) -> LoginAttempt | None:
    """Parse a single journalctl JSON line into a LoginAttempt."""
    try:
        data = json.loads(json_line)
    except (json.JSONDecodeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None

    message = data.get("MESSAGE", "")
    if not isinstance(message, str) or not message:
        return None
    if data.get("SYSLOG_IDENTIFIER", "") not in ("sshd", "sshd-session"):
        return None

    m = _ACCEPTED_MESSAGE_RE.search(message)
    if not m:
        return None

    # __REALTIME_TIMESTAMP is microseconds since epoch
    ts_usec = data.get("__REALTIME_TIMESTAMP")
    try:
        timestamp = datetime.fromtimestamp(int(ts_usec) / 1_000_000)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning("skipping journald login record without a usable timestamp")
        return None

    return _build_attempt(m.groupdict(), timestamp, 0, JOURNALD_SOURCE)


def parse_journalctl_output(content: str) -> list[LoginAttempt]:
    """Parse multi-line journalctl JSON output into LoginAttempts."""
    attempts = []
    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue
        attempt = parse_journalctl_json(line)
        if attempt:
            attempts.append(attempt)
    return attempts
