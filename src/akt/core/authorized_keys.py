"""authorized_keys file parsing."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from akt.core.errors import SourceUnavailableError

logger = logging.getLogger(__name__)

KEY_TYPE_PREFIXES = ("ssh-", "ecdsa-sha2-", "sk-ssh-", "sk-ecdsa-sha2-")

_WHITESPACE_RE = re.compile(r"\s+")


class KeyKind(str, enum.Enum):
    RSA = "rsa"
    ED25519 = "ed25519"
    OTHER = "other"


@dataclass(frozen=True)
class AuthorizedKey:
    """One entry of an authorized_keys file.

    Equality is structural over (key_type, key, comment); the position in the
    file and the options block only serve traceability.
    """

    key_type: str
    key: str
    comment: str = ""
    origin_index: int = field(default=0, compare=False)
    options: str = field(default="", compare=False)

    @property
    def kind(self) -> KeyKind:
        if self.key_type == "ssh-rsa":
            return KeyKind.RSA
        if self.key_type == "ssh-ed25519":
            return KeyKind.ED25519
        return KeyKind.OTHER

    @property
    def canonical_key(self) -> tuple[str, str, str]:
        return (self.key_type, self.key, self.comment)

    def __str__(self) -> str:
        if self.comment:
            return f"{self.key_type} {self.key} {self.comment}"
        return f"{self.key_type} {self.key}"


def is_key_type(token: str) -> bool:
    return token.lower().startswith(KEY_TYPE_PREFIXES)


def split_options(line: str) -> tuple[str, str]:
    """Split a leading options block from an authorized_keys line.

    Options precede the key type and may contain quoted strings with spaces:
    command="/usr/bin/backup --dry-run",no-pty ssh-ed25519 AAAA... backup@ci

    Returns (options, rest); options is "" when the line starts with a key type.
    """
    first = line.split(None, 1)[0] if line.strip() else ""
    if not first or is_key_type(first):
        return "", line

    in_quotes = False
    for idx, char in enumerate(line):
        if char == '"' and (idx == 0 or line[idx - 1] != "\\"):
            in_quotes = not in_quotes
        elif char.isspace() and not in_quotes:
            return line[:idx], line[idx:].strip()
    return line, ""


def parse_authorized_key_line(line: str, origin_index: int = 0) -> AuthorizedKey | None:
    """Parse a single authorized_keys row, or None if it is not a key."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    options, rest = split_options(line)
    if options and not is_key_type(rest.split(None, 1)[0] if rest else ""):
        # no key type after the first token, so it wasn't an options block
        options, rest = "", line
    normalized_row = _WHITESPACE_RE.sub(" ", rest).strip()
    logger.debug("normalized row: '%s'", normalized_row)

    row_parts = normalized_row.split(" ", 2)
    if len(row_parts) < 2:
        logger.info("unsupported row format: '%s'", line)
        return None

    key_type = row_parts[0]
    if not is_key_type(key_type):
        logger.error("unsupported row header '%s' at line %d", key_type, origin_index + 1)
        return None

    return AuthorizedKey(
        key_type=key_type,
        key=row_parts[1],
        comment=row_parts[2] if len(row_parts) == 3 else "",
        origin_index=origin_index,
        options=options,
    )


def parse_authorized_keys(content: str) -> list[AuthorizedKey]:
    keys: list[AuthorizedKey] = []
    for index, row in enumerate(content.splitlines()):
        key = parse_authorized_key_line(row, index)
        if key is not None:
            keys.append(key)
    return keys


def get_authorized_keys_from_file(file_path: str | Path) -> list[AuthorizedKey]:
    """Load every key entry from an authorized_keys file.

    Raises SourceUnavailableError if the path is missing, is not a regular
    file, or cannot be read.
    """
    path = Path(file_path).expanduser()
    logger.info("get authorized keys from path '%s'", path)

    if not path.is_file():
        raise SourceUnavailableError(str(path), "file doesn't exist")

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceUnavailableError(str(path), e.strerror or str(e)) from e

    keys = parse_authorized_keys(content)
    logger.info("authorized keys loaded: %d", len(keys))
    return keys
