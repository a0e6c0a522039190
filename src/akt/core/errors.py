"""Error types shared by the loaders and the audit use case."""

from __future__ import annotations


class AktError(Exception):
    """Base class for errors raised by akt."""


class SourceUnavailableError(AktError):
    """A log source or key file could not be read. Aborts the audit."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"unable to read '{source}': {reason}")


class FingerprintError(AktError):
    """A single public key line could not be fingerprinted."""
