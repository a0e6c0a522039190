"""Latest successful login per key fingerprint."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from akt.core.fingerprint import KeyFingerprint
from akt.core.log_parser import LoginAttempt

logger = logging.getLogger(__name__)

CorrelationIndex = dict[str, LoginAttempt]


def _rank(attempt: LoginAttempt) -> tuple:
    # Latest timestamp first; the remaining fields only break ties
    return (
        attempt.timestamp,
        attempt.source or "",
        attempt.key_offset,
        attempt.username,
        attempt.source_ip or "",
        attempt.port or 0,
        attempt.key_type,
        attempt.fingerprint_algorithm,
    )


def _fold(index: CorrelationIndex, attempt: LoginAttempt) -> None:
    saved = index.get(attempt.fingerprint)
    if saved is None or _rank(saved) < _rank(attempt):
        index[attempt.fingerprint] = attempt


def build_correlation_index(
    attempts: Iterable[LoginAttempt],
    fingerprint_universe: Iterable[KeyFingerprint],
) -> CorrelationIndex:
    """Collect the latest attempt for every fingerprint in the universe.

    Attempts for fingerprints outside the universe (keys no longer in the
    authorized_keys file) are dropped. Fingerprints are compared as plain
    strings; the algorithm fields are not cross-checked. The result does not
    depend on the order of attempts.
    """
    known = {fp.fingerprint for fp in fingerprint_universe}
    index: CorrelationIndex = {}

    for attempt in attempts:
        if attempt.fingerprint in known:
            logger.info("fingerprint '%s' from auth log was found in authorized_keys file",
                        attempt.fingerprint)
            _fold(index, attempt)
        else:
            logger.info("fingerprint '%s' from auth log wasn't found in authorized_keys file",
                        attempt.fingerprint)

    return index


def merge_correlation_indexes(*indexes: CorrelationIndex) -> CorrelationIndex:
    """Merge indexes built from separate log sources, keeping the latest attempt."""
    merged: CorrelationIndex = {}
    for index in indexes:
        for attempt in index.values():
            _fold(merged, attempt)
    return merged
