"""Selection of authorized keys that have not been used recently."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from akt.core.authorized_keys import AuthorizedKey
from akt.core.correlation import CorrelationIndex, build_correlation_index
from akt.core.errors import FingerprintError
from akt.core.fingerprint import KeyFingerprint, fingerprint_of
from akt.core.log_parser import LoginAttempt

logger = logging.getLogger(__name__)


def days_since(timestamp: datetime, now: datetime) -> int:
    """Whole days elapsed between timestamp and now."""
    return (now - timestamp).days


def get_key_candidates_for_removal(
    authorized_keys: Sequence[AuthorizedKey],
    attempts_map: CorrelationIndex,
    days_threshold: int,
    *,
    now: datetime | None = None,
    algorithm: str = "sha256",
) -> list[AuthorizedKey]:
    """Return keys whose latest successful login is older than days_threshold.

    A key is a candidate when more than days_threshold whole days have passed
    since its latest login; exactly days_threshold days is still fresh. Keys
    with no recorded login are never candidates: an unused key can't be told
    apart from one whose logins rotated out of the available logs.

    Output keeps the order of authorized_keys with structural duplicates
    dropped. Keys that can't be fingerprinted are logged and skipped.
    """
    if days_threshold < 0:
        raise ValueError("days_threshold must be a non-negative integer")

    logger.info("get key candidates for removal, days threshold: %d", days_threshold)
    logger.debug("authorized keys: %d", len(authorized_keys))
    logger.debug("attempts map: %d", len(attempts_map))

    now = now or datetime.now()
    candidates: dict[tuple[str, str, str], AuthorizedKey] = {}

    for authorized_key in authorized_keys:
        try:
            actual_fingerprint = fingerprint_of(str(authorized_key), algorithm).fingerprint
        except FingerprintError as e:
            logger.error("unable to parse key at line %d: %s", authorized_key.origin_index + 1, e)
            continue

        latest_login_attempt = attempts_map.get(actual_fingerprint)
        if latest_login_attempt is None:
            logger.info("key with fingerprint '%s' has no recorded login, skipping",
                        actual_fingerprint)
            continue

        since = days_since(latest_login_attempt.timestamp, now)
        logger.debug("key with fingerprint '%s' last used %d day(s) ago", actual_fingerprint, since)

        if since > days_threshold and authorized_key.canonical_key not in candidates:
            candidates[authorized_key.canonical_key] = authorized_key
            logger.info("key with fingerprint '%s' was added to candidate list", actual_fingerprint)

    return list(candidates.values())


def classify_stale_keys(
    authorized_keys: Sequence[AuthorizedKey],
    attempts: Iterable[LoginAttempt],
    fingerprint_universe: Iterable[KeyFingerprint],
    days_threshold: int,
    *,
    now: datetime | None = None,
    algorithm: str = "sha256",
) -> list[AuthorizedKey]:
    """Correlate login attempts with the key universe and classify every key."""
    attempts_map = build_correlation_index(attempts, fingerprint_universe)
    return get_key_candidates_for_removal(
        authorized_keys, attempts_map, days_threshold, now=now, algorithm=algorithm,
    )
