"""Stale key audit: load keys and logins, correlate, classify."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from akt.core.authorized_keys import get_authorized_keys_from_file
from akt.core.correlation import build_correlation_index, merge_correlation_indexes
from akt.core.fingerprint import fingerprint_of, fingerprints_of_file
from akt.core.log_reader import AuthLogsProvider
from akt.core.staleness import days_since, get_key_candidates_for_removal
from akt.schemas.report import AuditReport, StaleKeyItem

logger = logging.getLogger(__name__)


def get_keys_older_than(
    auth_logs_provider: AuthLogsProvider,
    days_threshold: int,
    authorized_keys_file_path: str | Path,
    *,
    algorithm: str = "sha256",
    now: datetime | None = None,
) -> AuditReport:
    """Report authorized keys last used more than days_threshold days ago.

    1. Fingerprints every key in the authorized_keys file
    2. Builds a latest-login index per log source and merges them
    3. Classifies every authorized key against the merged index

    SourceUnavailableError from the key file or any log source aborts the
    audit; no partial report is produced.
    """
    logger.info("get public keys older than %d day(s)", days_threshold)
    logger.debug("authorized_keys path '%s'", authorized_keys_file_path)
    now = now or datetime.now()

    actual_fingerprints = fingerprints_of_file(authorized_keys_file_path, algorithm)

    attempts_seen = 0
    shards = []
    for source, attempts in auth_logs_provider.read_batches():
        attempts_seen += len(attempts)
        shards.append(build_correlation_index(attempts, actual_fingerprints))
        logger.debug("indexed '%s'", source)
    attempts_map = merge_correlation_indexes(*shards)
    logger.info("success login attempts received: %d", attempts_seen)

    authorized_keys = get_authorized_keys_from_file(authorized_keys_file_path)
    logger.debug("authorized keys %d", len(authorized_keys))

    candidates = get_key_candidates_for_removal(
        authorized_keys, attempts_map, days_threshold, now=now, algorithm=algorithm,
    )

    items = []
    for candidate in candidates:
        fingerprint = fingerprint_of(str(candidate), algorithm).fingerprint
        latest = attempts_map[fingerprint]
        items.append(StaleKeyItem(
            key_type=candidate.key_type,
            key=candidate.key,
            comment=candidate.comment,
            origin_index=candidate.origin_index,
            fingerprint=fingerprint,
            last_used=latest.timestamp,
            username=latest.username or None,
            days_since_use=days_since(latest.timestamp, now),
        ))

    return AuditReport(
        generated_at=now,
        days_threshold=days_threshold,
        authorized_keys_path=str(authorized_keys_file_path),
        total_keys=len(authorized_keys),
        attempts_seen=attempts_seen,
        keys_with_evidence=len(attempts_map),
        candidates=items,
    )
