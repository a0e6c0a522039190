"""Report schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuthorizedKeyItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key_type: str
    key: str
    comment: str
    origin_index: int


class StaleKeyItem(AuthorizedKeyItem):
    fingerprint: str
    last_used: datetime
    username: str | None
    days_since_use: int


class AuditReport(BaseModel):
    generated_at: datetime
    days_threshold: int
    authorized_keys_path: str
    total_keys: int
    attempts_seen: int
    keys_with_evidence: int
    candidates: list[StaleKeyItem]
