"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("off", "error", "warn", "warning", "info", "debug", "trace")


def _default_authorized_keys_path() -> str:
    return str(Path.home() / ".ssh" / "authorized_keys")


class Settings(BaseSettings):
    model_config = {"env_prefix": "AKT_", "case_sensitive": False}

    # Inputs
    authorized_keys_path: str = Field(default_factory=_default_authorized_keys_path)
    auth_log_path: str = "/var/log"
    log_source: str = "file"  # file | journal
    journalctl_command: str = "journalctl"

    # Audit
    older_than_days: int = 31
    fingerprint_algorithm: str = "sha256"

    # Logging
    log_level: str = "off"

    @field_validator("log_source")
    @classmethod
    def check_log_source(cls, v: str) -> str:
        v = v.lower()
        if v not in ("file", "journal"):
            raise ValueError(f"unsupported log source: {v}")
        return v

    @field_validator("fingerprint_algorithm")
    @classmethod
    def check_algorithm(cls, v: str) -> str:
        v = v.lower()
        if v not in ("sha256", "md5"):
            raise ValueError(f"unsupported fingerprint algorithm: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"unsupported log level: {v}")
        return v

    @field_validator("older_than_days")
    @classmethod
    def check_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError("older_than_days must not be negative")
        return v


settings = Settings()
