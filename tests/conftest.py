"""Test fixtures and configuration."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from akt.core.authorized_keys import AuthorizedKey
from akt.core.fingerprint import KeyFingerprint
from akt.core.log_parser import LoginAttempt

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed "now" so threshold boundaries don't depend on the wall clock
NOW = datetime(2026, 10, 17, 12, 0, 0)

RSA_KEY = (
    "AAAAB3NzaC1yc2EAAAADAQABAAABgQDAd6jIpyOMz50jtD+7FrKhQ3yzYjZTr0zCixTHDTZ2w2nEcrnkGqF/2L1HAiYVv1kub/"
    "GlL8po1gv7CwOE4O2F5VwtSNco84YEcl8zL7tTKJCdmOVqajvFtRmYP6vQQ8q1ffODlky7u98HkQN/Pgu+zCd1D104Tx3bpPJoFOGfn3nZm5b3"
    "zTgM2Ie2qJwyRHdvJwmtJtmf6IAG9XF1GdzPJ15U6g/7SndvfGX++KodYZzSUWsbLDxC0Vpr4nH1+C8JIWApUFXTTKCSyoSm3hmDSXrreOkm"
    "MSltVHj8SQYFNmMeMRMvKZwmqi6RMC5AXock4gFxzaxCsDtqrfc4MYb9UE/uUiSeyQ2GSjW6soq+9K/+s8nmCnzxGTuM7gwGG1Ada7qgIrLAH"
    "KdQyiDX9/wwwi7Nax8OO3+orWJjfQymoHL3/aYEhXE0c2pscAeYaB6iiw+UkvTUSJ0nun9bjR8jY3iS0DUM4jYSkKaVGl2/kOv/fZdf4I+cCu"
    "Hs/0stREc="
)
RSA_FP = "SHA256:oCUpgneXmI2DtgLvkSGtzVEnrb0gE02N7pCNB3QJmB8"

ED25519_KEY = "AAAAC3NzaC1lZDI1NTE5AAAAIDOGSbgN43gI+oP5CebK7JsGWsMT69uymML4YHWUPI2G"
ED25519_FP = "SHA256:FnxtlBYHf7fHuR5+lrb+W9rDsY3kBTfbKMEmkBBHRJE"

RSA2048_KEY = (
    "AAAAB3NzaC1yc2EAAAABIwAAAQEA57gP/iLw2reMq2Yqzd/GShYfK1+6YPktMkJesy5DKQGYiv8ncgR5UslTKbTcUUAtVn5Dq73T/HHXrH7n"
    "1iK8yrLCbBc8Es856OvBkSDDLA8iemZwWknTPe0zbUxV6waWub2Ynx+6L8ZeYiOUhw9w0H5pXJhUwmKNu+SDYMTAn4dBkn8sjNUFMlgZRla3l"
    "ML0/HUyJSX3KskXuUJ6lT98pQ6zGhsaHRkMai7bu+Q9/4/8nFiVZ2rzYAR97fMTvmlM2sWYtvV71d9u1urg2Gbuh4k0xW6OvdScoaIM0GGU81m"
    "KWE4F3D7KKmvAGPKYyfwaqtzXAKIsu9ZSpXYE5fPIVQ=="
)
RSA2048_FP = "SHA256:Fm+M7ATlcvNVN/6tIPfTmRlQkxg0fweBF7yL3UyS0y4"


@pytest.fixture(autouse=True)
def _reset_akt_logger():
    yield
    logging.getLogger("akt").setLevel(logging.NOTSET)


@pytest.fixture
def rsa_key():
    return AuthorizedKey(key_type="ssh-rsa", key=RSA_KEY, comment="w.thornton@company.de", origin_index=0)


@pytest.fixture
def ed25519_key():
    return AuthorizedKey(key_type="ssh-ed25519", key=ED25519_KEY, comment="b.robertson@gmail.com", origin_index=1)


@pytest.fixture
def rsa2048_key():
    return AuthorizedKey(key_type="ssh-rsa", key=RSA2048_KEY, comment="god@zilla.de", origin_index=2)


@pytest.fixture
def days_ago():
    def _days_ago(days: float) -> datetime:
        return NOW - timedelta(days=days)
    return _days_ago


@pytest.fixture
def make_attempt():
    def _make_attempt(timestamp: datetime, fingerprint: str) -> LoginAttempt:
        return LoginAttempt(
            timestamp=timestamp,
            fingerprint=fingerprint,
            fingerprint_algorithm="SHA256",
            username="a@b.com",
            key_type="RSA",
        )
    return _make_attempt


@pytest.fixture
def make_fingerprint():
    def _make_fingerprint(fingerprint: str) -> KeyFingerprint:
        return KeyFingerprint(
            fingerprint=fingerprint,
            fingerprint_algorithm="SHA256",
            key_length=2048,
            key_type="rsa",
            key_id="a@b.com",
        )
    return _make_fingerprint


@pytest.fixture
def authorized_keys_file():
    return FIXTURES_DIR / "authorized_keys"


@pytest.fixture
def sample_auth_log_debian():
    return (FIXTURES_DIR / "sample_auth_log_debian.txt").read_text()


@pytest.fixture
def sample_auth_log_rhel():
    return (FIXTURES_DIR / "sample_auth_log_rhel.txt").read_text()


@pytest.fixture
def sample_syslog_aix():
    return (FIXTURES_DIR / "sample_syslog_aix.txt").read_text()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def rsa_fp():
    return RSA_FP


@pytest.fixture
def ed25519_fp():
    return ED25519_FP


@pytest.fixture
def rsa2048_fp():
    return RSA2048_FP
