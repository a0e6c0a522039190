"""Fingerprint calculation for public keys."""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import re
import struct
from dataclasses import dataclass
from pathlib import Path

from akt.core.authorized_keys import get_authorized_keys_from_file, is_key_type, split_options
from akt.core.errors import FingerprintError

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("sha256", "md5")

_ECDSA_CURVE_BITS = {"nistp256": 256, "nistp384": 384, "nistp521": 521}


@dataclass(frozen=True)
class KeyFingerprint:
    """Fingerprint and metadata of a public key."""

    fingerprint: str
    fingerprint_algorithm: str  # SHA256 | MD5
    key_length: int | None
    key_type: str
    key_id: str


def _sha256(key_bytes: bytes) -> str:
    digest = hashlib.sha256(key_bytes).digest()
    fp = base64.b64encode(digest).rstrip(b"=").decode("ascii")
    return f"SHA256:{fp}"


def _md5(key_bytes: bytes) -> str:
    digest = hashlib.md5(key_bytes).hexdigest()
    fp = ":".join(digest[i : i + 2] for i in range(0, len(digest), 2))
    return f"MD5:{fp}"


_DIGESTS = {"sha256": _sha256, "md5": _md5}


def detect_key_type(public_key_data: str) -> str | None:
    """Detect the key type from a public key line."""
    parts = public_key_data.strip().split()
    if not parts:
        return None

    type_map = {
        "ssh-rsa": "rsa",
        "ssh-ed25519": "ed25519",
        "ssh-dss": "dsa",
        "ecdsa-sha2-nistp256": "ecdsa",
        "ecdsa-sha2-nistp384": "ecdsa",
        "ecdsa-sha2-nistp521": "ecdsa",
        "sk-ssh-ed25519@openssh.com": "ed25519-sk",
        "sk-ecdsa-sha2-nistp256@openssh.com": "ecdsa-sk",
    }
    return type_map.get(parts[0])


def extract_comment(public_key_data: str) -> str | None:
    """Extract the comment from a public key line."""
    parts = public_key_data.strip().split(None, 2)
    if len(parts) >= 3:
        return parts[2]
    return None


def fingerprint_algorithm(fingerprint: str) -> str:
    """Name the hash scheme of a fingerprint as sshd logs it.

    "SHA256:..." and "MD5:..." carry a prefix; older sshd releases log bare
    colon-separated MD5 hex.
    """
    fingerprint = fingerprint.strip()
    if fingerprint.startswith("MD5:"):
        return "MD5"
    if fingerprint.startswith("SHA256:"):
        return "SHA256"
    if re.fullmatch(r"([0-9a-fA-F]{2}:){15}[0-9a-fA-F]{2}", fingerprint):
        return "MD5"
    return "SHA256"


def _read_string(blob: bytes, offset: int) -> tuple[bytes, int]:
    if offset + 4 > len(blob):
        raise ValueError("truncated key blob")
    (length,) = struct.unpack(">I", blob[offset : offset + 4])
    start = offset + 4
    end = start + length
    if end > len(blob):
        raise ValueError("truncated key blob")
    return blob[start:end], end


def _blob_key_type(blob: bytes) -> str:
    name, _ = _read_string(blob, 0)
    return name.decode("ascii")


def key_length(blob: bytes) -> int | None:
    """Return the size in bits of the key encoded in an SSH wire-format blob.

    None for certificates and key types whose layout is not known here.
    """
    try:
        key_type, offset = _read_string(blob, 0)
        key_type_str = key_type.decode("ascii")

        if key_type_str == "ssh-rsa":
            _, offset = _read_string(blob, offset)  # public exponent
            modulus, _ = _read_string(blob, offset)
            return int.from_bytes(modulus, "big").bit_length()

        if key_type_str == "ssh-dss":
            p, _ = _read_string(blob, offset)
            return int.from_bytes(p, "big").bit_length()

        if key_type_str in ("ssh-ed25519", "sk-ssh-ed25519@openssh.com"):
            return 256

        if key_type_str.startswith(("ecdsa-sha2-", "sk-ecdsa-sha2-")):
            curve, _ = _read_string(blob, offset)
            return _ECDSA_CURVE_BITS.get(curve.decode("ascii"))
    except (ValueError, UnicodeDecodeError) as e:
        logger.debug("Unable to determine key length: %s", e)

    return None


def fingerprint_of(key_line: str, algorithm: str = "sha256") -> KeyFingerprint:
    """Fingerprint a single authorized_keys style line.

    Raises FingerprintError when the line carries no key, the key material is
    not valid base64 or its embedded type disagrees with the declared one.
    """
    algorithm = algorithm.lower()
    if algorithm not in _DIGESTS:
        raise ValueError(f"unsupported fingerprint algorithm: {algorithm}")

    _, rest = split_options(key_line.strip())
    parts = rest.split(None, 2)
    if len(parts) < 2 or not is_key_type(parts[0]):
        raise FingerprintError(f"not a public key line: '{key_line}'")

    declared_type, key_b64 = parts[0], parts[1]
    try:
        blob = base64.b64decode(key_b64, validate=True)
        blob_type = _blob_key_type(blob)
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise FingerprintError(f"invalid key material for '{declared_type}': {e}") from e

    if blob_type != declared_type:
        raise FingerprintError(
            f"key type mismatch: line declares '{declared_type}', key is '{blob_type}'"
        )

    return KeyFingerprint(
        fingerprint=_DIGESTS[algorithm](blob),
        fingerprint_algorithm=algorithm.upper(),
        key_length=key_length(blob),
        key_type=detect_key_type(rest) or declared_type,
        key_id=extract_comment(rest) or "",
    )


def fingerprints_of_file(file_path: str | Path, algorithm: str = "sha256") -> list[KeyFingerprint]:
    """Fingerprint every entry of an authorized_keys file.

    Entries that cannot be fingerprinted are logged and skipped.
    """
    fingerprints: list[KeyFingerprint] = []
    for authorized_key in get_authorized_keys_from_file(file_path):
        try:
            fingerprints.append(fingerprint_of(str(authorized_key), algorithm))
        except FingerprintError as e:
            logger.error("unable to fingerprint key at line %d: %s",
                         authorized_key.origin_index + 1, e)

    logger.debug("fingerprints computed: %d", len(fingerprints))
    return fingerprints
