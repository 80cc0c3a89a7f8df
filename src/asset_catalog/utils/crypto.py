"""Key material helpers: secret generation and one-way fingerprints."""

from __future__ import annotations

import hashlib
import uuid

SECRET_LENGTH = 128
FINGERPRINT_LENGTH = 64


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def generate_secret() -> str:
    """Generate a raw API key secret.

    Four independent random UUIDs are concatenated without dashes, giving a
    128-character lowercase hex string.
    """
    return "".join(uuid.uuid4().hex for _ in range(4))


def fingerprint(secret: str) -> str:
    """Return the SHA-256 fingerprint of *secret* as 64 lowercase hex chars.

    Only fingerprints are stored; the raw secret cannot be recovered from one.
    """
    return sha256(secret.encode("utf-8")).hex()
