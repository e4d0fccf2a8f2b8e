"""
Password hashing and verification.

Digests are PBKDF2-HMAC-SHA256 over the password with a per-user salt,
hex-encoded for storage in the identity document.
"""

from __future__ import annotations

import hashlib
import hmac
import uuid

_ITERATIONS = 200_000


def new_salt() -> str:
    """Random per-user salt, generated once at registration."""
    return uuid.uuid4().hex


def hash_password(password: str, salt: str) -> str:
    """Deterministic hex digest of ``password`` under ``salt``."""
    if not password:
        raise ValueError("password must not be empty")
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), _ITERATIONS
    )
    return digest.hex()


def verify_password(password: str, salt: str, password_hash: str) -> bool:
    """Constant-time comparison against a stored digest."""
    if not password or not password_hash:
        return False
    return hmac.compare_digest(hash_password(password, salt), password_hash)
