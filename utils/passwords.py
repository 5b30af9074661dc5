from __future__ import annotations

import logging

import bcrypt

from utils.errors import InternalError

logger = logging.getLogger(__name__)


def _bcrypt_bytes(password: str) -> bytes:
    # Multi-byte safe password truncation for bcrypt (max 72 bytes)
    safe_password = password.encode("utf-8")[:72].decode("utf-8", errors="ignore")
    return safe_password.encode("utf-8")


def hash_password(password: str, *, rounds: int = 10) -> str:
    try:
        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(_bcrypt_bytes(password), salt)
    except (ValueError, TypeError) as exc:
        logger.exception("Password hashing failed")
        raise InternalError("Registration failed. Please try again.") from exc
    return hashed.decode("utf-8")


def verify_password(password: str, credential_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_bcrypt_bytes(password), credential_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False
