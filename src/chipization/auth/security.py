"""Password hashing utilities for account authentication."""

import hashlib
import hmac
import secrets
from typing import Optional


def _iterations() -> int:
    from ..config import get_config

    return get_config().app.password_hash_iterations


def hash_password(password: str, salt: Optional[bytes] = None) -> tuple[str, str]:
    """
    Hash a password using PBKDF2-HMAC-SHA256.

    Args:
        password: The plain text password to hash
        salt: Optional salt bytes. If None, generates a secure random salt.

    Returns:
        tuple[str, str]: (salt_hex, hash_hex) for storage in database
    """
    if salt is None:
        salt = secrets.token_bytes(32)

    password_hash = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _iterations()
    )
    return salt.hex(), password_hash.hex()


def verify_password(password: str, salt_hex: str, hash_hex: str) -> bool:
    """
    Verify a password against stored salt and hash.

    Returns:
        bool: True if password is valid, False otherwise
    """
    if not password or not salt_hex or not hash_hex:
        return False

    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except (ValueError, TypeError):
        return False

    computed_hash = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _iterations()
    )
    # Constant-time comparison
    return hmac.compare_digest(computed_hash, stored_hash)
