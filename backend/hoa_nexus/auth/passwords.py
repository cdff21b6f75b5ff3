"""
Password hashing with bcrypt.
"""

from typing import Optional

import bcrypt

from hoa_nexus.config.settings import get_auth_settings

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash password with BCRYPT_ROUNDS (or the given rounds)."""
    if rounds is None:
        rounds = get_auth_settings().bcrypt_rounds
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored hash. Missing or corrupt hashes never match."""
    if not password or not password_hash:
        return False
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
