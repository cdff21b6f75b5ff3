"""
Authentication for HOA Nexus.

- jwt: Session token issuing and verification
- passwords: bcrypt password hashing
"""

from hoa_nexus.auth.jwt import HoaJWTClaims, create_access_token, decode_access_token
from hoa_nexus.auth.passwords import hash_password, verify_password

__all__ = [
    "HoaJWTClaims",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
