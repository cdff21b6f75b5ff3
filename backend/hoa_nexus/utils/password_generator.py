"""
Password generation for new portal accounts.

Temporary passwords are easy to read out over the phone
(e.g. "Welcome42!Start17"); random passwords are for automated resets.
All randomness comes from the secrets module.
"""

import secrets
import string

TEMP_PASSWORD_WORDS = ("Temp", "Welcome", "New", "Start", "Access")
TEMP_PASSWORD_SPECIALS = "!@#$%"

RANDOM_PASSWORD_SPECIALS = "!@#$%^&*"
RANDOM_PASSWORD_MIN_LENGTH = 12
RANDOM_PASSWORD_MAX_LENGTH = 16


def _two_digits() -> str:
    return f"{secrets.randbelow(100):02d}"


def generate_temp_password() -> str:
    """Return a password shaped Word##!Word##."""
    return (
        secrets.choice(TEMP_PASSWORD_WORDS)
        + _two_digits()
        + secrets.choice(TEMP_PASSWORD_SPECIALS)
        + secrets.choice(TEMP_PASSWORD_WORDS)
        + _two_digits()
    )


def generate_random_password() -> str:
    """
    Return a 12-16 character password with at least one uppercase letter,
    lowercase letter, digit and special character.
    """
    span = RANDOM_PASSWORD_MAX_LENGTH - RANDOM_PASSWORD_MIN_LENGTH + 1
    length = RANDOM_PASSWORD_MIN_LENGTH + secrets.randbelow(span)

    pools = (
        string.ascii_uppercase,
        string.ascii_lowercase,
        string.digits,
        RANDOM_PASSWORD_SPECIALS,
    )
    alphabet = "".join(pools)

    chars = [secrets.choice(pool) for pool in pools]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))

    # Fisher-Yates with a CSPRNG so the required characters are not always first
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)
