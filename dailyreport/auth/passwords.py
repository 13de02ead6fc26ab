"""
Password hashing and password policy.

Hashes are bcrypt strings; the salt and cost factor are embedded in the hash
so nothing else has to be stored next to it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

import bcrypt

# bcrypt cost factor (2^10 rounds)
BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LENGTH = 10
PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_SPECIAL_RE = re.compile("[" + re.escape(PASSWORD_SPECIAL_CHARACTERS) + "]")

MSG_TOO_SHORT = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
MSG_NO_UPPERCASE = "Password must contain an uppercase letter (A-Z)"
MSG_NO_LOWERCASE = "Password must contain a lowercase letter (a-z)"
MSG_NO_DIGIT = "Password must contain a digit (0-9)"
MSG_NO_SPECIAL = "Password must contain a special character (!@#$%^&* etc.)"


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with bcrypt and a fresh salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Malformed hashes verify as False."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@dataclass(frozen=True)
class PasswordValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_password(password: Optional[str]) -> PasswordValidation:
    """
    Check a password against the strength policy.

    Every rule is evaluated and every violation reported, in a fixed order:
    length, uppercase, lowercase, digit, special character.
    """
    password = password or ""
    errors: List[str] = []

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(MSG_TOO_SHORT)
    if not re.search(r"[A-Z]", password):
        errors.append(MSG_NO_UPPERCASE)
    if not re.search(r"[a-z]", password):
        errors.append(MSG_NO_LOWERCASE)
    if not re.search(r"[0-9]", password):
        errors.append(MSG_NO_DIGIT)
    if not _SPECIAL_RE.search(password):
        errors.append(MSG_NO_SPECIAL)

    return PasswordValidation(valid=not errors, errors=errors)
