"""Password hashing and markup stripping for user-supplied text."""

import re

import bcrypt

# Bcrypt cost (rounds); fixed so every stored hash has the same work factor.
BCRYPT_ROUNDS = 10

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
TITLE_MIN_LEN = 5

_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
# A tag runs to its ">" or, if never closed, to the end of the text.
_TAG_RE = re.compile(r"<[a-zA-Z/!?][^>]*(?:>|$)")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def strip_tags(value: str) -> str:
    """Remove every markup tag and control character; surrounding whitespace is trimmed."""
    value = _SCRIPT_RE.sub("", value)
    value = _TAG_RE.sub("", value)
    value = _CONTROL_CHARS_RE.sub("", value)
    return value.strip()
