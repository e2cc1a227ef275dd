"""Password hashing for stored submissions (bcrypt).

bcrypt only reads the first 72 bytes of its input, so passwords are
reduced to a base64 SHA-256 digest first. ``verify_password`` applies
the same reduction and is the only way to check a stored hash.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Hash a password of any length with bcrypt."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash made by ``hash_password``."""
    try:
        return bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False
