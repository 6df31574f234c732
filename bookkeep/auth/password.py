"""Password hashing and verification.

bcrypt only looks at the first 72 bytes of its input, so passwords are first
reduced to a fixed 44-byte SHA-256 digest (base64) and that digest is what
bcrypt salts and hashes. Plaintext passwords are never stored.
"""

import base64
import hashlib

import bcrypt

BCRYPT_ROUNDS = 12


def _digest(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    return bcrypt.hashpw(_digest(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_digest(password), hashed.encode("utf-8"))
    except ValueError:
        # not a bcrypt hash
        return False
