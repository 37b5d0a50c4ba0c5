"""
Password hashing and bearer token primitives.

- Passwords: bcrypt with a configurable cost factor. bcrypt's check runs
  in constant time.
- Tokens: HS256 JWTs signed with JWT_SECRET_KEY. Stateless, no server-side
  revocation; a token stays valid until it expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

# bcrypt ignores (newer releases reject) anything past 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def encode_token(
    claims: dict[str, Any],
    secret: str,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(days=7),
) -> str:
    """Sign ``claims`` with issued-at and expiry timestamps added."""
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """
    Verify signature and expiry, returning the claims.

    Raises the PyJWT exception unchanged; callers decide how each failure
    maps to an HTTP status.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["exp", "sub"]},
    )
