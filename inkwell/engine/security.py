"""
Inkwell Security — Password hashing and the authenticated-caller gate.

Passwords are hashed with bcrypt (random salt per hash, cost from
``security.bcrypt_rounds``). Verification is delegated to
``bcrypt.checkpw``, whose comparison does not short-circuit on the
candidate password.

The stores have no notion of a current user; the request layer passes an
``authenticated`` flag and ``require_authenticated`` turns a missing
session into an ``InkwellAuthorizationError``.
"""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt

from inkwell.engine.errors import InkwellAuthorizationError

logger = logging.getLogger("inkwell.engine.security")

SIGN_IN_REQUIRED = "You must be signed in to do that."
DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a password using bcrypt.
    Raises ValueError for passwords bcrypt would otherwise truncate.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its bcrypt hash.
    A malformed stored hash verifies as False.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def require_authenticated(
    authenticated: bool,
    operation: str,
    resource: Optional[str] = None,
) -> Optional[InkwellAuthorizationError]:
    """Return an authorization error for unauthenticated callers, else None."""
    if authenticated:
        return None
    return InkwellAuthorizationError(SIGN_IN_REQUIRED, operation=operation, resource=resource)
