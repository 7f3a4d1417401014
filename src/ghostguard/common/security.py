"""Token helpers and the admin-secret dependency."""

import hashlib
import hmac
import secrets

from fastapi import Header

from ghostguard.common.exceptions import UnauthorizedError


def sha256_hex(value: str) -> str:
    """Unsalted SHA-256 hex digest, the format stored for passwords and invite tokens."""
    return hashlib.sha256(value.encode()).hexdigest()


def random_token(nbytes: int = 24) -> str:
    return secrets.token_hex(nbytes)


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):] or None
    return None


async def require_admin_secret(
    authorization: str | None = Header(None),
) -> str:
    """FastAPI dependency that validates the operator admin secret."""
    from ghostguard.common.config import get_settings

    settings = get_settings()
    token = bearer_token(authorization)
    if not settings.admin_secret or token is None:
        raise UnauthorizedError()
    if not hmac.compare_digest(token.encode(), settings.admin_secret.encode()):
        raise UnauthorizedError()
    return token
