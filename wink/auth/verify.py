"""
Supabase JWT verification.

Signing keys come from the project's JWKS endpoint and are cached by
PyJWKClient. Routes depend on ``current_user_id``; ``auth_dependency`` is
the override point for tests.
"""

import jwt
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from wink.config import settings
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_jwk_client = PyJWKClient(settings.jwks_url())
_bearer = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_jwt(token: str) -> dict:
    """Decoded claims of a valid, unexpired token for our audience."""
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token).key
        return jwt.decode(
            token,
            signing_key,
            algorithms=settings.JWT_ALGORITHMS,
            audience=settings.JWT_AUDIENCE,
            options={"require": ["exp", "sub"]},
        )
    except (jwt.PyJWTError, jwt.PyJWKClientError) as e:
        logger.warning("Rejected bearer token", error=str(e), error_type=type(e).__name__)
        raise _unauthorized(f"Invalid authentication token: {e}") from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_bearer)) -> dict:
    return verify_jwt(credentials.credentials)


def current_user_id(claims: dict = Depends(auth_dependency)) -> str:
    user_id = claims.get("sub")
    if not user_id:
        raise _unauthorized("Token has no subject")
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return user_id
