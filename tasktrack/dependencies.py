from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request

from tasktrack.errors import TokenError, Unauthenticated
from tasktrack.log import get_logger
from tasktrack.utils.passwords import PasswordHasher
from tasktrack.utils.tokens import TokenService

log = get_logger(__name__)


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return None


def get_token_service(request: Request) -> TokenService:
    # built once in the app lifespan, read-only afterwards
    return request.app.state.tokens


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def require_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer token to a user id or reject the request with 401.

    The client only ever sees a generic 401; why the token was refused is
    logged here and nowhere else.
    """
    token = _extract_token(authorization)
    if not token:
        log.info("auth_rejected", reason="missing", path=request.url.path)
        raise Unauthenticated()
    try:
        claims = tokens.verify(token)
    except TokenError as exc:
        log.info("auth_rejected", reason=exc.reason, path=request.url.path)
        raise Unauthenticated() from exc

    request.state.user_id = claims.subject
    return claims.subject
