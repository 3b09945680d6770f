"""Signed, time-bounded session tokens (JWT).

Verification is a pure function of the token, the signing key and the clock
value passed in. Nothing is stored server side, so a token cannot be revoked
before it expires.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Optional

from jose import jws, jwt, JWTError
from jose.exceptions import JWSError

from tasktrack import config
from tasktrack.errors import MalformedToken, BadSignature, TokenExpired


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenService:
    secret_key: str
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(minutes=60)

    def issue(self, subject: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(UTC)
        issued_at = int(now.timestamp())
        claims = {
            "sub": str(subject),
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str, now: Optional[datetime] = None) -> TokenClaims:
        """Return the claims of a valid token.

        Raises MalformedToken, BadSignature or TokenExpired, checked in that order.
        """
        try:
            jwt.get_unverified_header(token)
            claims = jwt.get_unverified_claims(token)
        except (JWTError, AttributeError) as exc:
            raise MalformedToken(str(exc)) from exc

        subject, issued_at, expires_at = claims.get("sub"), claims.get("iat"), claims.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("missing subject")
        if not isinstance(issued_at, int) or not isinstance(expires_at, int):
            raise MalformedToken("missing or non-integer iat/exp")

        try:
            jws.verify(token, self.secret_key, algorithms=[self.algorithm])
        except JWSError as exc:
            raise BadSignature(str(exc)) from exc

        now = now or datetime.now(UTC)
        if now.timestamp() >= expires_at:
            raise TokenExpired(f"expired at {expires_at}")

        return TokenClaims(
            subject=subject,
            issued_at=datetime.fromtimestamp(issued_at, UTC),
            expires_at=datetime.fromtimestamp(expires_at, UTC),
        )


def build_token_service() -> TokenService:
    return TokenService(
        secret_key=config.SECRET_KEY,
        algorithm=config.ALGORITHM,
        ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
