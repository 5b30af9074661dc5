from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from jose import JWTError, jwt

from utils.errors import AuthError, InternalError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Stateless session tokens: validity is signature plus `exp`, nothing is stored."""

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("TokenIssuer needs a signing secret")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._now = now

    def issue(self, email: str) -> str:
        issued_at = self._now()
        payload = {
            "sub": email,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except JWTError as exc:
            logger.exception("Token signing failed")
            raise InternalError() from exc

    def decode(self, token: str) -> dict[str, Any]:
        try:
            # `exp` is checked against our clock, not the library's.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise AuthError("Invalid token")

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or self._now().timestamp() >= exp:
            raise AuthError("Token expired")
        if not claims.get("sub"):
            raise AuthError("Invalid token")
        return claims
