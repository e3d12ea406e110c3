# ── src/ingestor/tokens.py ───────────────────────────────────────────────────
"""
Signed identity tokens (HS256 JWT via PyJWT).

Claims: {username, role, iat, exp}. Verification is pure: signature and expiry
only. There is no revocation list; a token stays valid until `exp`.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import jwt

from .errors import InvalidSignature, MalformedToken, TokenExpired
from .users import ADMIN_ROLE

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600
REVOCATION_POLICY = "expiry-only"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class Identity:
    username: str
    role:     str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


class TokenService:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._ttl = datetime.timedelta(seconds=ttl_seconds)
        self._clock = clock

    def issue_token(self, user: Dict[str, Any]) -> str:
        now = self._clock()
        claims = {
            "username": user["username"],
            "role":     user.get("role"),
            "iat":      now,
            "exp":      now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> Identity:
        """
        Decode and check a token.

        Raises InvalidSignature, TokenExpired or MalformedToken. Expiry is
        checked against the service clock rather than PyJWT's wall clock so
        that a fixed clock can be injected.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(str(exc)) from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise MalformedToken("missing exp claim")
        if self._clock().timestamp() >= exp:
            raise TokenExpired("token expired")

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise MalformedToken("missing username claim")
        role: Optional[str] = payload.get("role")
        return Identity(username=username, role=role or "")


__all__ = ["ALGORITHM", "REVOCATION_POLICY", "Identity", "TokenService"]
