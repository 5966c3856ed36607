"""JWT token issuance and verification.

Learn: Tokens are stateless. Nothing is stored server-side; a token is
valid iff its HMAC signature checks out under the current secret and
its "exp" claim is still in the future. Rotating the secret therefore
invalidates every outstanding token at once.

The token contains the user id as "sub".
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from taskhub.config import Settings


class TokenError(Exception):
    """Raised when token verification fails."""


class InvalidSignature(TokenError):
    """Signature mismatch, malformed token, or missing claims."""


class TokenExpired(TokenError):
    """The embedded expiration instant has passed."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed, time-limited identity tokens.

    Both the "exp" stamped at issuance and the expiry check in verify()
    read the injected clock.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_days: int = 30,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_days = expire_days
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.token_expire_days,
        )

    def issue(
        self,
        user_id: uuid.UUID | str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """Create a token for user_id, valid for expire_days by default."""
        now = self.clock()
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + (expires_in or timedelta(days=self.expire_days)),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return the user id it was issued for.

        Raises TokenExpired or InvalidSignature on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                # Time claims are checked below against self.clock.
                options={
                    "require": ["sub", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidSignature(f"Invalid token: {e}")

        sub, exp = payload["sub"], payload["exp"]
        if not isinstance(sub, str):
            raise InvalidSignature("Invalid token: subject must be a string")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidSignature("Invalid token: expiration must be a number")
        if exp <= self.clock().timestamp():
            raise TokenExpired("Token has expired")
        return sub
