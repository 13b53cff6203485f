"""
TokenService for stateless session token issuance and verification

Tokens are HS256 JWTs carrying only `iat` and `exp`. Nothing is stored
server side; a token is valid until its `exp` claim passes.
"""

import time
from typing import Callable

import jwt
import structlog
from pydantic import ValidationError

from .encoding import b64url_decode, b64url_encode
from .token_models import TokenPayload

log = structlog.get_logger()


class AuthenticationError(Exception):
    """
    Raised for every authentication failure.

    The message is always the same so callers cannot tell a forged token
    from an expired or malformed one.
    """

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


def _is_canonical_segment(segment: str) -> bool:
    # Exactly one spelling per byte string: a flipped padding bit is a different token
    try:
        return b64url_encode(b64url_decode(segment)) == segment
    except ValueError:
        return False


class TokenService:
    """
    Issues and verifies signed session tokens

    Provides:
    - Token issuance with a configurable lifetime
    - Signature verification pinned to HS256
    - Expiry checking against the injected clock
    """

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ["iat", "exp"]

    def __init__(
        self,
        secret: str | bytes,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize TokenService

        Args:
            secret: Signing secret shared by all issued tokens
            clock: Source of the current unix time (seconds)

        Raises:
            ValueError: If the secret is empty
        """
        if not secret:
            raise ValueError("Signing secret must not be empty")
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def issue(self, duration_seconds: int) -> str:
        """
        Issue a new session token

        Args:
            duration_seconds: Lifetime in seconds (must be positive)

        Returns:
            Compact token string

        Raises:
            ValueError: If the duration is not a positive integer
        """
        token, _ = self.issue_session(duration_seconds)
        return token

    def issue_session(self, duration_seconds: int) -> tuple[str, TokenPayload]:
        """
        Issue a new session token and return it with its claims

        Raises:
            ValueError: If the duration is not a positive integer
        """
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
            raise ValueError("Token duration must be an integer number of seconds")
        if duration_seconds < 1:
            raise ValueError("Token duration must be at least 1 second")

        now = self._now()
        payload = TokenPayload(iat=now, exp=now + duration_seconds)
        token = jwt.encode(payload.model_dump(), self._secret, algorithm=self.ALGORITHM)

        log.info("token.issued", exp=payload.exp, ttl_seconds=duration_seconds)
        return token, payload

    def verify(self, token: str) -> TokenPayload:
        """
        Verify a session token

        Args:
            token: Compact token string

        Returns:
            Token payload with iat/exp claims

        Raises:
            AuthenticationError: For any malformed, forged or expired token
        """
        if not isinstance(token, str):
            raise self._rejection("malformed")

        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise self._rejection("malformed")
        if not all(_is_canonical_segment(s) for s in segments):
            raise self._rejection("malformed")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                options={
                    "require": self.REQUIRED_CLAIMS,
                    # Time checks run below against the injected clock
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise self._rejection(type(e).__name__)

        try:
            payload = TokenPayload.model_validate(claims)
        except ValidationError:
            raise self._rejection("invalid_claims")

        if payload.is_expired(self._now()):
            raise self._rejection("expired")

        return payload

    @staticmethod
    def _rejection(reason: str) -> AuthenticationError:
        # The reason stays in debug logs; callers only ever see "Unauthorized"
        log.debug("token.rejected", reason=reason)
        return AuthenticationError()
