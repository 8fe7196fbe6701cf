from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from src.domain.entities.user import AuthIdentity
from src.domain.errors import InvalidToken, TokenSigningError

DEFAULT_EXPIRES_IN = 36000  # seconds (10 hours)


class TokenService:
    """Issue and verify stateless HS256 tokens carrying ``{"user": {"id": ...}}``."""

    def __init__(
        self,
        secret: str | None,
        algorithm: str = "HS256",
        expires_in: int = DEFAULT_EXPIRES_IN,
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, user_id: str) -> str:
        """Sign a token for ``user_id``.

        Raises:
            TokenSigningError: If no secret is configured or signing fails.
        """
        if not self.secret:
            raise TokenSigningError("JWT secret is not configured")
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "user": {"id": user_id},
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in),
        }
        try:
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except Exception as exc:
            raise TokenSigningError(f"Token signing failed: {exc}") from exc

    def verify(self, token: str) -> AuthIdentity:
        """Decode ``token`` and return the identity it carries.

        Bad signature, malformed payload and expiry all raise the same
        ``InvalidToken`` so callers cannot tell them apart.
        """
        if not self.secret:
            raise TokenSigningError("JWT secret is not configured")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc

        user = payload.get("user")
        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken("Token payload has no user id")
        return AuthIdentity(user_id=user_id)
