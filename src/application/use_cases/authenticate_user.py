from __future__ import annotations

import hashlib
from dataclasses import dataclass

from src.domain.entities.user import AuthIdentity, UserEntity
from src.domain.errors import NotFound, ValidationFailed
from src.domain.services.password_hasher import PasswordHasher
from src.domain.services.token_service import TokenService
from src.infrastructure.database.repositories.user_repository import UserRepository
from src.infrastructure.logging import get_logger

logger = get_logger("auth")

INVALID_CREDENTIALS = [{"msg": "Invalid Credentials"}]


def _fingerprint(email: str) -> str:
    """Short stable digest so repeated failures for one address can be correlated without logging it."""
    return hashlib.sha256(email.encode("utf-8")).hexdigest()[:12]


@dataclass
class AuthenticateUserUseCase:
    users: UserRepository
    hasher: PasswordHasher
    tokens: TokenService

    def execute(self, email: str, password: str) -> str:
        """
        Check ``email``/``password`` and issue a token for the matching user.

        Unknown email and wrong password fail the same way so the response
        does not reveal which accounts exist.

        Raises:
            ValidationFailed: If the credentials do not match a user.
        """
        user = self.users.get_by_email(email)
        if user is None or not self.hasher.verify(password, user.password):
            logger.info("login_failed", email_hash=_fingerprint(email), known_user=user is not None)
            raise ValidationFailed(INVALID_CREDENTIALS)
        token = self.tokens.issue(user.id)
        logger.info("login_succeeded", user_id=user.id)
        return token

    def current_user(self, identity: AuthIdentity) -> UserEntity:
        """Load the account behind a verified token."""
        user = self.users.get(identity.user_id)
        if user is None:
            raise NotFound("User not found")
        return user
