from __future__ import annotations

import hashlib
from dataclasses import dataclass
from urllib.parse import urlencode

from src.domain.errors import ValidationFailed
from src.domain.services.password_hasher import PasswordHasher
from src.domain.services.token_service import TokenService
from src.infrastructure.database.repositories.user_repository import UserRepository
from src.infrastructure.logging import get_logger

logger = get_logger("auth")

USER_EXISTS = [{"msg": "User already exists"}]


def gravatar_url(email: str, size: int = 200) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?" + urlencode({"s": size, "r": "pg", "d": "mm"})


@dataclass
class RegisterUserUseCase:
    users: UserRepository
    hasher: PasswordHasher
    tokens: TokenService

    def execute(self, name: str, email: str, password: str) -> str:
        """Create an account and return a token for it.

        Raises:
            ValidationFailed: If the email is already registered.
        """
        if self.users.get_by_email(email) is not None:
            raise ValidationFailed(USER_EXISTS)

        user = self.users.create(
            name=name,
            email=email,
            password=self.hasher.hash(password),
            avatar=gravatar_url(email),
        )
        if user is None:
            # lost a race with a concurrent registration
            raise ValidationFailed(USER_EXISTS)

        logger.info("user_registered", user_id=user.id)
        return self.tokens.issue(user.id)
