from __future__ import annotations

from passlib.context import CryptContext


class PasswordHasher:
    """Salted password hashing backed by passlib."""

    def __init__(self, schemes: list[str] | None = None) -> None:
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            # unrecognised or corrupt stored hash
            return False
