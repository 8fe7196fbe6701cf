"""Domain errors raised by use cases and mapped to HTTP responses by the API layer."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors that carry a client-facing message."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class Unauthorized(AppError):
    """Missing or invalid credentials on a private route."""


class NotFound(AppError):
    """No matching user, profile or sub-entry."""


class ValidationFailed(AppError):
    """Input rejected; carries the structured error list returned to the client."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        super().__init__(errors[0]["msg"] if errors else "Validation failed")
        self.errors = errors


class InvalidToken(Exception):
    """Token failed signature, expiry or payload checks."""


class TokenSigningError(RuntimeError):
    """Token could not be signed (e.g. no signing secret configured)."""
