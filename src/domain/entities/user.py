from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserEntity:
    id: str
    name: str
    email: str
    password: str  # salted hash, never the plain text
    avatar: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UserSummary:
    """Owner fields joined onto a profile when it is read."""

    id: str
    name: str | None = None
    avatar: str | None = None


@dataclass(frozen=True)
class AuthIdentity:
    """Identity decoded from a verified token."""

    user_id: str
