from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

from src.domain.entities.user import UserSummary

SOCIAL_NETWORKS = ("youtube", "twitter", "facebook", "linkedin", "instagram")
TEXT_FIELDS = ("company", "website", "location", "bio", "status", "githubusername")


@dataclass(frozen=True)
class ExperienceEntity:
    title: str
    company: str
    from_date: date
    id: str = ""  # assigned when the entry is added to a profile
    location: str | None = None
    to_date: date | None = None
    current: bool = False
    description: str | None = None


@dataclass(frozen=True)
class EducationEntity:
    school: str
    degree: str
    fieldofstudy: str
    from_date: date
    id: str = ""
    to_date: date | None = None
    current: bool = False
    description: str | None = None


@dataclass(frozen=True)
class ProfileEntity:
    id: str
    user_id: str
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    githubusername: str | None = None
    skills: tuple[str, ...] = ()
    social: dict[str, str] = field(default_factory=dict)
    experience: tuple[ExperienceEntity, ...] = ()  # newest first
    education: tuple[EducationEntity, ...] = ()  # newest first
    created_at: datetime | None = None
    user: UserSummary | None = None


def parse_skills(skills: str | Iterable[str]) -> tuple[str, ...]:
    """Split a comma-separated skill string into trimmed, non-empty tokens."""
    parts = skills.split(",") if isinstance(skills, str) else skills
    return tuple(part.strip() for part in parts if part and part.strip())


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
    return value or None


@dataclass(frozen=True)
class ProfilePatch:
    """Sparse profile update. ``None`` means "leave the stored value alone"."""

    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    githubusername: str | None = None
    skills: tuple[str, ...] | None = None
    social: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_input(cls, **fields: Any) -> ProfilePatch:
        """Build a patch from raw request fields, dropping absent and falsy values."""
        values = {name: _clean(fields.get(name)) for name in TEXT_FIELDS}
        skills = fields.get("skills")
        social = {}
        for network in SOCIAL_NETWORKS:
            url = _clean(fields.get(network))
            if url:
                social[network] = url
        return cls(**values, skills=parse_skills(skills) if skills else None, social=social)

    def as_columns(self) -> dict[str, Any]:
        """Only the columns this patch sets, in storage form."""
        columns: dict[str, Any] = {
            name: getattr(self, name) for name in TEXT_FIELDS if getattr(self, name) is not None
        }
        if self.skills is not None:
            columns["skills"] = list(self.skills)
        if self.social:
            columns["social"] = dict(self.social)
        return columns

    def apply(self, profile: ProfileEntity) -> ProfileEntity:
        """Merge the patch over ``profile``; supplied social keys override existing ones."""
        columns = self.as_columns()
        social = {**profile.social, **columns.pop("social", {})}
        if "skills" in columns:
            columns["skills"] = tuple(columns["skills"])
        return replace(profile, **columns, social=social)
