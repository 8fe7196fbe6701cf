from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.application.dtos.common_dto import required
from src.domain.entities.profile import (
    EducationEntity,
    ExperienceEntity,
    ProfileEntity,
    ProfilePatch,
    parse_skills,
)


class ProfileUpsertRequest(BaseModel):
    """Fields accepted by ``POST /profile``. Blank optional fields leave stored values alone."""
    company: str | None = Field(None, examples=["Acme"])
    website: str | None = Field(None, examples=["https://acme.dev"])
    location: str | None = Field(None, examples=["Lisbon"])
    bio: str | None = None
    status: str | None = Field(None, validate_default=True, examples=["Developer"])
    githubusername: str | None = Field(None, examples=["octocat"])
    skills: str | list[str] | None = Field(
        None,
        validate_default=True,
        description="Comma separated skills, or a list of skills",
        examples=["HTML, CSS, Python"],
    )
    youtube: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    linkedin: str | None = None
    instagram: str | None = None

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str | None) -> str:
        return required(value, "Status is required")

    @field_validator("skills")
    @classmethod
    def _check_skills(cls, value: str | list[str] | None) -> str | list[str]:
        # a value with no skill left after splitting counts as missing
        if value is not None and not parse_skills(value):
            value = None
        return required(value, "Skills is required")

    def to_patch(self) -> ProfilePatch:
        return ProfilePatch.from_input(**self.model_dump())


class ExperienceRequest(BaseModel):
    """Body of ``PUT /profile/experience``."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, validate_default=True, examples=["Backend Engineer"])
    company: str | None = Field(None, validate_default=True, examples=["Acme"])
    location: str | None = None
    from_date: dt.date | None = Field(None, alias="from", validate_default=True, examples=["2020-01-31"])
    to_date: dt.date | None = Field(None, alias="to")
    current: bool = False
    description: str | None = None

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str | None) -> str:
        return required(value, "Title is required")

    @field_validator("company")
    @classmethod
    def _check_company(cls, value: str | None) -> str:
        return required(value, "Company is required")

    @field_validator("from_date")
    @classmethod
    def _check_from(cls, value: dt.date | None) -> dt.date:
        return required(value, "From date is required")

    def to_entity(self) -> ExperienceEntity:
        return ExperienceEntity(
            title=self.title,
            company=self.company,
            location=self.location or None,
            from_date=self.from_date,
            to_date=self.to_date,
            current=self.current,
            description=self.description or None,
        )


class EducationRequest(BaseModel):
    """Body of ``PUT /profile/education``."""
    model_config = ConfigDict(populate_by_name=True)

    school: str | None = Field(None, validate_default=True, examples=["MIT"])
    degree: str | None = Field(None, validate_default=True, examples=["BSc"])
    fieldofstudy: str | None = Field(None, validate_default=True, examples=["Computer Science"])
    from_date: dt.date | None = Field(None, alias="from", validate_default=True, examples=["2014-09-01"])
    to_date: dt.date | None = Field(None, alias="to")
    current: bool = False
    description: str | None = None

    @field_validator("school")
    @classmethod
    def _check_school(cls, value: str | None) -> str:
        return required(value, "School is required")

    @field_validator("degree")
    @classmethod
    def _check_degree(cls, value: str | None) -> str:
        return required(value, "Degree is required")

    @field_validator("fieldofstudy")
    @classmethod
    def _check_fieldofstudy(cls, value: str | None) -> str:
        return required(value, "Field of study is required")

    @field_validator("from_date")
    @classmethod
    def _check_from(cls, value: dt.date | None) -> dt.date:
        return required(value, "From date is required")

    def to_entity(self) -> EducationEntity:
        return EducationEntity(
            school=self.school,
            degree=self.degree,
            fieldofstudy=self.fieldofstudy,
            from_date=self.from_date,
            to_date=self.to_date,
            current=self.current,
            description=self.description or None,
        )


class ExperienceItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Identifier of the entry within its profile")
    title: str
    company: str
    location: str | None = None
    from_date: dt.date = Field(..., alias="from")
    to_date: dt.date | None = Field(None, alias="to")
    current: bool = False
    description: str | None = None

    @classmethod
    def from_entity(cls, entry: ExperienceEntity) -> ExperienceItem:
        return cls(
            id=entry.id,
            title=entry.title,
            company=entry.company,
            location=entry.location,
            from_date=entry.from_date,
            to_date=entry.to_date,
            current=entry.current,
            description=entry.description,
        )


class EducationItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Identifier of the entry within its profile")
    school: str
    degree: str
    fieldofstudy: str
    from_date: dt.date = Field(..., alias="from")
    to_date: dt.date | None = Field(None, alias="to")
    current: bool = False
    description: str | None = None

    @classmethod
    def from_entity(cls, entry: EducationEntity) -> EducationItem:
        return cls(
            id=entry.id,
            school=entry.school,
            degree=entry.degree,
            fieldofstudy=entry.fieldofstudy,
            from_date=entry.from_date,
            to_date=entry.to_date,
            current=entry.current,
            description=entry.description,
        )


class ProfileOwner(BaseModel):
    id: str = Field(..., description="Identifier of the owning user")
    name: str | None = Field(None, description="Owner display name")
    avatar: str | None = Field(None, description="Owner avatar URL")


class ProfileResponse(BaseModel):
    """A profile joined with its owner's name and avatar."""
    id: str = Field(..., description="Unique identifier of the profile")
    user: ProfileOwner
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    githubusername: str | None = None
    skills: list[str] = Field(default_factory=list, examples=[["HTML", "CSS", "Python"]])
    social: dict[str, str] = Field(default_factory=dict, examples=[{"twitter": "https://twitter.com/ada"}])
    experience: list[ExperienceItem] = Field(default_factory=list, description="Newest first")
    education: list[EducationItem] = Field(default_factory=list, description="Newest first")
    created_at: dt.datetime | None = None

    @classmethod
    def from_entity(cls, profile: ProfileEntity) -> ProfileResponse:
        owner = profile.user
        return cls(
            id=profile.id,
            user=ProfileOwner(
                id=profile.user_id,
                name=owner.name if owner else None,
                avatar=owner.avatar if owner else None,
            ),
            company=profile.company,
            website=profile.website,
            location=profile.location,
            bio=profile.bio,
            status=profile.status,
            githubusername=profile.githubusername,
            skills=list(profile.skills),
            social=dict(profile.social),
            experience=[ExperienceItem.from_entity(e) for e in profile.experience],
            education=[EducationItem.from_entity(e) for e in profile.education],
            created_at=profile.created_at,
        )
