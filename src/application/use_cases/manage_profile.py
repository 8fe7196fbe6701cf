from __future__ import annotations

import uuid
from dataclasses import dataclass, replace

from src.domain.entities.profile import EducationEntity, ExperienceEntity, ProfileEntity, ProfilePatch
from src.domain.errors import NotFound
from src.infrastructure.database.repositories.profile_repository import ProfileRepository
from src.infrastructure.database.repositories.user_repository import UserRepository
from src.infrastructure.logging import get_logger

logger = get_logger("profile")

NO_PROFILE = "There is no profile for this user"


@dataclass
class ProfileManager:
    """
    Profile operations for an authenticated user.

    Every mutation is a single storage-level write on one profile document;
    the repository makes the read-merge-write step atomic.
    """

    profiles: ProfileRepository
    users: UserRepository

    def get_own_profile(self, user_id: str) -> ProfileEntity:
        profile = self.profiles.get_by_user(user_id)
        if profile is None:
            raise NotFound(NO_PROFILE)
        return profile

    def upsert_profile(self, user_id: str, patch: ProfilePatch) -> ProfileEntity:
        """Create the profile on first call, otherwise merge ``patch`` into it."""
        if self.users.get(user_id) is None:
            raise NotFound("User not found")
        profile = self.profiles.upsert(user_id, patch)
        logger.info("profile_upserted", user_id=user_id, fields=sorted(patch.as_columns()))
        return profile

    def list_profiles(self) -> list[ProfileEntity]:
        return self.profiles.list_all()

    def get_profile_by_user(self, user_id: str) -> ProfileEntity:
        # unknown and malformed ids both end up here
        profile = self.profiles.get_by_user(user_id)
        if profile is None:
            raise NotFound("Profile not found")
        return profile

    def add_experience(self, user_id: str, entry: ExperienceEntity) -> ProfileEntity:
        entry = replace(entry, id=uuid.uuid4().hex)
        profile = self.profiles.push_experience(user_id, entry)
        if profile is None:
            raise NotFound(NO_PROFILE)
        logger.info("experience_added", user_id=user_id, experience_id=entry.id)
        return profile

    def remove_experience(self, user_id: str, exp_id: str) -> ProfileEntity:
        profile = self.profiles.pull_experience(user_id, exp_id)
        if profile is None:
            self.get_own_profile(user_id)
            raise NotFound("Experience not found")
        logger.info("experience_removed", user_id=user_id, experience_id=exp_id)
        return profile

    def add_education(self, user_id: str, entry: EducationEntity) -> ProfileEntity:
        entry = replace(entry, id=uuid.uuid4().hex)
        profile = self.profiles.push_education(user_id, entry)
        if profile is None:
            raise NotFound(NO_PROFILE)
        logger.info("education_added", user_id=user_id, education_id=entry.id)
        return profile

    def remove_education(self, user_id: str, edu_id: str) -> ProfileEntity:
        profile = self.profiles.pull_education(user_id, edu_id)
        if profile is None:
            self.get_own_profile(user_id)
            raise NotFound("Education not found")
        logger.info("education_removed", user_id=user_id, education_id=edu_id)
        return profile

    def delete_account(self, user_id: str) -> None:
        """Delete the profile, then the user.

        The two deletes are independent; both are idempotent, so a partial
        failure is fixed by calling this again.
        """
        self.profiles.delete_by_user(user_id)
        self.users.delete(user_id)
        logger.info("account_deleted", user_id=user_id)
