from __future__ import annotations

from fastapi import APIRouter, Depends

from src.application.dtos.common_dto import MessageResponse
from src.application.dtos.profile_dto import (
    EducationRequest,
    ExperienceRequest,
    ProfileResponse,
    ProfileUpsertRequest,
)
from src.application.use_cases.manage_profile import ProfileManager
from src.domain.entities.user import AuthIdentity
from src.infrastructure.api.dependencies import GuardedRoute, get_current_identity, get_profile_manager

router = APIRouter(
    prefix="/profile",
    tags=["Profiles"],
    route_class=GuardedRoute,
    responses={
        400: {"description": "Bad Request - Invalid body, or profile / entry not found"},
        401: {"description": "Unauthorized - Invalid or missing x-auth-token header"},
    },
)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get Own Profile",
    description="""
    Return the profile of the authenticated user, joined with the user's name and avatar.

    **Authentication required**: Yes (x-auth-token)
    """,
)
def get_own_profile(
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Get current user's profile."""
    return ProfileResponse.from_entity(manager.get_own_profile(identity.user_id))


@router.post(
    "",
    response_model=ProfileResponse,
    summary="Create or Update Profile",
    description="""
    Create the authenticated user's profile, or update it if it already exists.

    **Request Requirements:**
    - `status` and `skills` are required
    - `skills` is a comma separated string; each skill is trimmed
    - Omitted or blank fields keep their stored value
    - Social links (`youtube`, `twitter`, `facebook`, `linkedin`, `instagram`)
      are merged into the stored ones

    **Authentication required**: Yes (x-auth-token)
    """,
)
def upsert_profile(
    body: ProfileUpsertRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Create or update user profile."""
    return ProfileResponse.from_entity(manager.upsert_profile(identity.user_id, body.to_patch()))


@router.get(
    "",
    response_model=list[ProfileResponse],
    summary="List Profiles",
    description="Return every profile, each joined with its owner's name and avatar.",
)
def list_profiles(manager: ProfileManager = Depends(get_profile_manager)):
    """Get all profiles."""
    return [ProfileResponse.from_entity(p) for p in manager.list_profiles()]


@router.get(
    "/user/{user_id}",
    response_model=ProfileResponse,
    summary="Get Profile by User ID",
    description="Return the profile owned by `user_id`. Unknown ids answer 400 `Profile not found`.",
)
def get_profile_by_user(user_id: str, manager: ProfileManager = Depends(get_profile_manager)):
    """Get profile by user ID."""
    return ProfileResponse.from_entity(manager.get_profile_by_user(user_id))


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete Account",
    description="""
    Delete the authenticated user's profile and then the user account.

    **Authentication required**: Yes (x-auth-token)
    """,
)
def delete_account(
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Delete profile and user."""
    manager.delete_account(identity.user_id)
    return {"msg": "User deleted"}


@router.put(
    "/experience",
    response_model=ProfileResponse,
    summary="Add Experience",
    description="""
    Add an experience entry to the top of the authenticated user's profile.

    **Request Requirements:**
    - `title`, `company` and `from` are required
    - `from` and `to` are ISO dates (`YYYY-MM-DD`)

    **Authentication required**: Yes (x-auth-token)
    """,
)
def add_experience(
    body: ExperienceRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Add profile experience."""
    return ProfileResponse.from_entity(manager.add_experience(identity.user_id, body.to_entity()))


@router.delete(
    "/experience/{exp_id}",
    response_model=ProfileResponse,
    summary="Remove Experience",
    description="Remove one experience entry by id. Unknown ids answer 400 and change nothing.",
)
def remove_experience(
    exp_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Delete experience from profile."""
    return ProfileResponse.from_entity(manager.remove_experience(identity.user_id, exp_id))


@router.put(
    "/education",
    response_model=ProfileResponse,
    summary="Add Education",
    description="""
    Add an education entry to the top of the authenticated user's profile.

    **Request Requirements:**
    - `school`, `degree`, `fieldofstudy` and `from` are required
    - `from` and `to` are ISO dates (`YYYY-MM-DD`)

    **Authentication required**: Yes (x-auth-token)
    """,
)
def add_education(
    body: EducationRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Add profile education."""
    return ProfileResponse.from_entity(manager.add_education(identity.user_id, body.to_entity()))


@router.delete(
    "/education/{edu_id}",
    response_model=ProfileResponse,
    summary="Remove Education",
    description="Remove one education entry by id. Unknown ids answer 400 and change nothing.",
)
def remove_education(
    edu_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    manager: ProfileManager = Depends(get_profile_manager),
):
    """Delete education from profile."""
    return ProfileResponse.from_entity(manager.remove_education(identity.user_id, edu_id))
