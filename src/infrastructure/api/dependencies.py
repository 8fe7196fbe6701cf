from __future__ import annotations

import os
from typing import Annotated, Callable

from fastapi import Depends, Request, Response, Security
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from fastapi.security import APIKeyHeader

from src.application.use_cases.authenticate_user import AuthenticateUserUseCase
from src.application.use_cases.manage_profile import ProfileManager
from src.application.use_cases.register_user import RegisterUserUseCase
from src.domain.entities.user import AuthIdentity
from src.domain.errors import InvalidToken, Unauthorized
from src.domain.services.password_hasher import PasswordHasher
from src.domain.services.token_service import DEFAULT_EXPIRES_IN, TokenService
from src.infrastructure.database.repositories.profile_repository import ProfileRepository
from src.infrastructure.database.repositories.user_repository import UserRepository
from src.infrastructure.database.supabase_client import get_supabase_client
from src.infrastructure.logging import get_logger

logger = get_logger("auth.guard")

_token_header = APIKeyHeader(name="x-auth-token", auto_error=False)
_hasher = PasswordHasher()


def get_token_service() -> TokenService:
    return TokenService(
        secret=os.getenv("JWT_SECRET"),
        algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        expires_in=int(os.getenv("JWT_EXPIRES_IN", str(DEFAULT_EXPIRES_IN))),
    )


def get_password_hasher() -> PasswordHasher:
    return _hasher


def get_current_identity(
    token: Annotated[str | None, Security(_token_header)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthIdentity:
    """Gate for private routes: returns the identity carried by ``x-auth-token``."""
    if not token:
        raise Unauthorized("No token, authorization denied")
    try:
        return tokens.verify(token)
    except InvalidToken as exc:
        logger.info("token_rejected", reason=str(exc))
        raise Unauthorized("Token is not valid") from None


def _requires_identity(dependant: Dependant) -> bool:
    return any(
        dep.call is get_current_identity or _requires_identity(dep) for dep in dependant.dependencies
    )


class GuardedRoute(APIRoute):
    """
    Route that runs the auth guard before the request body is read.

    FastAPI parses the body before resolving dependencies, so without this a
    private route would answer a malformed body with 400 instead of 401.
    Routes that do not depend on ``get_current_identity`` are left as they are.
    """

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()
        if not _requires_identity(self.dependant):
            return handler

        async def guarded_handler(request: Request) -> Response:
            get_current_identity(request.headers.get("x-auth-token"), get_token_service())
            return await handler(request)

        return guarded_handler


def get_user_repo() -> UserRepository:
    return UserRepository(get_supabase_client())


def get_profile_repo() -> ProfileRepository:
    return ProfileRepository(get_supabase_client())


def get_profile_manager(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
    users: Annotated[UserRepository, Depends(get_user_repo)],
) -> ProfileManager:
    return ProfileManager(profiles=profiles, users=users)


def get_authenticate_use_case(
    users: Annotated[UserRepository, Depends(get_user_repo)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthenticateUserUseCase:
    return AuthenticateUserUseCase(users=users, hasher=hasher, tokens=tokens)


def get_register_use_case(
    users: Annotated[UserRepository, Depends(get_user_repo)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> RegisterUserUseCase:
    return RegisterUserUseCase(users=users, hasher=hasher, tokens=tokens)
