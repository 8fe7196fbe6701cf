from __future__ import annotations

from fastapi import APIRouter, Depends, status

from src.application.dtos.auth_dto import LoginRequest, TokenResponse, UserResponse
from src.application.use_cases.authenticate_user import AuthenticateUserUseCase
from src.domain.entities.user import AuthIdentity
from src.infrastructure.api.dependencies import get_authenticate_use_case, get_current_identity

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad Request - Invalid credentials or request body"},
        401: {"description": "Unauthorized - Invalid or missing x-auth-token header"},
    },
)


@router.get(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Authenticated User",
    description="""
    Return the account behind the token in the `x-auth-token` header.

    The password hash is never included.

    **Authentication required**: Yes (x-auth-token)
    """,
    response_description="The authenticated user",
)
def get_authenticated_user(
    identity: AuthIdentity = Depends(get_current_identity),
    auth: AuthenticateUserUseCase = Depends(get_authenticate_use_case),
):
    """Get the authenticated user."""
    return UserResponse.from_entity(auth.current_user(identity))


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Log In",
    description="""
    Authenticate with email and password and receive a signed token.

    **Errors:**
    - Missing or malformed fields answer 400 with an `errors` list
    - Unknown email or wrong password answer 400 with `Invalid Credentials`

    The token expires after 10 hours by default.
    """,
    response_description="Signed token for the x-auth-token header",
)
def login(
    body: LoginRequest,
    auth: AuthenticateUserUseCase = Depends(get_authenticate_use_case),
):
    """Authenticate user and get token."""
    return {"token": auth.execute(body.email, body.password)}
