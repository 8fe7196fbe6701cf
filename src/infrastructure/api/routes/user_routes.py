from __future__ import annotations

from fastapi import APIRouter, Depends, status

from src.application.dtos.auth_dto import RegisterRequest, TokenResponse
from src.application.use_cases.register_user import RegisterUserUseCase
from src.infrastructure.api.dependencies import get_register_use_case

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={400: {"description": "Bad Request - Invalid body or email already registered"}},
)


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Register User",
    description="""
    Create an account and log it in.

    **Request Requirements:**
    - `name` must not be empty
    - `email` must be a valid, unregistered email address
    - `password` must have 6 or more characters

    The avatar is taken from Gravatar for the given email.
    """,
    response_description="Signed token for the new account",
)
def register_user(
    body: RegisterRequest,
    register: RegisterUserUseCase = Depends(get_register_use_case),
):
    """Register a user and return a token."""
    return {"token": register.execute(body.name, body.email, body.password)}
