"""
Authentication router — signup and login endpoints.

These are the only public (unauthenticated) endpoints in the API.

Endpoints:
  POST /auth/signup  — Register a new user and get a token
  POST /auth/login   — Authenticate and get a token

Passwords are hashed before any database operation and never logged.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.database import get_db
from marketing_ledger.schemas.auth import (
    UserSignupRequest,
    UserLoginRequest,
    TokenResponse,
    SignupResponse,
)
from marketing_ledger.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    request: UserSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new member and return a JWT so the user is logged in.

    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 8 characters
    """
    user, token = await auth_service.signup(
        db=db,
        email=request.email,
        password=request.password,
    )
    logger.info("user %s signed up", user.id)

    return SignupResponse(
        user_id=user.id,
        email=user.email,
        user_type=user.user_type.value,
        token=token,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Include the returned token on every subsequent request:

        Authorization: Bearer <token>
    """
    user, token = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )
    return TokenResponse(token=token)
