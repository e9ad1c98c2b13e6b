"""
Pydantic schemas for authentication endpoints (signup and login).

If a required field is missing or malformed, FastAPI returns a 422
before any service code runs.
"""

from pydantic import BaseModel, EmailStr, Field


class UserSignupRequest(BaseModel):
    """Request body for POST /auth/signup."""
    email: EmailStr
    password: str = Field(min_length=8)


class UserLoginRequest(BaseModel):
    """Request body for POST /auth/login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class SignupResponse(BaseModel):
    """Response body for successful signup: user info + JWT."""
    user_id: int
    email: str
    user_type: str
    token: str
    token_type: str = "bearer"
