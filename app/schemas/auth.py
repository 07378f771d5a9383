"""Authentication schemas."""

from __future__ import annotations  # Enable forward references

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    """Signup request schema.

    Password strength is checked in the route so the error matches the
    documented 400 response instead of a validation error.
    """

    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str


class SignupResponse(BaseModel):
    """Signup response schema."""

    message: str
    user: "UserResponse"


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Login response schema."""

    message: str
    access_token: str
    token_type: str
    user: "UserResponse"


class UserResponse(BaseModel):
    """User response schema."""

    id: int
    name: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


# Rebuild models to resolve forward references
SignupResponse.model_rebuild()
LoginResponse.model_rebuild()
