"""View models for authentication endpoints."""

from __future__ import annotations

from tmember.model import BaseModel

from .user import UserResponse


class RegisterRequest(BaseModel):
    """Request body for registration."""

    email: str
    password: str


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str
    password: str


class AuthResponse(BaseModel):
    """Response for successful registration or login."""

    user: UserResponse
    token: str


class LogoutResponse(BaseModel):
    message: str
