"""View models for user endpoints."""

from __future__ import annotations

import datetime

from tmember.model import BaseModel, User, UserID

from .organization import OrganizationResponse


class UserResponse(BaseModel):
    """Public account information; the password hash is never included."""

    id: UserID
    email: str
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def from_model(cls, user: User) -> UserResponse:
        return cls(id=user.user_id, email=user.email, created_at=user.create_time, updated_at=user.update_time)


class CurrentUserResponse(BaseModel):
    user: UserResponse
    organizations: list[OrganizationResponse]
