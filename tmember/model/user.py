from .base import BaseModel, WithTimestamps
from .id import UserID


class User(WithTimestamps):
    user_id: UserID
    email: str


class UserWithCredentials(User):
    """User row including the stored bcrypt hash; never leaves the service layer."""

    password_hash: str


class AuthenticatedIdentity(BaseModel):
    """Caller identity established from a verified session token."""

    user_id: UserID
    email: str
