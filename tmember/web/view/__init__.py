"""View models for the tmember web application."""

__all__ = [
    # Auth views
    "AuthResponse",
    "LoginRequest",
    "LogoutResponse",
    "RegisterRequest",
    # User views
    "CurrentUserResponse",
    "UserResponse",
    # Organization views
    "MemberListResponse",
    "MemberResponse",
    "OrganizationCreateRequest",
    "OrganizationListResponse",
    "OrganizationResponse",
    "RemoveMemberResponse",
    "SwitchOrganizationResponse",
    "UpdateMemberRoleRequest",
    "UpdateMemberRoleResponse",
    # Misc
    "ErrorResponse",
    "HealthResponse",
]

from .auth import AuthResponse, LoginRequest, LogoutResponse, RegisterRequest
from .error import ErrorResponse
from .health import HealthResponse
from .organization import MemberListResponse, MemberResponse, OrganizationCreateRequest, OrganizationListResponse, \
    OrganizationResponse, RemoveMemberResponse, SwitchOrganizationResponse, UpdateMemberRoleRequest, \
    UpdateMemberRoleResponse
from .user import CurrentUserResponse, UserResponse
