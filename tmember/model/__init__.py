__all__ = [
    # Base
    "BaseModel",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    "MembershipRole",
    # ID Types
    "MembershipID",
    "OrganizationID",
    "UserID",
    # User
    "AuthenticatedIdentity",
    "User",
    "UserWithCredentials",
    # Organization & Membership
    "MemberWithEmail",
    "Organization",
    "OrganizationMembership",
    "OrganizationWithRole",
]

from .base import BaseModel, WithTimestamps
from .enum import DeploymentEnvironment, MembershipRole
from .id import MembershipID, OrganizationID, UserID
from .organization import MemberWithEmail, Organization, OrganizationMembership, OrganizationWithRole
from .user import AuthenticatedIdentity, User, UserWithCredentials
