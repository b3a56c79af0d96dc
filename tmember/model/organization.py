import typing as t

from .base import WithTimestamps
from .enum import MembershipRole
from .id import MembershipID, OrganizationID, UserID


class Organization(WithTimestamps):
    organization_id: OrganizationID
    name: str
    billing_details: dict[str, t.Any] | None = None


class OrganizationMembership(WithTimestamps):
    membership_id: MembershipID
    user_id: UserID
    organization_id: OrganizationID
    role: MembershipRole


class OrganizationWithRole(Organization):
    """An organization as seen by one of its members."""

    role: MembershipRole


class MemberWithEmail(OrganizationMembership):
    email: str
