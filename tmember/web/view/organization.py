"""View models for organization endpoints."""

from __future__ import annotations

import datetime
import typing as t

from tmember.model import BaseModel, MembershipID, MembershipRole, MemberWithEmail, OrganizationID, \
    OrganizationWithRole, UserID


class OrganizationCreateRequest(BaseModel):
    """Request body for creating an organization."""

    name: str


class OrganizationResponse(BaseModel):
    """An organization together with the caller's role in it."""

    id: OrganizationID
    name: str
    billing_details: dict[str, t.Any] | None
    created_at: datetime.datetime
    updated_at: datetime.datetime
    role: MembershipRole

    @classmethod
    def from_model(cls, organization: OrganizationWithRole) -> OrganizationResponse:
        return cls(
            id=organization.organization_id,
            name=organization.name,
            billing_details=organization.billing_details,
            created_at=organization.create_time,
            updated_at=organization.update_time,
            role=organization.role,
        )


class OrganizationListResponse(BaseModel):
    organizations: list[OrganizationResponse]


class SwitchOrganizationResponse(BaseModel):
    organization: OrganizationResponse
    message: str


class MemberResponse(BaseModel):
    """A membership of an organization, with the member's email."""

    id: MembershipID
    user_id: UserID
    email: str
    role: MembershipRole

    @classmethod
    def from_model(cls, member: MemberWithEmail) -> MemberResponse:
        return cls(id=member.membership_id, user_id=member.user_id, email=member.email, role=member.role)


class MemberListResponse(BaseModel):
    members: list[MemberResponse]


class UpdateMemberRoleRequest(BaseModel):
    """Request body for changing a member's role.

    The role is validated by the service so an unknown value is reported as
    ``INVALID_ROLE`` rather than as a malformed request.
    """

    role: str


class UpdateMemberRoleResponse(BaseModel):
    message: str
    membership_id: MembershipID
    new_role: MembershipRole


class RemoveMemberResponse(BaseModel):
    message: str
    membership_id: MembershipID
