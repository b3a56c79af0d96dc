"""Organization and membership management routes."""

import typing as t

from fastapi import APIRouter, Depends, Path, status

from tmember.auth import get_current_identity
from tmember.model import AuthenticatedIdentity, MembershipID, OrganizationID
from tmember.organization import OrganizationService

from ..dependency import get_organization_service
from ..view.organization import MemberListResponse, MemberResponse, OrganizationCreateRequest, \
    OrganizationListResponse, OrganizationResponse, RemoveMemberResponse, SwitchOrganizationResponse, \
    UpdateMemberRoleRequest, UpdateMemberRoleResponse

# keys are signed 64-bit integers in every supported store
MaxID = 2**63 - 1
PathID = t.Annotated[int, Path(ge=-MaxID - 1, le=MaxID)]

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.post("", operation_id="create_organization", status_code=status.HTTP_201_CREATED)
def create_organization(
    request: OrganizationCreateRequest,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationResponse:
    """Create an organization with the caller as its admin."""
    organization = service.create(identity, request.name)
    return OrganizationResponse.from_model(organization)


@router.get("", operation_id="list_organizations")
def list_organizations(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationListResponse:
    """List the organizations the caller belongs to."""
    return OrganizationListResponse(
        organizations=[OrganizationResponse.from_model(o) for o in service.list(identity)],
    )


@router.post("/{organization_id}/switch", operation_id="switch_organization")
def switch_organization(
    organization_id: PathID,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> SwitchOrganizationResponse:
    """Confirm the caller may work within an organization."""
    organization = service.switch(identity, OrganizationID(organization_id))
    return SwitchOrganizationResponse(
        organization=OrganizationResponse.from_model(organization),
        message="Successfully switched to organization",
    )


@router.get("/{organization_id}/members", operation_id="list_organization_members")
def list_members(
    organization_id: PathID,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> MemberListResponse:
    """List the members of an organization (admin only)."""
    members = service.list_members(identity, OrganizationID(organization_id))
    return MemberListResponse(members=[MemberResponse.from_model(m) for m in members])


@router.put("/{organization_id}/members/{membership_id}/role", operation_id="update_member_role")
def update_member_role(
    organization_id: PathID,
    membership_id: PathID,
    request: UpdateMemberRoleRequest,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> UpdateMemberRoleResponse:
    """Change a member's role (admin only)."""
    membership = service.update_member_role(
        identity, OrganizationID(organization_id), MembershipID(membership_id), request.role
    )
    return UpdateMemberRoleResponse(
        message="Member role updated successfully",
        membership_id=membership.membership_id,
        new_role=membership.role,
    )


@router.delete("/{organization_id}/members/{membership_id}", operation_id="remove_member")
def remove_member(
    organization_id: PathID,
    membership_id: PathID,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    service: OrganizationService = Depends(get_organization_service),
) -> RemoveMemberResponse:
    """Remove a member from an organization (admin only)."""
    service.remove_member(identity, OrganizationID(organization_id), MembershipID(membership_id))
    return RemoveMemberResponse(message="Member removed successfully", membership_id=MembershipID(membership_id))
