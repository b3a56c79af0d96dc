"""User routes."""

from fastapi import APIRouter, Depends

from tmember.auth import get_current_identity, get_identity_service, IdentityService
from tmember.model import AuthenticatedIdentity

from ..view.organization import OrganizationResponse
from ..view.user import CurrentUserResponse, UserResponse

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", operation_id="get_current_user")
def get_me(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service),
) -> CurrentUserResponse:
    """Get the current user and the organizations they belong to."""
    user, organizations = identity_service.get_current_user(identity)
    return CurrentUserResponse(
        user=UserResponse.from_model(user),
        organizations=[OrganizationResponse.from_model(o) for o in organizations],
    )
