"""Authentication routes."""

from fastapi import APIRouter, Depends, status

from tmember.auth import get_current_identity, get_identity_service, IdentityService
from tmember.model import AuthenticatedIdentity

from ..view.auth import AuthResponse, LoginRequest, LogoutResponse, RegisterRequest
from ..view.user import UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", operation_id="register", status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    identity_service: IdentityService = Depends(get_identity_service),
) -> AuthResponse:
    """Create an account and return it with a session token."""
    user, token = identity_service.register(request.email, request.password)
    return AuthResponse(user=UserResponse.from_model(user), token=token)


@router.post("/login", operation_id="login")
def login(
    request: LoginRequest,
    identity_service: IdentityService = Depends(get_identity_service),
) -> AuthResponse:
    """Authenticate a user and return a session token."""
    user, token = identity_service.login(request.email, request.password)
    return AuthResponse(user=UserResponse.from_model(user), token=token)


@router.post("/logout", operation_id="logout")
def logout(
    identity: AuthenticatedIdentity = Depends(get_current_identity),
) -> LogoutResponse:
    """Logout the current user.

    Tokens are stateless, so logging out means the client discards its token;
    this endpoint only confirms the token was still valid.
    """
    return LogoutResponse(message="Logged out successfully")
