"""Authentication dependencies for FastAPI routes."""

import typing as t

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tmember.core import di
from tmember.errors import NotAuthenticated
from tmember.model import AuthenticatedIdentity

from .identity import IdentityService

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


@di.inject
def provide_identity_service(
    identity: IdentityService = Depends(di.Provide["auth.identity"]),
) -> IdentityService:
    return identity


def get_identity_service(
    identity: IdentityService = Depends(provide_identity_service),
) -> t.Iterator[IdentityService]:
    """Identity service scoped to one request; its session is closed when the request finishes."""
    with identity:
        yield identity


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    identity: IdentityService = Depends(get_identity_service),
) -> AuthenticatedIdentity:
    """Dependency resolving the ``Authorization: Bearer`` header into the caller's identity.

    Raises:
        NotAuthenticated: If the header is missing, not a bearer token, or the
            token does not verify
    """
    if credentials is None:
        raise NotAuthenticated("Authorization header required")
    return identity.authenticate(credentials.credentials)
