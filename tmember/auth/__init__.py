"""Authentication utilities."""

__all__ = [
    "Claims",
    "IdentityService",
    "TokenManager",
    "bearer_scheme",
    "credential",
    "get_current_identity",
    "get_identity_service",
]

from . import credential
from .identity import IdentityService
from .jwt import Claims, TokenManager
from .middleware import bearer_scheme, get_current_identity, get_identity_service
