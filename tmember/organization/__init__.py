__all__ = ["OrganizationService"]

from .service import OrganizationService
