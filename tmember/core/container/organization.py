"""Organization container for dependency injection."""

from __future__ import annotations

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Dependency, Factory, Provider
from sqlalchemy.orm import Session

from tmember.organization import OrganizationService


class OrganizationContainer(DeclarativeContainer):
    session: Provider[Session] = Dependency(instance_of=Session)

    service: Provider[OrganizationService] = Factory(OrganizationService, session=session)
