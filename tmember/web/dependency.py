"""Request-scoped dependencies that release their database session when the request finishes."""

import typing as t

from fastapi import Depends
from sqlalchemy.orm import Session

from tmember.core import di
from tmember.organization import OrganizationService


@di.inject
def provide_session(session: Session = Depends(di.Provide["storage.persistent.session"])) -> Session:
    return session


def get_session(session: Session = Depends(provide_session)) -> t.Iterator[Session]:
    with session:
        yield session


@di.inject
def provide_organization_service(
    service: OrganizationService = Depends(di.Provide["organization.service"]),
) -> OrganizationService:
    return service


def get_organization_service(
    service: OrganizationService = Depends(provide_organization_service),
) -> t.Iterator[OrganizationService]:
    with service:
        yield service
