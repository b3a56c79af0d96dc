from __future__ import annotations

import typing as t

import sqlalchemy as sqla
from dependency_injector.wiring import Provide

from tmember.model import Organization, OrganizationID, OrganizationWithRole, UserID

from . import Session
from .table import organization_memberships, organizations


@t.overload
def get(
    organization_id: OrganizationID,
    *,
    session: Session = ...,
) -> Organization | None: ...


@t.overload
def get(
    organization_id: None = ...,
    *,
    name: str,
    session: Session = ...,
) -> Organization | None: ...


def get(
    organization_id: OrganizationID | None = None,
    *,
    name: str | None = None,
    session: Session = Provide["storage.persistent.session"],
) -> Organization | None:
    """Get an organization by ID or name.

    Exactly one of organization_id or name must be provided.
    """
    if organization_id is None and name is None:
        raise ValueError("Either organization_id or name must be provided")
    if organization_id is not None and name is not None:
        raise ValueError("Only one of organization_id or name should be provided")

    if organization_id is not None:
        stmt = sqla.select(organizations.__table__).where(organizations.organization_id == organization_id)
    else:
        stmt = sqla.select(organizations.__table__).where(organizations.name == name)

    row = session.execute(stmt).mappings().one_or_none()
    return Organization(**row) if row else None


@t.overload
def find(
    *,
    user_id: UserID | None = ...,
    with_role: t.Literal[False] = ...,
    session: Session = ...,
) -> tuple[Organization, ...]: ...


@t.overload
def find(
    *,
    user_id: UserID,
    with_role: t.Literal[True],
    session: Session = ...,
) -> tuple[OrganizationWithRole, ...]: ...


def find(
    *,
    user_id: UserID | None = None,
    with_role: bool = False,
    session: Session = Provide["storage.persistent.session"],
) -> tuple[Organization, ...] | tuple[OrganizationWithRole, ...]:
    """Find organizations, ordered by ID.

    With ``user_id``, only organizations that user belongs to are returned;
    ``with_role`` additionally attaches the user's role in each.
    """
    if with_role and user_id is None:
        raise ValueError("with_role requires user_id")

    if user_id is None:
        stmt = sqla.select(organizations.__table__)
    else:
        columns = [*organizations.__table__.c]
        if with_role:
            columns.append(organization_memberships.role)
        stmt = (
            sqla.select(*columns)
            .join(
                organization_memberships, organizations.organization_id == organization_memberships.organization_id
            )
            .where(organization_memberships.user_id == user_id)
        )
    rows = session.execute(stmt.order_by(organizations.organization_id)).mappings().all()
    if with_role:
        return tuple(OrganizationWithRole(**row) for row in rows)
    return tuple(Organization(**row) for row in rows)


def create(
    *,
    name: str,
    billing_details: dict[str, t.Any] | None = None,
    session: Session = Provide["storage.persistent.session"],
) -> Organization:
    """Create a new organization.

    Raises:
        sqlalchemy.exc.IntegrityError: If the name is already taken
    """
    stmt = sqla.insert(organizations.__table__).values(name=name, billing_details=billing_details)
    result = session.execute(stmt)
    organization_id = OrganizationID(result.inserted_primary_key[0])  # pyright: ignore [reportOptionalSubscript]
    return get(organization_id, session=session)  # type: ignore[return-value]
