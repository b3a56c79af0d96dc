from __future__ import annotations

import typing as t

import sqlalchemy as sqla
from dependency_injector.wiring import Provide

from tmember.model import MembershipID, MembershipRole, MemberWithEmail, OrganizationID, OrganizationMembership, \
    UserID

from . import Session
from .table import organization_memberships, users


@t.overload
def get(
    membership_id: MembershipID,
    *,
    organization_id: OrganizationID | None = ...,
    session: Session = ...,
) -> OrganizationMembership | None: ...


@t.overload
def get(
    membership_id: None = ...,
    *,
    user_id: UserID,
    organization_id: OrganizationID,
    session: Session = ...,
) -> OrganizationMembership | None: ...


def get(
    membership_id: MembershipID | None = None,
    *,
    user_id: UserID | None = None,
    organization_id: OrganizationID | None = None,
    session: Session = Provide["storage.persistent.session"],
) -> OrganizationMembership | None:
    """Get a membership by ID, or by its (user_id, organization_id) pair.

    When looking up by ID, passing ``organization_id`` scopes the lookup so a
    membership belonging to another organization is not found.
    """
    if membership_id is None and (user_id is None or organization_id is None):
        raise ValueError("Either membership_id or both user_id and organization_id must be provided")
    if membership_id is not None and user_id is not None:
        raise ValueError("Only one of membership_id or user_id should be provided")

    stmt = sqla.select(organization_memberships.__table__)
    if membership_id is not None:
        stmt = stmt.where(organization_memberships.membership_id == membership_id)
    else:
        stmt = stmt.where(organization_memberships.user_id == user_id)
    if organization_id is not None:
        stmt = stmt.where(organization_memberships.organization_id == organization_id)

    row = session.execute(stmt).mappings().one_or_none()
    return OrganizationMembership(**row) if row else None


def find(
    *,
    organization_id: OrganizationID | None = None,
    user_id: UserID | None = None,
    role: MembershipRole | None = None,
    for_update: bool = False,
    session: Session = Provide["storage.persistent.session"],
) -> tuple[OrganizationMembership, ...]:
    """Find memberships matching criteria, ordered by ID.

    ``for_update`` locks the matched rows until the transaction ends, on
    backends that support row locks.
    """
    stmt = sqla.select(organization_memberships.__table__)
    if organization_id is not None:
        stmt = stmt.where(organization_memberships.organization_id == organization_id)
    if user_id is not None:
        stmt = stmt.where(organization_memberships.user_id == user_id)
    if role is not None:
        stmt = stmt.where(organization_memberships.role == role)
    if for_update:
        stmt = stmt.with_for_update()
    rows = session.execute(stmt.order_by(organization_memberships.membership_id)).mappings().all()
    return tuple(OrganizationMembership(**row) for row in rows)


def find_members(
    organization_id: OrganizationID,
    *,
    session: Session = Provide["storage.persistent.session"],
) -> tuple[MemberWithEmail, ...]:
    """Memberships of an organization joined with each member's email, ordered by membership ID."""
    stmt = (
        sqla.select(organization_memberships.__table__, users.email)
        .join(users, users.user_id == organization_memberships.user_id)
        .where(organization_memberships.organization_id == organization_id)
        .order_by(organization_memberships.membership_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(MemberWithEmail(**row) for row in rows)


def create(
    *,
    user_id: UserID,
    organization_id: OrganizationID,
    role: MembershipRole,
    session: Session = Provide["storage.persistent.session"],
) -> OrganizationMembership:
    """Create a membership.

    Raises:
        sqlalchemy.exc.IntegrityError: If the user already belongs to the
            organization, or either side does not exist
    """
    table = organization_memberships.__table__
    stmt = sqla.insert(table).values(user_id=user_id, organization_id=organization_id, role=role)
    result = session.execute(stmt)
    membership_id = MembershipID(result.inserted_primary_key[0])  # pyright: ignore [reportOptionalSubscript]
    return get(membership_id, session=session)  # type: ignore[return-value]


def update(
    membership_id: MembershipID,
    *,
    role: MembershipRole,
    session: Session = Provide["storage.persistent.session"],
) -> OrganizationMembership:
    """Change a membership's role.

    Raises:
        KeyError: If membership_id does not correspond to a membership
    """
    table = organization_memberships.__table__
    stmt = sqla.update(table).where(table.c.membership_id == membership_id).values(role=role)
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Membership {membership_id} not found")
    return get(membership_id, session=session)  # type: ignore[return-value]


def delete(
    membership_id: MembershipID,
    *,
    session: Session = Provide["storage.persistent.session"],
) -> None:
    """Delete a membership.

    Raises:
        KeyError: If membership_id does not correspond to a membership
    """
    table = organization_memberships.__table__
    stmt = sqla.delete(table).where(table.c.membership_id == membership_id)
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Membership {membership_id} not found")
