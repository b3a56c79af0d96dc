from __future__ import annotations

import typing as t

import sqlalchemy as sqla
from dependency_injector.wiring import Provide

from tmember.model import User, UserID, UserWithCredentials

from . import Session
from .table import users


@t.overload
def get(
    *,
    user_id: UserID,
    with_credentials: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    email: str,
    with_credentials: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    email: str,
    with_credentials: t.Literal[True],
    session: Session = ...,
) -> UserWithCredentials | None: ...


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    with_credentials: bool = False,
    session: Session = Provide["storage.persistent.session"],
) -> User | UserWithCredentials | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided. The stored password
    hash is only included when ``with_credentials`` is set.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        stmt = sqla.select(users.__table__).where(users.email == email)

    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return UserWithCredentials(**row) if with_credentials else User(**row)


def find(*, session: Session = Provide["storage.persistent.session"]) -> tuple[User, ...]:
    """Find all users, ordered by ID."""
    stmt = sqla.select(users.__table__).order_by(users.user_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def create(
    *,
    email: str,
    password_hash: str,
    session: Session = Provide["storage.persistent.session"],
) -> User:
    """Create a new user.

    Raises:
        sqlalchemy.exc.IntegrityError: If the email is already registered
    """
    stmt = sqla.insert(users.__table__).values(email=email, password_hash=password_hash)
    result = session.execute(stmt)
    user_id = UserID(result.inserted_primary_key[0])  # pyright: ignore [reportOptionalSubscript]
    return get(user_id=user_id, session=session)  # type: ignore[return-value]
