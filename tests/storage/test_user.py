"""Tests for tmember.storage.user module."""

from __future__ import annotations

import typing as t

import pytest
import sqlalchemy as sqla
from sqlalchemy.orm import Session

from tmember.model import User, UserID, UserWithCredentials
from tmember.storage import user as user_storage


class TestGet(object):
    """Tests for user_storage.get()."""

    def test_get_by_user_id(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory(email="test@example.com")

        with db_session.begin():
            result = user_storage.get(user_id=user.user_id, session=db_session)

        assert result is not None
        assert result.user_id == user.user_id
        assert result.email == "test@example.com"
        assert result.create_time is not None

    def test_get_by_email(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory(email="findme@example.com")

        with db_session.begin():
            result = user_storage.get(email="findme@example.com", session=db_session)

        assert result is not None
        assert result.user_id == user.user_id

    def test_credentials_only_on_request(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user_factory(email="secret@example.com")

        with db_session.begin():
            plain = user_storage.get(email="secret@example.com", session=db_session)
            with_credentials = user_storage.get(email="secret@example.com", with_credentials=True, session=db_session)

        assert type(plain) is User
        assert isinstance(with_credentials, UserWithCredentials)
        assert with_credentials.password_hash.startswith("$2")

    def test_get_nonexistent_returns_none(self, db_session: Session) -> None:
        with db_session.begin():
            assert user_storage.get(user_id=UserID(999999), session=db_session) is None
            assert user_storage.get(email="nobody@example.com", session=db_session) is None

    def test_get_requires_user_id_or_email(self, db_session: Session) -> None:
        with pytest.raises(ValueError, match="Either user_id or email"):
            user_storage.get(session=db_session)  # type: ignore[call-overload]

    def test_get_rejects_both_keys(self, db_session: Session) -> None:
        with pytest.raises(ValueError, match="Only one"):
            user_storage.get(  # type: ignore[call-overload]
                user_id=UserID(1), email="a@example.com", session=db_session
            )


class TestFind(object):
    def test_ordered_by_id(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        first = user_factory(email="b@example.com")
        second = user_factory(email="a@example.com")

        with db_session.begin():
            result = user_storage.find(session=db_session)

        assert [u.user_id for u in result] == [first.user_id, second.user_id]


class TestCreate(object):
    def test_assigns_id_and_timestamps(self, db_session: Session) -> None:
        with db_session.begin():
            user = user_storage.create(email="new@example.com", password_hash="$2b$12$hash", session=db_session)

        assert user.user_id > 0
        assert user.create_time is not None
        assert user.update_time is not None

    def test_duplicate_email_violates_constraint(
        self, db_session: Session, user_factory: t.Callable[..., User]
    ) -> None:
        user_factory(email="dup@example.com")

        with pytest.raises(sqla.exc.IntegrityError):
            with db_session.begin():
                user_storage.create(email="dup@example.com", password_hash="$2b$12$hash", session=db_session)
