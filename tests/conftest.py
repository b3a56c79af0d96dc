"""Pytest fixtures for tmember tests.

The container is booted once per session in the ``test`` environment, which
points storage at an in-memory SQLite database. Each test runs inside an outer
transaction that is rolled back afterwards, so tests are isolated without
recreating the schema.

Usage:
    def test_list_organizations(client: TestClient, user_factory, org_factory, auth_headers):
        user = user_factory(email="owner@example.com")
        org_factory(name="Acme", admin=user)
        response = client.get("/api/organizations", headers=auth_headers(user))
        assert response.status_code == 200
"""

from __future__ import annotations

import functools
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import tmember
from tmember.auth import credential, IdentityService, TokenManager
from tmember.core import TMemberContainer
from tmember.model import DeploymentEnvironment, MembershipRole, Organization, OrganizationMembership, User
from tmember.organization import OrganizationService
from tmember.storage import membership as membership_storage
from tmember.storage import organization as organization_storage
from tmember.storage import user as user_storage
from tmember.storage.table import metadata

DefaultPassword = "Str0ngPassword"


@pytest.fixture(scope="session")
def container() -> t.Generator[TMemberContainer]:
    """Boot the DI container for the test session and create the schema."""
    ct = TMemberContainer()
    root = Path(os.path.dirname(tmember.__file__)).parent

    TMemberContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    metadata.create_all(ct.storage().persistent().engine())

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: TMemberContainer) -> FastAPI:
    from tmember.core.config.web import WebSettings
    from tmember.web.main import _create_app  # pyright: ignore[reportPrivateUsage]

    return _create_app(config=WebSettings(container.config.web()), env=DeploymentEnvironment.Test)


@pytest.fixture
def db_session(container: TMemberContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    ``join_transaction_mode="create_savepoint"`` turns every
    ``session.begin()`` in the code under test into a savepoint, so the outer
    transaction can be rolled back when the test completes.
    """
    engine = container.storage().persistent().engine()

    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(app: FastAPI, container: TMemberContainer, db_session: Session) -> t.Generator[TestClient]:
    """Provide a TestClient whose requests share the test's transactional session."""
    container.storage().persistent().session.override(db_session)

    with TestClient(app) as test_client:
        yield test_client

    container.storage().persistent().session.reset_override()


@pytest.fixture
def tokens(container: TMemberContainer) -> TokenManager:
    return container.auth().tokens()


@pytest.fixture
def identity_service(db_session: Session, tokens: TokenManager) -> IdentityService:
    return IdentityService(db_session, tokens)


@pytest.fixture
def organization_service(db_session: Session) -> OrganizationService:
    return OrganizationService(db_session)


@functools.cache
def _hash(password: str) -> str:
    return credential.hash_password(password)


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users directly in storage.

    Usage:
        def test_something(user_factory):
            user = user_factory(email="someone@example.com", password="An0therPassword")
    """

    def create_user(email: str = "user@example.com", password: str = DefaultPassword) -> User:
        with db_session.begin():
            return user_storage.create(email=email, password_hash=_hash(password), session=db_session)

    return create_user


@pytest.fixture
def membership_factory(db_session: Session) -> t.Callable[..., OrganizationMembership]:
    def create_membership(
        user: User, organization: Organization, role: MembershipRole = MembershipRole.Member
    ) -> OrganizationMembership:
        with db_session.begin():
            return membership_storage.create(
                user_id=user.user_id,
                organization_id=organization.organization_id,
                role=role,
                session=db_session,
            )

    return create_membership


@pytest.fixture
def org_factory(
    db_session: Session, membership_factory: t.Callable[..., OrganizationMembership]
) -> t.Callable[..., Organization]:
    """Factory fixture for creating organizations, optionally with an admin.

    Usage:
        def test_something(user_factory, org_factory):
            org = org_factory(name="Acme", admin=user_factory())
    """

    def create_organization(
        name: str = "Test Organization",
        admin: User | None = None,
        billing_details: dict[str, t.Any] | None = None,
    ) -> Organization:
        with db_session.begin():
            organization = organization_storage.create(
                name=name, billing_details=billing_details, session=db_session
            )
        if admin is not None:
            membership_factory(admin, organization, MembershipRole.Admin)
        return organization

    return create_organization


@pytest.fixture
def auth_headers(tokens: TokenManager) -> t.Callable[[User], dict[str, str]]:
    """Build an ``Authorization`` header carrying a freshly issued token for a user."""

    def headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {tokens.issue(user.user_id, user.email)}"}

    return headers
