"""Tests for tmember.organization.OrganizationService."""

from __future__ import annotations

import typing as t

import pytest
import sqlalchemy as sqla
from sqlalchemy.orm import Session

from tmember.errors import AccessDenied, AdminRequired, InternalError, InvalidName, InvalidRole, LastAdminError, \
    NameExists, NotFound
from tmember.model import AuthenticatedIdentity, MembershipID, MembershipRole, Organization, OrganizationID, \
    OrganizationMembership, User, UserID
from tmember.organization import OrganizationService
from tmember.storage import membership as membership_storage
from tmember.storage import organization as organization_storage
from tmember.storage.table import organizations


def identity_of(user: User) -> AuthenticatedIdentity:
    return AuthenticatedIdentity(user_id=user.user_id, email=user.email)


def memberships_of(db_session: Session, organization: Organization) -> tuple[OrganizationMembership, ...]:
    with db_session.begin():
        return membership_storage.find(organization_id=organization.organization_id, session=db_session)


class TestCreate(object):
    def test_creator_becomes_admin(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        db_session: Session,
    ) -> None:
        user = user_factory()

        organization = organization_service.create(identity_of(user), "Acme")

        assert organization.name == "Acme"
        assert organization.role is MembershipRole.Admin
        assert organization.billing_details is None

        memberships = memberships_of(db_session, organization)
        assert [(m.user_id, m.role) for m in memberships] == [(user.user_id, MembershipRole.Admin)]

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_rejects_blank_name(
        self, organization_service: OrganizationService, user_factory: t.Callable[..., User], name: str
    ) -> None:
        with pytest.raises(InvalidName):
            organization_service.create(identity_of(user_factory()), name)

    def test_accepts_long_name(
        self, organization_service: OrganizationService, user_factory: t.Callable[..., User]
    ) -> None:
        name = "Acme " * 200

        organization = organization_service.create(identity_of(user_factory()), name)

        assert organization.name == name
        assert organizations.__table__.c.name.type.length is None  # pyright: ignore[reportAttributeAccessIssue]

    def test_rejects_duplicate_name(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        org_factory: t.Callable[..., Organization],
    ) -> None:
        org_factory(name="Acme")

        with pytest.raises(NameExists):
            organization_service.create(identity_of(user_factory()), "Acme")

    def test_unique_constraint_backs_the_precheck(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        org_factory: t.Callable[..., Organization],
        monkeypatch: pytest.MonkeyPatch,
        db_session: Session,
    ) -> None:
        """A racing creation that slips past the lookup still gets NameExists."""
        org_factory(name="Acme")
        get = organization_storage.get

        def blind_get(organization_id: OrganizationID | None = None, **kwargs: t.Any) -> t.Any:
            return None if "name" in kwargs else get(organization_id, **kwargs)

        monkeypatch.setattr(organization_storage, "get", blind_get)

        with pytest.raises(NameExists):
            organization_service.create(identity_of(user_factory()), "Acme")

        monkeypatch.undo()
        with db_session.begin():
            assert len(organization_storage.find(session=db_session)) == 1

    def test_failed_membership_leaves_no_organization(
        self, organization_service: OrganizationService, db_session: Session
    ) -> None:
        """The organization row is rolled back when the admin membership cannot be written."""
        ghost = AuthenticatedIdentity(user_id=UserID(999999), email="ghost@example.com")

        with pytest.raises(InternalError):
            organization_service.create(ghost, "Orphaned")

        with db_session.begin():
            assert organization_storage.get(name="Orphaned", session=db_session) is None

    def test_forced_failure_rolls_back(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        monkeypatch: pytest.MonkeyPatch,
        db_session: Session,
    ) -> None:
        user = user_factory()

        def fail(**kwargs: t.Any) -> t.NoReturn:
            raise sqla.exc.OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(membership_storage, "create", fail)

        with pytest.raises(InternalError) as exc_info:
            organization_service.create(identity_of(user), "Doomed")

        assert "disk I/O error" not in exc_info.value.message
        with db_session.begin():
            assert organization_storage.find(session=db_session) == ()


class TestList(object):
    def test_lists_only_own_organizations_in_id_order(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        org_factory: t.Callable[..., Organization],
        membership_factory: t.Callable[..., OrganizationMembership],
    ) -> None:
        user = user_factory(email="me@example.com")
        other = user_factory(email="other@example.com")
        first = org_factory(name="First", admin=user)
        org_factory(name="Hidden", admin=other)
        third = org_factory(name="Third", admin=other)
        membership_factory(user, third, MembershipRole.Member)

        organizations = organization_service.list(identity_of(user))

        assert [(o.name, o.role) for o in organizations] == [
            ("First", MembershipRole.Admin),
            ("Third", MembershipRole.Member),
        ]
        assert organizations[0].organization_id == first.organization_id

    def test_empty_for_new_user(
        self, organization_service: OrganizationService, user_factory: t.Callable[..., User]
    ) -> None:
        assert organization_service.list(identity_of(user_factory())) == ()


class TestSwitchAndCheckAccess(object):
    def test_member_can_switch(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        org_factory: t.Callable[..., Organization],
        membership_factory: t.Callable[..., OrganizationMembership],
    ) -> None:
        admin = user_factory(email="admin@example.com")
        member = user_factory(email="member@example.com")
        organization = org_factory(name="Acme", admin=admin)
        membership_factory(member, organization)

        switched = organization_service.switch(identity_of(member), organization.organization_id)

        assert switched.organization_id == organization.organization_id
        assert switched.role is MembershipRole.Member
        assert organization_service.check_access(identity_of(admin), organization.organization_id) is (
            MembershipRole.Admin
        )

    def test_non_member_is_denied(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
        org_factory: t.Callable[..., Organization],
    ) -> None:
        outsider = user_factory(email="outsider@example.com")
        organization = org_factory(name="Acme", admin=user_factory(email="admin@example.com"))

        with pytest.raises(AccessDenied):
            organization_service.switch(identity_of(outsider), organization.organization_id)
        with pytest.raises(AccessDenied):
            organization_service.check_access(identity_of(outsider), organization.organization_id)

    def test_nonexistent_organization_is_denied(
        self, organization_service: OrganizationService, user_factory: t.Callable[..., User]
    ) -> None:
        with pytest.raises(AccessDenied):
            organization_service.switch(identity_of(user_factory()), OrganizationID(999999))


@pytest.fixture
def team(
    user_factory: t.Callable[..., User],
    org_factory: t.Callable[..., Organization],
    membership_factory: t.Callable[..., OrganizationMembership],
    db_session: Session,
) -> dict[str, t.Any]:
    """An organization with one admin and one member."""
    admin = user_factory(email="admin@example.com")
    member = user_factory(email="member@example.com")
    organization = org_factory(name="Acme", admin=admin)
    member_membership = membership_factory(member, organization)
    admin_membership = memberships_of(db_session, organization)[0]
    return {
        "admin": admin,
        "member": member,
        "organization": organization,
        "admin_membership": admin_membership,
        "member_membership": member_membership,
    }


class TestListMembers(object):
    def test_admin_sees_members_with_emails(
        self, organization_service: OrganizationService, team: dict[str, t.Any]
    ) -> None:
        members = organization_service.list_members(identity_of(team["admin"]), team["organization"].organization_id)

        assert [(m.email, m.role) for m in members] == [
            ("admin@example.com", MembershipRole.Admin),
            ("member@example.com", MembershipRole.Member),
        ]

    def test_member_requires_admin(self, organization_service: OrganizationService, team: dict[str, t.Any]) -> None:
        with pytest.raises(AdminRequired):
            organization_service.list_members(identity_of(team["member"]), team["organization"].organization_id)

    def test_outsider_is_denied(
        self,
        organization_service: OrganizationService,
        team: dict[str, t.Any],
        user_factory: t.Callable[..., User],
    ) -> None:
        outsider = user_factory(email="outsider@example.com")

        with pytest.raises(AccessDenied):
            organization_service.list_members(identity_of(outsider), team["organization"].organization_id)


class TestUpdateMemberRole(object):
    def test_promotes_member(
        self, organization_service: OrganizationService, team: dict[str, t.Any], db_session: Session
    ) -> None:
        updated = organization_service.update_member_role(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            team["member_membership"].membership_id,
            "admin",
        )

        assert updated.role is MembershipRole.Admin
        assert [m.role for m in memberships_of(db_session, team["organization"])] == [MembershipRole.Admin] * 2

    def test_demotes_admin_when_another_remains(
        self,
        organization_service: OrganizationService,
        team: dict[str, t.Any],
        membership_factory: t.Callable[..., OrganizationMembership],
        user_factory: t.Callable[..., User],
    ) -> None:
        second_admin = membership_factory(
            user_factory(email="second@example.com"), team["organization"], MembershipRole.Admin
        )

        updated = organization_service.update_member_role(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            second_admin.membership_id,
            MembershipRole.Member,
        )

        assert updated.role is MembershipRole.Member

    def test_refuses_to_demote_last_admin(
        self, organization_service: OrganizationService, team: dict[str, t.Any], db_session: Session
    ) -> None:
        with pytest.raises(LastAdminError):
            organization_service.update_member_role(
                identity_of(team["admin"]),
                team["organization"].organization_id,
                team["admin_membership"].membership_id,
                "member",
            )

        roles = [m.role for m in memberships_of(db_session, team["organization"])]
        assert roles == [MembershipRole.Admin, MembershipRole.Member]

    def test_rejects_unknown_role(self, organization_service: OrganizationService, team: dict[str, t.Any]) -> None:
        with pytest.raises(InvalidRole):
            organization_service.update_member_role(
                identity_of(team["admin"]),
                team["organization"].organization_id,
                team["member_membership"].membership_id,
                "owner",
            )

    def test_member_requires_admin(self, organization_service: OrganizationService, team: dict[str, t.Any]) -> None:
        with pytest.raises(AdminRequired):
            organization_service.update_member_role(
                identity_of(team["member"]),
                team["organization"].organization_id,
                team["member_membership"].membership_id,
                "admin",
            )

    def test_membership_of_other_organization_is_not_found(
        self,
        organization_service: OrganizationService,
        team: dict[str, t.Any],
        org_factory: t.Callable[..., Organization],
        user_factory: t.Callable[..., User],
        db_session: Session,
    ) -> None:
        other = org_factory(name="Elsewhere", admin=user_factory(email="elsewhere@example.com"))
        foreign = memberships_of(db_session, other)[0]

        with pytest.raises(NotFound):
            organization_service.update_member_role(
                identity_of(team["admin"]), team["organization"].organization_id, foreign.membership_id, "member"
            )

        assert memberships_of(db_session, other)[0].role is MembershipRole.Admin

    def test_nonexistent_membership_is_not_found(
        self, organization_service: OrganizationService, team: dict[str, t.Any]
    ) -> None:
        with pytest.raises(NotFound):
            organization_service.update_member_role(
                identity_of(team["admin"]), team["organization"].organization_id, MembershipID(999999), "admin"
            )


class TestRemoveMember(object):
    def test_removes_member(
        self, organization_service: OrganizationService, team: dict[str, t.Any], db_session: Session
    ) -> None:
        organization_service.remove_member(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            team["member_membership"].membership_id,
        )

        assert [m.user_id for m in memberships_of(db_session, team["organization"])] == [team["admin"].user_id]

    def test_refuses_to_remove_last_admin(
        self, organization_service: OrganizationService, team: dict[str, t.Any], db_session: Session
    ) -> None:
        with pytest.raises(LastAdminError):
            organization_service.remove_member(
                identity_of(team["admin"]),
                team["organization"].organization_id,
                team["admin_membership"].membership_id,
            )

        assert len(memberships_of(db_session, team["organization"])) == 2

    def test_admin_can_leave_when_another_admin_remains(
        self,
        organization_service: OrganizationService,
        team: dict[str, t.Any],
        db_session: Session,
    ) -> None:
        organization_service.update_member_role(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            team["member_membership"].membership_id,
            "admin",
        )

        organization_service.remove_member(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            team["admin_membership"].membership_id,
        )

        remaining = memberships_of(db_session, team["organization"])
        assert [(m.user_id, m.role) for m in remaining] == [(team["member"].user_id, MembershipRole.Admin)]

    def test_member_requires_admin(self, organization_service: OrganizationService, team: dict[str, t.Any]) -> None:
        with pytest.raises(AdminRequired):
            organization_service.remove_member(
                identity_of(team["member"]),
                team["organization"].organization_id,
                team["admin_membership"].membership_id,
            )

    def test_nonexistent_membership_is_not_found(
        self, organization_service: OrganizationService, team: dict[str, t.Any]
    ) -> None:
        with pytest.raises(NotFound):
            organization_service.remove_member(
                identity_of(team["admin"]), team["organization"].organization_id, MembershipID(999999)
            )


class TestIsolation(object):
    def test_disjoint_users_cannot_see_each_other(
        self,
        organization_service: OrganizationService,
        user_factory: t.Callable[..., User],
    ) -> None:
        a = identity_of(user_factory(email="a@example.com"))
        b = identity_of(user_factory(email="b@example.com"))
        org_of_a = organization_service.create(a, "A Corp")
        org_of_b = organization_service.create(b, "B Corp")

        with pytest.raises(AccessDenied):
            organization_service.switch(a, org_of_b.organization_id)
        with pytest.raises(AccessDenied):
            organization_service.list_members(a, org_of_b.organization_id)
        with pytest.raises(AccessDenied):
            organization_service.remove_member(a, org_of_b.organization_id, MembershipID(1))

        assert [o.organization_id for o in organization_service.list(a)] == [org_of_a.organization_id]
        assert [o.organization_id for o in organization_service.list(b)] == [org_of_b.organization_id]


class TestSecondAdmin(object):
    @pytest.mark.parametrize("removed", ["admin_membership", "second_membership"])
    def test_either_admin_can_be_removed(
        self,
        organization_service: OrganizationService,
        team: dict[str, t.Any],
        user_factory: t.Callable[..., User],
        membership_factory: t.Callable[..., OrganizationMembership],
        db_session: Session,
        removed: str,
    ) -> None:
        second = user_factory(email="second@example.com")
        memberships = {
            "admin_membership": team["admin_membership"],
            "second_membership": membership_factory(second, team["organization"], MembershipRole.Admin),
        }

        organization_service.remove_member(
            identity_of(team["admin"]),
            team["organization"].organization_id,
            memberships[removed].membership_id,
        )

        remaining = [m.membership_id for m in memberships_of(db_session, team["organization"])]
        assert memberships[removed].membership_id not in remaining
        assert len(remaining) == 2


class TestClose(object):
    def test_context_exit_closes_session(self, db_session: Session, monkeypatch: pytest.MonkeyPatch) -> None:
        closed: list[bool] = []
        monkeypatch.setattr(db_session, "close", lambda: closed.append(True))

        with OrganizationService(db_session):
            assert not closed

        assert closed == [True]

    def test_session_is_closed_when_an_operation_fails(
        self, db_session: Session, user_factory: t.Callable[..., User], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        user = user_factory()
        closed: list[bool] = []
        monkeypatch.setattr(db_session, "close", lambda: closed.append(True))

        with pytest.raises(AccessDenied):
            with OrganizationService(db_session) as service:
                service.switch(identity_of(user), OrganizationID(999999))

        assert closed == [True]
