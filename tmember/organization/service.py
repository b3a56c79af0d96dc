"""Organization creation and membership administration."""

from __future__ import annotations

import logging
import typing as t

import sqlalchemy as sqla

from tmember.errors import AccessDenied, AdminRequired, InternalError, InvalidName, InvalidRole, LastAdminError, \
    NameExists, NotFound, TMemberError
from tmember.model import AuthenticatedIdentity, MembershipID, MembershipRole, MemberWithEmail, OrganizationID, \
    OrganizationMembership, OrganizationWithRole
from tmember.storage import membership as membership_storage
from tmember.storage import organization as organization_storage
from tmember.storage import Session

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class OrganizationService(object):
    """Tenant management on behalf of an authenticated caller.

    Every operation takes the caller's identity explicitly; access is decided
    solely by the caller's membership in the target organization. Each public
    method runs in its own transaction on the service's session.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def close(self) -> None:
        """Release the service's session."""
        self._session.close()

    def __enter__(self) -> OrganizationService:
        return self

    def __exit__(self, *exc_info: t.Any) -> None:
        self.close()

    def create(self, identity: AuthenticatedIdentity, name: str) -> OrganizationWithRole:
        """Create an organization with the caller as its first admin.

        The organization row and the admin membership are written in one
        transaction; if either fails neither is kept.

        Raises:
            InvalidName: If the name is empty or only whitespace
            NameExists: If the name is taken, whether seen by the pre-check or
                by the unique constraint on insert
        """
        if not name.strip():
            raise InvalidName()

        def create() -> OrganizationWithRole:
            if organization_storage.get(name=name, session=self._session) is not None:
                raise NameExists()
            try:
                organization = organization_storage.create(name=name, session=self._session)
            except sqla.exc.IntegrityError as e:
                logger.info("organization creation lost a race on name uniqueness", extra={"name": name})
                raise NameExists() from e
            membership_storage.create(
                user_id=identity.user_id,
                organization_id=organization.organization_id,
                role=MembershipRole.Admin,
                session=self._session,
            )
            return OrganizationWithRole(**organization.model_dump(), role=MembershipRole.Admin)

        organization = self._transact(create, "Failed to create organization")
        logger.info(
            "organization created",
            extra={"organization_id": organization.organization_id, "user_id": identity.user_id},
        )
        return organization

    def list(self, identity: AuthenticatedIdentity) -> tuple[OrganizationWithRole, ...]:
        """Organizations the caller belongs to, with the caller's role, ordered by ID."""
        return self._transact(
            lambda: organization_storage.find(user_id=identity.user_id, with_role=True, session=self._session),
            "Failed to fetch organizations",
        )

    def switch(self, identity: AuthenticatedIdentity, organization_id: OrganizationID) -> OrganizationWithRole:
        """Confirm the caller may act within an organization and return it with their role.

        Nothing is persisted; the client keeps track of its current organization.

        Raises:
            AccessDenied: If the caller is not a member, including when the
                organization does not exist
        """

        def switch() -> OrganizationWithRole:
            membership = self._require_membership(identity, organization_id)
            organization = organization_storage.get(organization_id, session=self._session)
            if organization is None:
                raise AccessDenied()
            return OrganizationWithRole(**organization.model_dump(), role=membership.role)

        return self._transact(switch, "Failed to switch organization")

    def check_access(self, identity: AuthenticatedIdentity, organization_id: OrganizationID) -> MembershipRole:
        """The caller's role in an organization.

        Raises:
            AccessDenied: If the caller is not a member
        """
        return self._transact(
            lambda: self._require_membership(identity, organization_id).role,
            "Failed to check organization access",
        )

    def list_members(
        self, identity: AuthenticatedIdentity, organization_id: OrganizationID
    ) -> tuple[MemberWithEmail, ...]:
        """All memberships of an organization with member emails, ordered by membership ID.

        Raises:
            AccessDenied: If the caller is not a member
            AdminRequired: If the caller is a member but not an admin
        """

        def list_members() -> tuple[MemberWithEmail, ...]:
            self._require_admin(identity, organization_id)
            return membership_storage.find_members(organization_id, session=self._session)

        return self._transact(list_members, "Failed to fetch organization members")

    def update_member_role(
        self,
        identity: AuthenticatedIdentity,
        organization_id: OrganizationID,
        membership_id: MembershipID,
        role: MembershipRole | str,
    ) -> OrganizationMembership:
        """Change a member's role.

        Demoting the organization's only admin is refused, the same as
        removing them.

        Raises:
            AccessDenied, AdminRequired: If the caller may not manage members
            InvalidRole: If ``role`` is not ``admin`` or ``member``
            NotFound: If the membership does not belong to this organization
            LastAdminError: If the change would leave the organization without an admin
        """

        def update() -> OrganizationMembership:
            self._require_admin(identity, organization_id)
            new_role = self._parse_role(role)
            target = membership_storage.get(membership_id, organization_id=organization_id, session=self._session)
            if target is None:
                raise NotFound()
            if target.role is MembershipRole.Admin and new_role is not MembershipRole.Admin:
                self._require_other_admin(organization_id)
            return membership_storage.update(membership_id, role=new_role, session=self._session)

        membership = self._transact(update, "Failed to update member role")
        logger.info(
            "membership role updated",
            extra={
                "organization_id": organization_id,
                "membership_id": membership_id,
                "role": membership.role,
                "user_id": identity.user_id,
            },
        )
        return membership

    def remove_member(
        self, identity: AuthenticatedIdentity, organization_id: OrganizationID, membership_id: MembershipID
    ) -> None:
        """Remove a membership from an organization.

        Raises:
            AccessDenied, AdminRequired: If the caller may not manage members
            NotFound: If the membership does not belong to this organization
            LastAdminError: If the membership is the organization's only admin
        """

        def remove() -> None:
            self._require_admin(identity, organization_id)
            target = membership_storage.get(membership_id, organization_id=organization_id, session=self._session)
            if target is None:
                raise NotFound()
            if target.role is MembershipRole.Admin:
                self._require_other_admin(organization_id)
            membership_storage.delete(membership_id, session=self._session)

        self._transact(remove, "Failed to remove member")
        logger.info(
            "membership removed",
            extra={"organization_id": organization_id, "membership_id": membership_id, "user_id": identity.user_id},
        )

    def _transact(self, fn: t.Callable[[], T], failure: str) -> T:
        """Run ``fn`` in a transaction, reporting storage failures as InternalError.

        Domain errors raised by ``fn`` roll the transaction back and propagate
        unchanged.
        """
        try:
            with self._session.begin():
                return fn()
        except TMemberError:
            raise
        except sqla.exc.SQLAlchemyError as e:
            logger.exception(failure)
            raise InternalError(failure) from e

    def _require_membership(
        self, identity: AuthenticatedIdentity, organization_id: OrganizationID
    ) -> OrganizationMembership:
        membership = membership_storage.get(
            user_id=identity.user_id, organization_id=organization_id, session=self._session
        )
        if membership is None:
            logger.debug(
                "organization access denied",
                extra={"organization_id": organization_id, "user_id": identity.user_id},
            )
            raise AccessDenied()
        return membership

    def _require_admin(self, identity: AuthenticatedIdentity, organization_id: OrganizationID) -> None:
        if self._require_membership(identity, organization_id).role is not MembershipRole.Admin:
            raise AdminRequired()

    def _require_other_admin(self, organization_id: OrganizationID) -> None:
        # lock the admin rows so two concurrent removals cannot both pass
        admins = membership_storage.find(
            organization_id=organization_id, role=MembershipRole.Admin, for_update=True, session=self._session
        )
        if len(admins) <= 1:
            raise LastAdminError()

    @staticmethod
    def _parse_role(role: MembershipRole | str) -> MembershipRole:
        if isinstance(role, MembershipRole):
            return role
        try:
            return MembershipRole(role)
        except ValueError:
            raise InvalidRole() from None
