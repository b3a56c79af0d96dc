"""CLI commands for managing users, organizations and memberships."""

from __future__ import annotations

import secrets

import sqlalchemy as sqla
from sqlalchemy.orm import Session

import tmember.lib.cli as click
from tmember.auth import IdentityService
from tmember.core import di
from tmember.errors import TMemberError
from tmember.model import AuthenticatedIdentity, MembershipRole, User
from tmember.organization import OrganizationService
from tmember.storage import membership as membership_storage
from tmember.storage import organization as organization_storage
from tmember.storage import user as user_storage


@click.group("user")
def user():
    """Manage users and organizations."""
    ...


@user.command("create")
@click.argument("email")
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@di.inject
def user_create(
    email: str,
    password: str | None,
    identity_service: IdentityService = di.Provide["auth.identity"],
) -> None:
    """Register a new user account.

    EMAIL is the user's email address (used for login). The password must meet
    the same policy as self-registration.
    """
    generated_password = None
    if not password:
        # guarantee every character class the policy asks for
        generated_password = f"{secrets.token_urlsafe(12)}Aa1"
        password = generated_password

    try:
        with identity_service:
            new_user, _ = identity_service.register(email, password)
    except TMemberError as e:
        raise click.ClickException(e.message) from e

    click.echo(f"Created user: {new_user.email}")
    click.echo(f"  ID: {new_user.user_id}")
    if generated_password:
        click.echo(f"  Generated password: {generated_password}")


@user.command("create-org")
@click.argument("name")
@click.option("--admin", "-a", "admin_email", required=True, help="Email of the user who becomes the first admin")
@di.inject
def user_create_org(
    name: str,
    admin_email: str,
    session: Session = di.Provide["storage.persistent.session"],
    organization_service: OrganizationService = di.Provide["organization.service"],
) -> None:
    """Create a new organization.

    NAME is the organization's unique name.
    """
    try:
        with session, organization_service:
            admin = _require_user(admin_email, session)
            organization = organization_service.create(
                AuthenticatedIdentity(user_id=admin.user_id, email=admin.email), name
            )
    except TMemberError as e:
        raise click.ClickException(e.message) from e

    click.echo(f"Created organization: {organization.name}")
    click.echo(f"  ID: {organization.organization_id}")
    click.echo(f"  Admin: {admin.email}")


@user.command("enroll")
@click.argument("email")
@click.argument("organization_name")
@click.option(
    "--role",
    "-r",
    type=click.EnumType(MembershipRole),
    default=MembershipRole.Member,
    help="Role in the organization",
)
@di.inject
def user_enroll(
    email: str,
    organization_name: str,
    role: MembershipRole,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Add an existing user to an organization.

    EMAIL identifies the user and ORGANIZATION_NAME the organization.
    """
    try:
        with session:
            found_user = _require_user(email, session)
            with session.begin():
                organization = organization_storage.get(name=organization_name, session=session)
                if organization is None:
                    raise click.ClickException(f"Organization '{organization_name}' not found.")
                membership = membership_storage.create(
                    user_id=found_user.user_id,
                    organization_id=organization.organization_id,
                    role=role,
                    session=session,
                )
    except sqla.exc.IntegrityError as e:
        raise click.ClickException(f"'{email}' is already a member of '{organization_name}'.") from e

    click.echo(f"Enrolled {found_user.email} in {organization.name} ({membership.role.value})")
    click.echo(f"  Membership ID: {membership.membership_id}")


@user.command("show")
@click.argument("email")
@di.inject
def user_show(
    email: str,
    session: Session = di.Provide["storage.persistent.session"],
    identity_service: IdentityService = di.Provide["auth.identity"],
) -> None:
    """Show a user and the organizations they belong to."""
    with session, identity_service:
        found_user = _require_user(email, session)
        _, organizations = identity_service.get_current_user(
            AuthenticatedIdentity(user_id=found_user.user_id, email=found_user.email)
        )

    click.echo(f"User: {found_user.email}")
    click.echo(f"  ID: {found_user.user_id}")
    click.echo(f"  Created: {found_user.create_time.isoformat()}")
    if organizations:
        click.echo("  Organizations:")
        for organization in organizations:
            click.echo(f"    - {organization.name} [{organization.organization_id}] ({organization.role.value})")
    else:
        click.echo("  Organizations: none")


@user.command("list")
@di.inject
def user_list(
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """List all users."""
    with session, session.begin():
        all_users = user_storage.find(session=session)

    if not all_users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<8} {'Email':<40} Created")
    click.echo("-" * 72)
    for u in all_users:
        click.echo(f"{u.user_id:<8} {u.email:<40} {u.create_time.isoformat()}")


def _require_user(email: str, session: Session) -> User:
    with session.begin():
        found_user = user_storage.get(email=email, session=session)
    if found_user is None:
        raise click.ClickException(f"User '{email}' not found.")
    return found_user
