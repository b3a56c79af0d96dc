"""Initial schema: users, organizations and memberships

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import DateTime, Enum, Integer, JSON, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None

membership_role = Enum("admin", "member", name="membership_role")


def upgrade() -> None:
    op.create_table(
        "users",
        Column("user_id", Integer, primary_key=True, autoincrement=True),
        Column("email", Text, nullable=False),
        Column("password_hash", String(255), nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "organizations",
        Column("organization_id", Integer, primary_key=True, autoincrement=True),
        Column("name", Text, nullable=False),
        Column("billing_details", JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("name", name="uq_organizations_name"),
    )

    op.create_table(
        "organization_memberships",
        Column("membership_id", Integer, primary_key=True, autoincrement=True),
        Column(
            "user_id",
            Integer,
            ForeignKey("users.user_id", name="fk_organization_memberships_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        Column(
            "organization_id",
            Integer,
            ForeignKey(
                "organizations.organization_id",
                name="fk_organization_memberships_organization_id_organizations",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        Column("role", membership_role, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("user_id", "organization_id", name="uq_organization_memberships_user_id"),
    )
    op.create_index("ix_organization_memberships_user_id", "organization_memberships", ["user_id"])
    op.create_index("ix_organization_memberships_organization_id", "organization_memberships", ["organization_id"])


def downgrade() -> None:
    op.drop_index("ix_organization_memberships_organization_id", table_name="organization_memberships")
    op.drop_index("ix_organization_memberships_user_id", table_name="organization_memberships")
    op.drop_table("organization_memberships")
    op.drop_table("organizations")
    op.drop_table("users")
    membership_role.drop(op.get_bind(), checkfirst=True)
