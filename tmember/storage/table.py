import datetime
import typing as t

from sqlalchemy import ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, Integer, String, Text

from tmember.model import MembershipID, MembershipRole, OrganizationID, UserID

from .type import JSONDocument, ValueEnum

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: Integer(),
        OrganizationID: Integer(),
        MembershipID: Integer(),
        datetime.datetime: DateTime(timezone=True),
        dict[str, t.Any]: JSONDocument,
    }


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True, autoincrement=True, init=False)
    email: Mapped[str] = mapped_column(Text, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class organizations(base):
    __tablename__ = "organizations"

    organization_id: Mapped[OrganizationID] = mapped_column(primary_key=True, autoincrement=True, init=False)
    name: Mapped[str] = mapped_column(Text, unique=True)
    billing_details: Mapped[dict[str, t.Any] | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class organization_memberships(base):
    __tablename__ = "organization_memberships"
    __table_args__ = (UniqueConstraint("user_id", "organization_id"),)

    membership_id: Mapped[MembershipID] = mapped_column(primary_key=True, autoincrement=True, init=False)
    user_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), index=True)
    organization_id: Mapped[OrganizationID] = mapped_column(
        ForeignKey("organizations.organization_id", ondelete="CASCADE"), index=True
    )
    role: Mapped[MembershipRole] = mapped_column(ValueEnum(MembershipRole, name="membership_role"))
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
