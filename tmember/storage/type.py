import enum
import typing as t

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import Enum, JSON

TEnum = t.TypeVar("TEnum", bound=enum.Enum)


def values_callable(en: type[enum.Enum]) -> list[str]:
    return [e.value for e in en]


def ValueEnum(en: type[TEnum], name: str) -> Enum:
    """Store an enum by member value rather than member name.

    Native on PostgreSQL; a length-limited VARCHAR elsewhere, so the closed
    set is enforced by the Python enum on the way in and out.
    """
    return Enum(en, name=name, values_callable=values_callable, validate_strings=True)


JSONDocument = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")
