from __future__ import annotations

__all__ = [
    "Closing",
    "Container",
    "NotReady",
    "Provider",
    "Provide",
    "as_",
    "as_int",
    "as_float",
    "inject",
    "providers",
    "containers",
    "required",
]

import typing as t

import dependency_injector.containers as containers
import dependency_injector.providers as providers
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import as_float, as_int, Closing, inject, Provide, required, TypeModifier

TAs = t.TypeVar("TAs")


def as_(type_: t.Type[TAs]) -> TypeModifier:
    """Return custom type modifier."""
    # replace wiring.as_ because that one has typing issues
    return TypeModifier(type_)


class NotReady(object):
    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotReady>"
