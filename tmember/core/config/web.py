from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class ServeSettings(BaseSettings):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class AuthSettings(BaseSettings):
    """Session token settings."""

    jwt_algorithm: t.Literal["HS256"] = "HS256"
    token_lifetime_hours: t.Annotated[int, ant.Gt(0)] = 24
    issuer: str = "tmember"


class WebSettings(BaseSettings):
    backend: ServeSettings
    frontend: ServeSettings | None = None
    auth: AuthSettings = AuthSettings()
