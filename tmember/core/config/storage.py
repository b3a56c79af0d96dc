from __future__ import annotations

import typing as t

import pydantic as p

from .base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Relational store location.

    PostgreSQL is the deployed store; SQLite serves tests and throwaway local
    databases, where ``database`` is a file path or ``:memory:``.
    """

    driver: t.Literal["postgresql+psycopg", "sqlite+pysqlite"] = "postgresql+psycopg"
    host: p.IPvAnyAddress | str | None = None
    port: int | None = 5432
    database: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")


class PersistentSettings(BaseSettings):
    sql: DatabaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings
