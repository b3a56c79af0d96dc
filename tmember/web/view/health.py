"""View models for the health endpoint."""

from __future__ import annotations

import typing as t

from tmember.model import BaseModel


class HealthResponse(BaseModel):
    status: t.Literal["ok", "error"]
    database: t.Literal["ok", "error"]
