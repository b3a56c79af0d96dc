"""View model for error responses."""

from __future__ import annotations

from tmember.model import BaseModel


class ErrorResponse(BaseModel):
    """Body of every non-2xx response.

    ``error`` is the HTTP reason phrase, ``code`` the machine-readable error
    code and ``message`` a human-readable description.
    """

    error: str
    message: str
    code: str
