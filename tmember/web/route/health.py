"""Health check route."""

import logging

import sqlalchemy as sqla
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..dependency import get_session
from ..view.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", operation_id="health")
def health(
    response: Response,
    session: Session = Depends(get_session),
) -> HealthResponse:
    """Report whether the service can reach its database; 503 when it cannot."""
    try:
        with session.begin():
            session.execute(sqla.select(1))
    except sqla.exc.SQLAlchemyError:
        logger.exception("database health check failed")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="error", database="error")
    return HealthResponse(status="ok", database="ok")
