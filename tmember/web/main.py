"""Main entry point for the tmember web application."""

import http
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import tmember
from tmember.core import BootConfiguration, di, TMemberContainer
from tmember.core.config.web import WebSettings
from tmember.errors import AuthenticationError, AuthorizationError, ConflictError, IntegrityViolation, \
    InvalidRequest, NotFound, TMemberError, ValidationError
from tmember.lib.json import FastAPIJSONResponse
from tmember.model import DeploymentEnvironment

from .route import router
from .view.error import ErrorResponse

logger = logging.getLogger(__name__)

# checked in order; anything unmatched is a 500
ErrorStatus: tuple[tuple[type[TMemberError], int], ...] = (
    (ValidationError, http.HTTPStatus.BAD_REQUEST),
    (ConflictError, http.HTTPStatus.CONFLICT),
    (AuthenticationError, http.HTTPStatus.UNAUTHORIZED),
    (AuthorizationError, http.HTTPStatus.FORBIDDEN),
    (NotFound, http.HTTPStatus.NOT_FOUND),
    (IntegrityViolation, http.HTTPStatus.BAD_REQUEST),
)


def status_for(exc: TMemberError) -> http.HTTPStatus:
    for cls, status_code in ErrorStatus:
        if isinstance(exc, cls):
            return http.HTTPStatus(status_code)
    return http.HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(
    status_code: http.HTTPStatus, message: str, code: str, headers: dict[str, str] | None = None
) -> FastAPIJSONResponse:
    body = ErrorResponse(error=status_code.phrase, message=message, code=code)
    return FastAPIJSONResponse(body, status_code=status_code, headers=headers)


def handle_tmember_error(request: Request, exc: TMemberError) -> FastAPIJSONResponse:
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code is http.HTTPStatus.UNAUTHORIZED else None
    return error_response(status_code, exc.message, exc.code, headers=headers)


def handle_validation_error(request: Request, exc: RequestValidationError) -> FastAPIJSONResponse:
    logger.debug("rejected malformed request", extra={"path": request.url.path, "errors": exc.errors()})
    e = InvalidRequest()
    return error_response(http.HTTPStatus.BAD_REQUEST, e.message, e.code)


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> FastAPIJSONResponse:
    status_code = http.HTTPStatus(exc.status_code)
    return error_response(
        status_code,
        str(exc.detail),
        status_code.name,
        headers=getattr(exc, "headers", None),
    )


def handle_unexpected_error(request: Request, exc: Exception) -> FastAPIJSONResponse:
    logger.exception("unhandled error", extra={"path": request.url.path})
    return error_response(http.HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


@di.inject
def _create_app(
    config: WebSettings = di.Provide["config.web", di.as_(WebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="tmember",
        description="Multi-tenant accounts, organizations and role-based membership",
        version=tmember.__version__,
        default_response_class=FastAPIJSONResponse,
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(TMemberError, handle_tmember_error)  # pyright: ignore[reportArgumentType]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # pyright: ignore[reportArgumentType]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # pyright: ignore[reportArgumentType]
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv("__TMember_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = TMemberContainer()
        TMemberContainer.boot(ct, **dict(boot_cf))
        return _create_app(config=WebSettings(ct.config.web()), env=boot_cf.env)
    return _create_app()
