import os
import typing as t

import uvicorn

import tmember.lib.cli as click
from tmember.core import BootConfiguration, di
from tmember.core.config import LoggingSettings, WebSettings

AppSpec = "tmember.web.main:create_app"


class ServeConfig(t.TypedDict):
    host: str
    port: int


def _get_serve_config(web_cf: WebSettings) -> ServeConfig:
    return {"host": str(web_cf.backend.host), "port": web_cf.backend.port}


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the web backend."""
    os.environ["__TMember_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(
        AppSpec, factory=True, workers=workers, log_config=logging_cf.model_dump(), **_get_serve_config(web_cf)
    )


@web.command(name="develop")
@di.inject
def develop(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the web backend with live-reload."""
    os.environ["__TMember_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(AppSpec, factory=True, reload=True, log_config=logging_cf.model_dump(), **_get_serve_config(web_cf))
