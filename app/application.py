import logging

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.config import get_config
from app.container import get_scheduler, setup_container
from app.routers.booking_router import router as booking_router
from app.routers.bulk_publish_router import router as bulk_publish_router
from app.routers.default import router as default_router
from app.routers.health import router as health_router
from app.routers.resources_router import router as resources_router
from app.routers.scheduler_router import router as scheduler_router
from app.routers.search_router import router as search_router
from app.routers.sync_router import router as sync_router
from app.stats import StatsdMiddleware, setup_stats


def get_uvicorn_params() -> dict[str, Any]:
    config = get_config()
    kwargs = {
        "host": config.uvicorn.host,
        "port": config.uvicorn.port,
        "reload": config.uvicorn.reload,
        "reload_delay": config.uvicorn.reload_delay,
        "reload_dirs": config.uvicorn.reload_dirs,
        "factory": True,
    }
    if (
        config.uvicorn.use_ssl
        and config.uvicorn.ssl_base_dir is not None
        and config.uvicorn.ssl_cert_file is not None
        and config.uvicorn.ssl_key_file is not None
    ):
        kwargs["ssl_keyfile"] = config.uvicorn.ssl_base_dir + "/" + config.uvicorn.ssl_key_file
        kwargs["ssl_certfile"] = config.uvicorn.ssl_base_dir + "/" + config.uvicorn.ssl_cert_file

    return kwargs


def run() -> None:
    uvicorn.run("app.application:create_fastapi_app", **get_uvicorn_params())


def create_fastapi_app() -> FastAPI:
    setup_stats(get_config().stats)
    application_init()
    return setup_fastapi()


def application_init() -> None:
    config = get_config()
    setup_logging()
    setup_container()

    # The scheduler runs a first sync right away, then one every interval
    if config.scheduler.automatic_background_update:
        get_scheduler().start()


def setup_logging() -> None:
    loglevel = logging.getLevelName(get_config().app.loglevel.upper())

    if isinstance(loglevel, str):
        raise ValueError(f"Invalid loglevel {loglevel.upper()}")
    logging.basicConfig(
        level=loglevel,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )


def setup_fastapi() -> FastAPI:
    config = get_config()

    fastapi = (
        FastAPI(docs_url=config.uvicorn.docs_url, redoc_url=config.uvicorn.redoc_url)
        if config.uvicorn.swagger_enabled
        else FastAPI(docs_url=None, redoc_url=None)
    )

    routers = [
        default_router,
        health_router,
        search_router,
        resources_router,
        booking_router,
        sync_router,
        scheduler_router,
        bulk_publish_router,
    ]
    for router in routers:
        fastapi.include_router(router)

    fastapi.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )
    if config.stats.enabled:
        fastapi.add_middleware(StatsdMiddleware)

    return fastapi
