from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.engine import Engine
from typing import List, Optional
import argparse
import logging
import sys

import uvicorn

from config.logging_config import configure_logging
from config.settings import ConfigError, Settings, load_settings, usage
from database.db_config import create_session_factory, get_engine, init_db
from middleware.request_logging import RequestLoggingMiddleware
from routers.health_router import router as health_router
from routers.race_router import router as race_router
from routers.responses import error_response
from service.readiness import ReadinessFlag

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure the races table and its unique index, open the session factory
    settings: Settings = app.state.settings
    if app.state.engine is None:
        app.state.engine = get_engine(settings.sqlalchemy_url, settings.db_echo)
    engine = app.state.engine
    try:
        init_db(engine)
    except Exception:
        logger.critical("Could not prepare the race store at %s", settings.masked_url, exc_info=True)
        raise
    app.state.session_factory = create_session_factory(engine)
    yield
    # Shutdown: runs after in-flight requests have drained
    engine.dispose()
    logger.info("Closed race store connections")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected body for %s %s: %s", request.method, request.url.path, exc.errors())
    return error_response(400, "Incorrect body")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Process settings; read from the environment when omitted
        engine: Engine to store races with; built from settings at startup when omitted
    """
    app = FastAPI(title="Captured Checkpoints API", lifespan=lifespan)
    app.state.settings = settings or load_settings()
    app.state.engine = engine
    app.state.readiness = ReadinessFlag()

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(race_router)
    app.include_router(health_router)
    return app


class ReadinessServer(uvicorn.Server):
    """uvicorn server that marks the application ready once its sockets are bound."""

    def __init__(self, config: uvicorn.Config, readiness: ReadinessFlag):
        super().__init__(config)
        self.readiness = readiness

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started and not self.should_exit:
            self.readiness.mark_ready()


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="captured-checkpoints",
        description="Serve captured checkpoints per race over HTTP.",
        epilog=usage(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )


def run(argv: Optional[List[str]] = None) -> None:
    build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging("info")
        logger.critical("Error parsing config: %s", exc)
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info("Connecting to race store: %s", settings.masked_url)

    app = create_app(settings=settings)
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
        access_log=False,
        timeout_keep_alive=60,
        timeout_graceful_shutdown=settings.graceful,
    )
    server = ReadinessServer(config, app.state.readiness)
    logger.info("Listening on %s", settings.port)
    server.run()

    if not server.started:
        # Startup failed: unreachable store, index creation failure or port in use
        sys.exit(1)
    logger.info("shutting down")


if __name__ == "__main__":
    run()
