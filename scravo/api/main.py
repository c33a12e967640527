"""
FastAPI Application.

Main entry point for the API server. `create_app` assembles the request
pipeline from one immutable Settings value.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load .env file at startup
load_dotenv()

import uvicorn  # noqa: E402
from fastapi import APIRouter, FastAPI  # noqa: E402
from loguru import logger  # noqa: E402

from config.settings import Settings, get_settings  # noqa: E402
from scravo import __version__  # noqa: E402
from scravo.api.dependencies import DatabaseClient  # noqa: E402
from scravo.api.errors import register_error_handlers  # noqa: E402
from scravo.api.routes import (  # noqa: E402
    info_router,
    load_handler_groups,
    mount_fallback,
    mount_handler_groups,
    uploads_router,
)
from scravo.connections.postgres import PostgresConnection  # noqa: E402
from scravo.middleware import setup_middleware  # noqa: E402

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]: <14}</cyan> | <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(settings: Settings) -> None:
    """Send all logs through loguru at the level NODE_ENV asks for."""
    logger.configure(extra={"module": "Server"})
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=settings.effective_log_level)

    # Intercept uvicorn logs
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = [InterceptHandler()]
        uv_logger.propagate = False


log = logger.bind(module="App")


def log_startup_banner(settings: Settings) -> None:
    """Log where the server can be reached."""
    log.info("━" * 40)
    log.info(f"Server running in {settings.node_env} mode")
    log.info(f"Server URL: {settings.public_url}")
    log.info(f"API Docs: {settings.public_url}/docs")
    if settings.frontend_url:
        log.info(f"Frontend URL: {settings.frontend_url}")
    log.info("━" * 40)


def build_lifespan(settings: Settings, database: DatabaseClient):
    """Create the lifespan handler that owns the database connection."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Connect the database before serving, close it on shutdown."""
        try:
            await database.connect()
        except Exception as e:
            log.critical(f"Database connection failed, refusing to start: {e}")
            raise

        log_startup_banner(settings)

        yield

        await database.close()
        log.info("Server stopped")

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    handler_groups: Optional[Mapping[str, APIRouter]] = None,
    database: Optional[DatabaseClient] = None,
) -> FastAPI:
    """
    Assemble the request pipeline.

    Args:
        settings: Application settings, read from the environment if omitted
        handler_groups: Routers keyed by group name (auth, listings,
            transactions); imported from settings if omitted
        database: Database collaborator; PostgreSQL if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if handler_groups is None:
        handler_groups = load_handler_groups(settings)
    if database is None:
        database = PostgresConnection(settings.postgres)

    app = FastAPI(
        title="Scravo API",
        description="Marketplace API for listings and transactions",
        version=__version__,
        lifespan=build_lifespan(settings, database),
    )
    app.state.settings = settings
    app.state.database = database

    # Setup middleware
    setup_middleware(app, settings)
    register_error_handlers(app, debug=settings.is_development)

    # Register routes, in match priority
    app.state.mounted_prefixes = mount_handler_groups(app, handler_groups)
    app.include_router(info_router)
    app.include_router(uploads_router)
    mount_fallback(app)

    return app


def run() -> None:
    """Run the API server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "scravo.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
