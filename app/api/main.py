"""
FastAPI application for the execution context service.

Usage:
    uvicorn app.api.main:create_app --factory --host localhost --port 3000
    python -m app.api.main
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.error_handlers import api_exception_handler, global_exception_handler
from app.api.exceptions import APIException
from app.api.middleware import ExecutionContextMiddleware
from app.api.routers import health, root
from app.config import AppConfig, ConfigurationMissingError, load_config
from app.core.logging_utils import get_logger, setup_json_logging
from app.di.container import Container

logger = get_logger(__name__)


def create_app(config: AppConfig | None = None, *, container: Container | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration; loaded from the environment when omitted.
        container: Pre-built container, mainly for tests; built from ``config`` otherwise.
    """
    if container is None:
        container = Container(config or load_config())
    config = container.config

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        scheduler = container.scheduler()
        await scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()

    app = FastAPI(
        title=config.app.name,
        version=config.app.version,
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.config = config

    app.middleware("http")(ExecutionContextMiddleware(container.context_service()))

    app.include_router(root.router, tags=["Context"])
    app.include_router(health.router, tags=["Health"])

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


def main() -> None:
    """Load configuration, configure logging and serve the application."""
    import uvicorn

    try:
        config = load_config()
    except ConfigurationMissingError as exc:
        setup_json_logging("ERROR")
        logger.critical("configuration_missing", extra={"missing": list(exc.missing)})
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(1) from exc

    container = Container(config)
    setup_json_logging(
        config.logging.level,
        json_format=config.logging.json_format,
        execution_id_provider=container.context_service().get_execution_id,
    )

    app = create_app(container=container)
    logger.info(
        f"Application started on: http://{config.server.host}:{config.server.port}",
        extra={"environment": config.app.environment, "version": config.app.version},
    )

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        log_level=config.logging.level,
    )


if __name__ == "__main__":
    main()
