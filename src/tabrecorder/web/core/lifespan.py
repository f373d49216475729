"""Application lifespan management for startup and shutdown events."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tabrecorder.system.structlog_configurator import configure_structlog
from tabrecorder.web.core.container import Container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Context manager for application startup and shutdown events.

    Configures logging, prepares catalog storage and runs the retention
    scheduler for the lifetime of the application.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control back to the application for normal operation.
    """
    container: Container = app.container  # type: ignore[attr-defined]

    config = container.config()
    configure_structlog(config)

    container.catalog_store().initialize()

    logger.info("Starting application services...")
    scheduler = container.retention_scheduler()
    try:
        await scheduler.start()
        logger.info("All services started successfully")

        yield

    finally:
        logger.info("Shutting down application services...")
        try:
            await scheduler.stop()
            logger.info("All services stopped successfully")
        except Exception as e:
            logger.error("Error during service shutdown: %s", e)
            raise
