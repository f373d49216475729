"""Application factory for creating FastAPI application with dependency injection."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tabrecorder.recordings.exceptions import (
    InputError,
    NotFoundError,
    RecordingError,
    StorageError,
)
from tabrecorder.system.structlog_configurator import get_package_version
from tabrecorder.web.core.container import Container
from tabrecorder.web.core.lifespan import lifespan
from tabrecorder.web.middleware.request_logging import StructuredRequestLoggingMiddleware
from tabrecorder.web.routers import health_api_routes, recordings_api_routes

logger = logging.getLogger(__name__)

PROCESSING_FAILED_MESSAGE = "Audio processing failed. Please try again."
STORAGE_FAILED_MESSAGE = "Recording storage is unavailable. Please try again."


def register_exception_handlers(app: FastAPI) -> None:
    """Map recording errors onto HTTP responses.

    Caller mistakes and unknown ids carry their own message; everything else
    is logged with detail and reported to the client generically.
    """

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        # A failed render is reported as a processing failure whatever the cause
        message = (
            PROCESSING_FAILED_MESSAGE
            if request.url.path.endswith("/process")
            else STORAGE_FAILED_MESSAGE
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": message}
        )

    @app.exception_handler(RecordingError)
    async def recording_error_handler(request: Request, exc: RecordingError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": PROCESSING_FAILED_MESSAGE},
        )


def create_app() -> FastAPI:
    """Create FastAPI application with dependency injection.

    Returns:
        FastAPI: The configured application instance.
    """
    container = Container()

    app = FastAPI(
        lifespan=lifespan,
        title="tabrecorder API",
        description="Render, list and retrieve tab and microphone recordings",
        version=get_package_version(),
    )
    app.container = container  # type: ignore[attr-defined]

    # The recorder UI may be served from a different origin than the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # nosemgrep
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Disposition"],
    )
    app.add_middleware(StructuredRequestLoggingMiddleware)

    register_exception_handlers(app)

    container.wire(
        modules=[
            "tabrecorder.web.routers.health_api_routes",
            "tabrecorder.web.routers.recordings_api_routes",
        ]
    )

    app.include_router(recordings_api_routes.router, prefix="/api", tags=["Recordings API"])
    app.include_router(health_api_routes.router, prefix="/api", tags=["Health Check API"])

    return app
