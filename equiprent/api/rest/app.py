"""
FastAPI Application Factory.

Creates and configures the main FastAPI application with:
- REST API routes
- CORS middleware
- Exception handlers mapping domain errors to HTTP status codes
"""

from contextlib import asynccontextmanager
from typing import Optional
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from equiprent import __version__
from equiprent.api.rest.models import ErrorResponse
from equiprent.api.rest.routes import (
    machines_router,
    auxiliary_equipment_router,
    maintenance_router,
    health_router,
)
from equiprent.api.rest.dependencies import get_app_state, set_app_state, AppState
from equiprent.domain.models.exceptions import (
    AttachmentError,
    ConcurrentModificationError,
    ConsistencyWriteError,
    EquipRentError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Global app instance
_app: Optional[FastAPI] = None

# Most specific first
ERROR_STATUS = (
    (NotFoundError, 404, "NOT_FOUND"),
    (ValidationError, 422, "VALIDATION_ERROR"),
    (ConcurrentModificationError, 409, "CONCURRENT_MODIFICATION"),
    (ConsistencyWriteError, 409, "CONSISTENCY_WRITE_FAILED"),
    (AttachmentError, 502, "ATTACHMENT_ERROR"),
)


def error_status(exc: EquipRentError):
    """HTTP status and error code for a domain exception."""
    for exc_type, status_code, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, code
    return 500, "INTERNAL_ERROR"


def create_app(
    title: str = "equiprent API",
    version: str = __version__,
    debug: bool = False,
    enable_cors: bool = True,
    cors_origins: Optional[list] = None,
    app_state: Optional[AppState] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        title: API title for documentation
        version: API version
        debug: Enable debug mode
        enable_cors: Enable CORS middleware
        cors_origins: Allowed CORS origins (default: ["*"])
        app_state: Pre-configured application state

    Returns:
        Configured FastAPI application
    """
    if app_state is not None:
        set_app_state(app_state)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        state = get_app_state()
        if not state.is_initialized:
            state.initialize()
        yield

    app = FastAPI(
        title=title,
        description="""
## equiprent API

Machines, auxiliary equipment and their attachments for the equipment
rental backend.

- **Machines**: CRUD with parts catalog, error codes and image attachments
- **Auxiliary Equipment**: CRUD with images; linked from machines
- **Maintenance**: Link integrity checks and orphan attachment sweeps

Attachment files are sent base64 encoded inside JSON bodies.
        """,
        version=version,
        debug=debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # Middleware
    # ═══════════════════════════════════════════════════════════════════════════

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Exception Handlers
    # ═══════════════════════════════════════════════════════════════════════════

    @app.exception_handler(EquipRentError)
    async def domain_error_handler(request: Request, exc: EquipRentError) -> JSONResponse:
        """Map domain errors to status codes with the standard error format."""
        status_code, code = error_status(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=code,
                message=exc.message,
                details=exc.to_dict()["context"] or None,
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Handle HTTP exceptions with standard error format."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                message="An unexpected error occurred" if not debug else str(exc),
                details={"type": type(exc).__name__} if debug else None,
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Routes
    # ═══════════════════════════════════════════════════════════════════════════

    app.include_router(health_router)
    app.include_router(machines_router)
    app.include_router(auxiliary_equipment_router)
    app.include_router(maintenance_router)

    @app.get("/")
    def root():
        """Root endpoint with API info."""
        return {
            "name": title,
            "version": version,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    # Store in global
    global _app
    _app = app

    return app


def get_app() -> FastAPI:
    """Get the global FastAPI application instance."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


# ═══════════════════════════════════════════════════════════════════════════════
# CLI Entry Point
# ═══════════════════════════════════════════════════════════════════════════════

def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
    workers: int = 1,
):
    """
    Run the API server.

    Args:
        host: Host to bind to
        port: Port to listen on
        reload: Enable auto-reload for development
        workers: Number of worker processes
    """
    import uvicorn
    from equiprent.config import configure_logging, get_config

    configure_logging(get_config())
    uvicorn.run(
        "equiprent.api.rest.app:get_app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        factory=True,
    )


if __name__ == "__main__":
    run_server(reload=True)
