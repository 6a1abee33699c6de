"""
FastAPI Application

Main entry point for the triathlon race scheduler web API.
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import races, schedule
from src.config import Settings, configure_logging, get_settings
from src.schemas import InvalidCategory

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _error_body(status_code: int, error, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Give every error response the same {"error", "message"} shape."""

    # Registered on the Starlette base class so routing 404/405 share the shape
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_body(exc.status_code, exc.detail, str(exc.detail))

    @app.exception_handler(InvalidCategory)
    async def invalid_category_handler(request: Request, exc: InvalidCategory):
        # A stored race with an unknown distance is a data defect, not a client error
        logger.error("Invalid race category on %s %s: %s", request.method, request.url.path, exc)
        return _error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Invalid race category", str(exc)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc)
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Application settings (defaults to the cached environment settings)

    Returns:
        Configured FastAPI app with the race and schedule routers mounted under /api
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Triathlon race calendar with recovery periods and scheduling conflict warnings",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )

    # Browser frontends call the API from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(races.router, prefix="/api", tags=["Races"])
    app.include_router(schedule.router, prefix="/api", tags=["Schedule"])

    @app.get("/")
    async def root() -> Dict[str, str]:
        """API information."""
        return {
            "name": settings.app_name,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "healthy", "service": "triathlon-scheduler-api"}

    register_exception_handlers(app)
    logger.debug("API ready (database %s)", settings.database_url)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
