"""Review Pilot AI: Main FastAPI Application.

Aggregates customer reviews from several platforms per organization,
drafts replies, and reports dashboard analytics.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import api_router
from .core import RouteGuardMiddleware, Settings, close_db, get_settings, init_db
from .schemas import ErrorResponse
from .services import ResponseGenerator, TemplateResponseGenerator

logger = logging.getLogger(__name__)


def _format_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


def create_app(
    settings: Settings | None = None,
    response_generator: ResponseGenerator | None = None,
) -> FastAPI:
    """Build the application. The database is opened in the lifespan."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown."""
        logging.basicConfig(
            level=logging.DEBUG if settings.debug else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info(f"Starting {settings.app_name} {settings.app_version} ({settings.environment})")

        app.state.db = await init_db(settings)
        yield
        # Shutdown
        await close_db(app.state.db)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        ## Review Pilot AI API

        Review aggregation and reply drafting for businesses.

        ### Authentication

        Send the token from signup/login in the `Authorization: Bearer <token>`
        header, or rely on the `auth-token` cookie set by those endpoints.
        """,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.response_generator = response_generator or TemplateResponseGenerator(
        delay_seconds=settings.ai_response_delay_seconds,
    )

    app.add_middleware(RouteGuardMiddleware, settings=settings)

    # CORS middleware with explicit origins (credentials require explicit origins, not "*")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Field-level messages with a 400, not FastAPI's default 422."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error="Validation failed",
                details=[_format_validation_error(e) for e in exc.errors()],
            ).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render every HTTP error, routing 404/405 included, as ``{"error": ...}``."""
        if isinstance(exc.detail, dict):
            content = {"error": exc.detail.get("error", "Request failed"), **exc.detail}
        else:
            content = {"error": exc.detail}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Internal server error").model_dump(exclude_none=True),
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    # Include API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "review_pilot.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
