"""FastAPI application entry point.

Main application setup with middleware, routing, exception mapping and
lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docgen import __version__
from docgen.api.documents import router as documents_router
from docgen.api.schemas import ErrorResponse
from docgen.api.templates import router as templates_router
from docgen.core.config import Settings, get_settings
from docgen.core.logging_config import setup_logging
from docgen.db.session import close_db, init_db
from docgen.interfaces.dispatcher import DispatchError
from docgen.interfaces.parser import ParseError
from docgen.interfaces.renderer import RenderError
from docgen.interfaces.store import DocumentNotFoundError, TemplateNotFoundError
from docgen.template_engine.validator import MissingPlaceholdersError, SchemaValidationError

# Initialize logging before importing other modules
setup_logging()
logger = logging.getLogger(__name__)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting Document Generation API...")

    try:
        logger.info("Initializing database...")
        await init_db(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Document Generation API...")

    try:
        await close_db(settings)
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}", exc_info=True)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses."""

    @app.exception_handler(TemplateNotFoundError)
    async def template_not_found_handler(request: Request, exc: TemplateNotFoundError):
        return _error(
            status.HTTP_404_NOT_FOUND,
            ErrorResponse(detail=str(exc), error_code="TEMPLATE_NOT_FOUND"),
        )

    @app.exception_handler(DocumentNotFoundError)
    async def document_not_found_handler(request: Request, exc: DocumentNotFoundError):
        return _error(
            status.HTTP_404_NOT_FOUND,
            ErrorResponse(detail=str(exc), error_code="DOCUMENT_NOT_FOUND"),
        )

    @app.exception_handler(ParseError)
    async def parse_error_handler(request: Request, exc: ParseError):
        logger.warning(f"Upload rejected: {exc}")
        return _error(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(detail=str(exc), error_code="PARSE_ERROR"),
        )

    @app.exception_handler(SchemaValidationError)
    async def schema_validation_handler(request: Request, exc: SchemaValidationError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(
                detail="Data validation failed",
                error_code="SCHEMA_VALIDATION_ERROR",
                errors=exc.errors,
            ),
        )

    @app.exception_handler(MissingPlaceholdersError)
    async def missing_placeholders_handler(request: Request, exc: MissingPlaceholdersError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(
                detail="Missing required placeholders",
                error_code="MISSING_PLACEHOLDERS",
                missing_placeholders=exc.missing,
            ),
        )

    @app.exception_handler(RenderError)
    async def render_error_handler(request: Request, exc: RenderError):
        logger.error(f"Rendering failed: {exc}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(detail=str(exc), error_code="RENDER_ERROR"),
        )

    @app.exception_handler(DispatchError)
    async def dispatch_error_handler(request: Request, exc: DispatchError):
        logger.error(f"Dispatch failed: {exc}")
        return _error(
            status.HTTP_502_BAD_GATEWAY,
            ErrorResponse(detail=str(exc), error_code="DISPATCH_ERROR"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(detail="Internal server error", error_code="INTERNAL_ERROR"),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    try:
        settings = settings or get_settings()

        app = FastAPI(
            title="Document Generation Platform",
            description="Template-based PDF and DOCX generation, one at a time or in bulk",
            version=__version__,
            lifespan=lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Store settings in app state
        app.state.settings = settings

        # CORS middleware
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],  # Configure appropriately for production
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(documents_router)
        app.include_router(templates_router)
        logger.info("Registered documents and templates routers")

        # Health check endpoint
        @app.get("/health", tags=["health"])
        async def health_check():
            """Health check endpoint for load balancers and monitoring."""
            return {
                "status": "healthy",
                "service": "docgen-api",
                "version": __version__,
            }

        register_exception_handlers(app)

        logger.info("FastAPI application created successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create FastAPI app: {e}", exc_info=True)
        raise


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "docgen.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
