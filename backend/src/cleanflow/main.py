"""CleanFlow Backend - Main FastAPI Application

Public document acceptance service for commercial cleaning operations.

This module creates and configures the FastAPI application, including:
- The public document router (view, accept, reject)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping domain errors to HTTP responses
- Health endpoint
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .domain.documents.errors import PublicDocumentError
from .observability.logging_config import configure_logging, get_logger
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router
from .public_access.router import router as public_documents_router

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = get_logger(__name__)

# Domain error code -> HTTP status
ERROR_STATUS_CODES = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "link_expired": status.HTTP_410_GONE,
    "not_actionable": status.HTTP_409_CONFLICT,
    "invalid_input": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "conversion_failed": status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("CleanFlow API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    yield
    logger.info("CleanFlow API shutting down...")


app = FastAPI(
    title="CleanFlow API",
    description="Public document acceptance and job conversion",
    version="0.1.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)

# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


@app.exception_handler(PublicDocumentError)
async def public_document_exception_handler(
    request: Request,
    exc: PublicDocumentError
) -> JSONResponse:
    """Map domain errors to HTTP responses.

    The message is user-visible by construction; nothing else about the
    document is returned.
    """
    status_code = ERROR_STATUS_CODES.get(exc.error_code, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(f"Public document request failed: {exc.error_code}")
    else:
        logger.info(f"Public document request refused: {exc.error_code}")

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.error_code, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(f"Validation error on {request.method}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                for error in exc.errors()
            ],
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(f"Database error on {request.method}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions.

    Full details are logged but not exposed to the client.
    """
    logger.error(f"Unhandled exception on {request.method}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health)
app.include_router(observability_router)

# Public document links
app.include_router(public_documents_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "CleanFlow API",
        "version": "0.1.0",
        "status": "running",
    }


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "cleanflow.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
