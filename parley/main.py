"""
Parley - discussion forum API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from parley.config import get_settings
from parley.database import init_db, close_db
from parley.api.auth import router as auth_router
from parley.api.public import router as public_router
from parley.api.middleware.request_id import RequestIdMiddleware
from parley.kernel.errors import ForumError
from parley.schemas.common import HealthResponse
from parley.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Parley discussion forum API

    ## Features

    - **Topics and replies**: markdown content rendered on read, answers, pinning and locking
    - **Forums and index**: paged topic listings grouped by category
    - **Search and member pages**: restricted to forums the caller can read
    - **Permissions**: per-forum grants by role or member, with category inheritance
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# add_middleware stacks innermost-first: the last added is outermost.
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    headers = _error_headers(request)
    if exc.headers:
        headers.update(exc.headers)
    content = {
        "detail": exc.detail,
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError):
    """Domain errors raised below the route layer."""
    if exc.status_code >= 500:
        logger.error(
            "Forum error: %s",
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
    else:
        logger.info(
            "Forum error: %s",
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
    content = {
        "detail": exc.message,
        "code": exc.code,
        "details": exc.details or None,
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Report validation failures per field."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {
        "detail": "Validation error",
        "errors": errors,
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions. Details are only exposed in debug."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_error_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "public": settings.public_api_prefix,
            "auth": f"{settings.api_prefix}/auth",
        },
    }


app.include_router(public_router, prefix=settings.public_api_prefix)
app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["Authentication"])


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "parley.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
