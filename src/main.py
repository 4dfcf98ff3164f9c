"""
Recent Usernames Service

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.database import init_db, close_db
from src.api.v1 import router as api_v1_router
from src.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from src.schemas.common import HealthResponse
from src.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Configure logging and create tables on startup; release the engine on shutdown."""
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )
    logger.info("Starting %s v%s (%s)", settings.project_name, settings.version, settings.environment)
    await init_db()

    yield

    await close_db()
    logger.info("Stopped %s", settings.project_name)


app = FastAPI(
    title=settings.project_name,
    description="""
    Recent Usernames Service

    Per-user history of recently used login usernames, used to power
    autocomplete in credential-entry forms.

    ## Behaviour

    1. Most recent first, no duplicates, at most 20 entries
    2. First use is seeded from identity emails, then the account email
    3. A cleared history stays empty
    4. Failures degrade to empty results, never to errors
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(RequestIdMiddleware)


def _error_response(
    request: Request,
    status_code: int,
    content: dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """JSON error body with the request id echoed back."""
    merged = dict(headers or {})
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        merged[REQUEST_ID_HEADER] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=merged)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(request, exc.status_code, {"detail": exc.detail}, exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors to field / message / type."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"detail": "Validation error", "errors": errors},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content: dict[str, Any] = {"detail": "Internal server error"}
    if settings.debug:
        content = {"detail": str(exc), "type": type(exc).__name__}
    content["request_id"] = getattr(request.state, "request_id", None)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, content)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Liveness probe."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
    )


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
