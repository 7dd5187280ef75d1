# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from db.database import db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin import setup_admin
from .core.config import settings
from .core.errors import ServiceError, ValidationError
from .routes import actors, admin, contracting, health, landlords, policies, portal, review
from .schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    from .services.storage import init_storage_service

    init_storage_service(settings)
    logger.info("%s started (auth disabled: %s)", settings.APP_NAME, settings.AUTH_DISABLED)
    yield
    await db_service.close()


app = FastAPI(
    title="Arrenda Policy API",
    description="Rental guarantee policy lifecycle: actors, review, workflow and replacements",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _build_error(
    status_code: int,
    detail: str,
    request_id: str,
    *,
    code: str = "",
    errors: list[str] | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        code=code,
        errors=errors or [],
        request_id=request_id,
    )


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Render domain errors as RFC 7807 Problem Details with their error code.

    Server-side failures only expose the localized message; the descriptive
    one stays in the log.
    """
    request_id = _request_id(request)
    status_code = exc.status_code
    if status_code >= 500:
        logger.error("%r (request_id=%s, context=%s)", exc, request_id, exc.context)
        detail = exc.user_message
    else:
        detail = exc.message
    errors = exc.details if isinstance(exc, ValidationError) else None
    body = _build_error(status_code, detail, request_id, code=exc.code.value, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), _request_id(request), code="VALIDATION_ERROR")
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id, code="INTERNAL_ERROR")
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(policies.router, prefix="/api/policies", tags=["policies"])
app.include_router(contracting.router, prefix="/api/policies", tags=["contracting"])
app.include_router(landlords.router, prefix="/api/policies", tags=["landlords"])
app.include_router(review.router, prefix="/api/review", tags=["review"])
app.include_router(actors.router, prefix="/api/actors", tags=["actors"])
app.include_router(portal.router, prefix="/api/portal", tags=["portal"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

# Setup SQLAdmin dashboard at /admin
setup_admin(app)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"Welcome to {settings.APP_NAME}"}
