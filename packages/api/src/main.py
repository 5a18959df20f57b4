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
from .core.errors import ValidationError, WorkflowError
from .routes import (
    actions,
    admin,
    bank,
    cases,
    catalog,
    checklist,
    health,
    leads,
    queries,
    reminders,
)
from .schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    if settings.AUTH_DISABLED:
        logger.warning("AUTH_DISABLED=true -- every request runs as the dev admin user")
    yield
    await db_service.dispose()


app = FastAPI(
    title="Education Loan Workflow API",
    description="Case workflow engine for education-loan applications",
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
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id") or str(uuid.uuid4())


def _problem(
    request: Request,
    status_code: int,
    detail: str,
    *,
    kind: str = "",
    errors: dict[str, str] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        request_id=request_id or _request_id(request),
        kind=kind,
        errors=errors or {},
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    """Render service-layer errors with their stable kind."""
    logger.info(
        "Rejected %s %s (%s): %s", request.method, request.url.path, exc.kind, exc.message,
    )
    errors = exc.details if isinstance(exc, ValidationError) else None
    return _problem(request, exc.status_code, exc.message, kind=exc.kind, errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    return _problem(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = {
        ".".join(str(part) for part in err["loc"] if part != "body") or "body": err["msg"]
        for err in exc.errors()
    }
    return _problem(request, 422, "Request validation failed", kind="validation", errors=errors)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    return _problem(request, 500, "An unexpected error occurred.", request_id=request_id)


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(cases.router, prefix="/api/cases", tags=["cases"])
app.include_router(bank.router, prefix="/api/bank-applications", tags=["bank"])
app.include_router(checklist.router, prefix="/api", tags=["checklist"])
app.include_router(actions.router, prefix="/api", tags=["actions"])
app.include_router(queries.router, prefix="/api", tags=["queries"])
app.include_router(reminders.router, prefix="/api", tags=["reminders"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["catalog"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

# Setup SQLAdmin dashboard at /admin
setup_admin(app)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Education Loan Workflow API"}
