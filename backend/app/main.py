# backend/app/main.py

import logging
import os
import time
from typing import Dict, Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import api_admin, api_booking, api_church, api_equipment, api_venue, auth
from .core.config import settings
from .core.observability import setup_logging
from .database import Base, engine
from .middleware.security_headers import SecurityHeadersMiddleware
from .services.admin_bootstrap import ensure_default_admin
from .utils.errors import AppError
from .utils.status_logger import register_status_listeners

setup_logging()
logger = logging.getLogger(__name__)

_BOOT_TS = time.time()

# Schema is created from the models; there is no migration history to replay
Base.metadata.create_all(bind=engine)
register_status_listeners()
try:
    ensure_default_admin()
except SQLAlchemyError as _exc:
    logger.warning("Default admin bootstrap skipped: %s", _exc)

# Always use ORJSONResponse for JSON payloads to ensure consistent, fast
# serialization across all endpoints.
app = FastAPI(title="Church Venue Booking API", default_response_class=ORJSONResponse)


# ─── CORS middleware ─────────────────────────────────────────────────────────

def _merge_origins(*groups: Iterable[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for origin in group:
            if not origin:
                continue
            normalized = origin.rstrip("/")
            if normalized not in merged:
                merged.append(normalized)
    return merged


ALLOWED_ORIGINS = _merge_origins(settings.CORS_ORIGINS, [settings.FRONTEND_URL])
if settings.CORS_ALLOW_ALL:
    ALLOWED_ORIGINS = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    # Bearer tokens travel in headers, so credentials are only needed for
    # an explicit allowlist; browsers reject them with "*"
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", ALLOWED_ORIGINS)

app.add_middleware(
    SecurityHeadersMiddleware, hsts=settings.FRONTEND_URL.lower().startswith("https")
)
app.add_middleware(GZipMiddleware, minimum_size=1024)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Turn anything the handlers did not map into a logged JSON 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error at %s: %s", request.url.path, exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors as ``{"error": ..., "field": ...}``."""
    if exc.status_code >= 500:
        logger.error("%s at %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info(
            "%s at %s: %s", type(exc).__name__, request.url.path, exc.message
        )
    return ORJSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the ``{"error": ...}`` shape for framework and auth errors."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return ORJSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


def _field_errors(errors) -> Dict[str, str]:
    field_errors: Dict[str, str] = {}
    for err in errors:
        # loc is ("body", "field", ...) or ("query", "field")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "body"
        field_errors.setdefault(key, err.get("msg", "invalid"))
    return field_errors


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request validation errors as 400 with per-field messages."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    field_errors = _field_errors(errors)
    first_field, first_message = next(iter(field_errors.items()))
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": f"{first_field}: {first_message}",
            "field": first_field,
            "field_errors": field_errors,
        },
    )


@app.get("/healthz", tags=["health"])
def healthz():
    """Liveness plus a database ping."""
    started = time.perf_counter()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check database ping failed: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "error": "database unavailable"},
        )
    return {
        "status": "ok",
        "db_ping_ms": round((time.perf_counter() - started) * 1000, 1),
        "uptime_s": round(time.time() - _BOOT_TS, 1),
        "pid": os.getpid(),
    }


api_prefix = settings.API_V1_STR  # usually something like "/api/v1"


# ─── AUTH ROUTES (no version prefix) ────────────────────────────────────────────────
# Clients will POST to /auth/register and /auth/login
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(api_admin.router, prefix="", tags=["admin"])

app.include_router(api_church.router, prefix=f"{api_prefix}/churches", tags=["churches"])
app.include_router(api_venue.router, prefix=f"{api_prefix}/venues", tags=["venues"])
app.include_router(api_equipment.router, prefix=f"{api_prefix}/equipment", tags=["equipment"])
app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings", tags=["bookings"])


# ─── A simple root check ─────────────────────────────────────────────────────────────
@app.get("/")
async def root():
    return {"message": "Welcome to the Church Venue Booking API"}
