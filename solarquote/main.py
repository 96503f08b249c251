"""
main.py — FastAPI application for the SolarQuote marketplace

Wires middleware, exception handlers, rate limiting and routers.

Business Rules:
- Every response carries X-Request-ID (8 chars) and the security headers
- Errors use schemas.errors.ErrorResponse {error, status_code, request_id, detail}
- 401/403 on page paths (outside /api) become 303 redirects to the login or
  unauthorized page; /api paths get JSON
- Domain exceptions map to their status_code; anything unhandled is logged
  and returned as a generic 500

Called by: uvicorn (solarquote.main:app)
Depends on: config, logging_config, startup, rate_limit, routers/*
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import APP_VERSION, settings
from .errors import MarketplaceError
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers import admin, auth, dashboards, notifications, quotations
from .schemas.errors import ErrorResponse
from .startup import run_startup_migrations


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    run_startup_migrations()
    logger.info(f"{settings.app_name} v{APP_VERSION} started ({settings.environment})")
    yield
    logger.info("Shutting down")


app = FastAPI(title=settings.app_name, version=APP_VERSION, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ── Middleware ───────────────────────────────────────────────────────


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-API-Version"] = "v1"
    return response


# ── Exception handlers ───────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _error(request: Request, status_code: int, message: str, detail: list | None = None):
    body = ErrorResponse(
        error=message, status_code=status_code, request_id=_request_id(request), detail=detail
    )
    return JSONResponse(body.model_dump(), status_code=status_code)


def _is_page(request: Request) -> bool:
    return not request.url.path.startswith("/api")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (401, 403) and _is_page(request):
        target = settings.login_path if exc.status_code == 401 else settings.unauthorized_path
        return RedirectResponse(target, status_code=303)
    return _error(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _error(request, 422, "Validation error", detail)


@app.exception_handler(MarketplaceError)
async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return _error(request, exc.status_code, "Internal server error")
    detail = [{"field": exc.field, "message": exc.message}] if exc.field else None
    return _error(request, exc.status_code, exc.message, detail)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return _error(request, 500, "Internal server error")


# ── Routers ──────────────────────────────────────────────────────────

app.include_router(auth.router)
app.include_router(quotations.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(dashboards.router)
