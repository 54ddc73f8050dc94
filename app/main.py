"""
Clubhouse — multi-tenant sports organization management API.

App assembly only: lifespan, middleware, exception handlers, router mounts.
Routes live in app/routers/, business rules in app/services/.

Called by: uvicorn (app.main:app)
Depends on: config, logging_config, startup, rate_limit, routers
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import APP_VERSION, settings
from .http_client import close_clients
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers import (
    admin,
    athletes,
    auth,
    competitions,
    events,
    imports,
    locations,
    organizations,
    reference,
    rosters,
    teams,
    weight_classes,
)
from .schemas.errors import ErrorResponse
from .schemas.responses import HealthResponse
from .startup import run_startup_migrations

# ── Lifecycle ────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    run_startup_migrations()
    logger.info("Clubhouse started", version=APP_VERSION)
    yield
    await close_clients()
    logger.info("Clubhouse stopped")


app = FastAPI(title="Clubhouse", version=APP_VERSION, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ── Middleware ───────────────────────────────────────────────────────


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every request with a short ID, log it, and set security headers on the response."""
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    start = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.bind(
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=elapsed_ms,
        ).info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms}ms")
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-API-Version"] = "v1"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


# ── Exception handlers ───────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = ErrorResponse(
        error=str(exc.detail), status_code=exc.status_code, request_id=_request_id(request)
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    body = ErrorResponse(
        error="Validation error",
        status_code=422,
        request_id=_request_id(request),
        detail=details,
    )
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}", request_id=request_id
    )
    content = ErrorResponse(
        error="Internal server error", status_code=500, request_id=request_id
    ).model_dump(exclude_none=True)
    content["type"] = exc.__class__.__name__
    return JSONResponse(status_code=500, content=content)


# ── Routers ──────────────────────────────────────────────────────────

for module in (
    auth,
    admin,
    organizations,
    reference,
    teams,
    athletes,
    competitions,
    locations,
    events,
    rosters,
    weight_classes,
    imports,
):
    app.include_router(module.router)

# PDFs parked for the processing webhook are fetched from here
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"status": "ok", "version": APP_VERSION}
