"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database, Redis).
Middleware, CORS, exception handlers and routers all registered here.

Every error leaves the API as JSON with a ``message`` key; validation
errors add an ``errors`` map of field → messages.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard import __version__
from taskboard.api import api_router
from taskboard.config import settings
from taskboard.errors import TaskboardError
from taskboard.logs import configure_logging

logger = structlog.get_logger()

_LOC_PREFIXES = ("body", "query", "path", "header")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "taskboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    # Redis only backs rate limiting; the API works without it
    from taskboard.middleware.rate_limit import close_redis, init_redis
    try:
        await init_redis()
        logger.info("taskboard.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("taskboard.redis_unavailable", error=str(e))

    yield

    # Shutdown
    logger.info("taskboard.shutdown")
    await close_redis()

    from taskboard.db.engine import engine
    await engine.dispose()


# ─── Exception handlers ──────────────────────────────────


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOC_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _clean_message(msg: str) -> str:
    # Custom validators surface as "Value error, <message>"
    return msg.removeprefix("Value error, ")


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reshape FastAPI's 422 into ``{"message", "errors": {field: [msgs]}}``."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(err.get("loc", ())), []).append(
            _clean_message(err.get("msg", "Invalid value."))
        )

    messages = [m for msgs in errors.values() for m in msgs]
    message = messages[0] if messages else "The given data was invalid."
    if len(messages) > 1:
        extra = len(messages) - 1
        message += f" (and {extra} more error{'s' if extra > 1 else ''})"

    return JSONResponse(status_code=422, content={"message": message, "errors": errors})


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same JSON shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("http.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server Error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Taskboard",
        description="Multi-tenant project and task tracking API",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from taskboard.middleware.rate_limit import RateLimitMiddleware
    from taskboard.middleware.request_id import RequestIdMiddleware
    from taskboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskboardError, taskboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskboard.main:app)
app = create_app()
