"""Rate limiting middleware — Redis-based fixed window.

Learn: Uses a per-minute window counter stored in Redis.
Each IP gets a counter key like "taskboard:rl:{ip}:{bucket}:{minute}".
Login and register get a stricter limit (10/min) to slow down
password guessing.

Gracefully skips rate limiting if Redis is unavailable (e.g., in tests).
"""

import time
from typing import Optional

import structlog
from redis.asyncio import Redis, from_url
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from taskboard.config import settings

logger = structlog.get_logger()

AUTH_PATHS = ("/api/login", "/api/register")

# ─── Connection pool ──────────────────────────────────────

_redis: Optional[Redis] = None


async def init_redis() -> Redis:
    """Create the shared client and check it answers. Called from lifespan."""
    global _redis
    client = from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    _redis = client
    return _redis


def get_redis() -> Redis:
    if _redis is None:
        raise RuntimeError("Redis not initialized")
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


# ─── Middleware ───────────────────────────────────────────


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        # Skip rate limiting if Redis was never connected
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        is_auth = request.url.path in AUTH_PATHS
        rpm = self.auth_rpm if is_auth else self.default_rpm

        # Window key: per IP, per bucket type, per minute
        window = int(time.time() // 60)
        bucket = "auth" if is_auth else "api"
        key = f"taskboard:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)  # 2-min TTL for safety
        except Exception as e:
            # Redis error: don't block the request
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"message": "Too Many Attempts."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
