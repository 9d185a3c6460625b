from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from punchclock.middleware.error_handler import error_response
import os
import time
import logging

# Optional Redis support - falls back to lightweight in-memory counters if not
# available, so the application can still run in development.

logger = logging.getLogger(__name__)


class RateLimiterMiddleware(BaseHTTPMiddleware):
    """Simple IP-based rate limiter.

    Production - uses Redis for distributed rate limiting (set REDIS_URL).
    Development - falls back to in-process dictionary so devs don't have to
    run Redis locally.
    """

    def __init__(self, app):
        super().__init__(app)
        self._local_cache: dict[str, list[float]] = {}
        self._redis = None
        self._redis_unavailable = False  # Cache Redis health to avoid log spam

    def _too_many_requests(self):
        return error_response(429, "RATE_LIMITED", "Too Many Requests")

    async def _redis_allows(self, redis_url: str, client_ip: str, limit: int, window_seconds: int):
        """True/False from the shared Redis counter, None if Redis is down."""
        try:
            import redis.asyncio as aioredis  # Local import so project still works w/o Redis

            if self._redis is None:
                self._redis = aioredis.from_url(redis_url)
            key = f"rate:{client_ip}"

            current = await self._redis.get(key)
            if current and int(current) >= limit:
                return False

            # Use pipeline (transaction) for atomicity
            tx = self._redis.pipeline()
            tx.incr(key)
            tx.expire(key, window_seconds)
            await tx.execute()
            return True

        except Exception as exc:  # noqa: broad-except (Redis down/etc.)
            logger.warning(
                "RateLimiter: Redis unavailable - falling back to in-memory store (%s)",
                exc,
            )
            # Mark Redis as unavailable for the remainder of the process lifetime.
            self._redis_unavailable = True
            return None

    async def dispatch(self, request: Request, call_next):
        # Allow disabling in development quickly
        if os.getenv("DISABLE_RATE_LIMIT", "0") == "1":
            return await call_next(request)

        # Do not rate-limit CORS pre-flight requests which are always OPTIONS
        if request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        limit = int(os.getenv("RATE_LIMIT", "240"))
        window_seconds = int(os.getenv("RATE_LIMIT_WINDOW", "60"))

        redis_url = os.getenv("REDIS_URL")

        # ------------------------------------------------------------------
        # Redis-backed strategy (preferred for multi-instance deployments)
        # ------------------------------------------------------------------
        if redis_url and not self._redis_unavailable:
            allowed = await self._redis_allows(redis_url, client_ip, limit, window_seconds)
            if allowed is not None:
                if not allowed:
                    return self._too_many_requests()
                return await call_next(request)
            # Fall through to in-memory fallback

        # ------------------------------------------------------------------
        # In-memory fallback (single-instance / development only)
        # ------------------------------------------------------------------
        now = time.time()
        window_start = now - window_seconds

        # Purge old timestamps for this IP
        timestamps = self._local_cache.get(client_ip, [])
        timestamps = [ts for ts in timestamps if ts > window_start]

        if len(timestamps) >= limit:
            return self._too_many_requests()

        timestamps.append(now)
        self._local_cache[client_ip] = timestamps

        return await call_next(request)
