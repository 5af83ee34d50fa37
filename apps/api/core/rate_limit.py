"""
Rate Limiting Middleware

Fixed-window counter per client IP and endpoint, stored in Redis.
The calculators are public, so limits are keyed on IP only.
"""
import time
import logging
from typing import Tuple
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from core.config import settings
from core.cache import get_redis_client

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health", "/ping", "/docs", "/openapi.json", "/redoc"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware using a Redis fixed-window counter."""

    def __init__(self, app, default_limit: int = 60, window: int = 60):
        super().__init__(app)
        self.default_limit = default_limit
        self.window = window  # Time window in seconds

        # Per-endpoint limits (requests per window)
        self.endpoint_limits = {
            "/v1/public/environmental/calculate": 30,
            "/v1/public/pacing/strategy": 30,
        }

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        limit = self._get_endpoint_limit(request.url.path)

        allowed, remaining, reset_time = self._check_rate_limit(
            client_id=f"ip:{client_ip}",
            endpoint=request.url.path,
            limit=limit,
            window=self.window
        )

        if not allowed:
            logger.info(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": "Rate limit exceeded",
                    "error_code": "RATE_LIMITED",
                    "limit": limit,
                    "window": self.window,
                    "reset_at": reset_time
                },
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": str(remaining),
                    "X-RateLimit-Reset": str(reset_time),
                    "Retry-After": str(max(0, int(reset_time - time.time())))
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset_time)

        return response

    def _get_endpoint_limit(self, path: str) -> int:
        """Get rate limit for endpoint."""
        if path in self.endpoint_limits:
            return self.endpoint_limits[path]

        for endpoint, limit in self.endpoint_limits.items():
            if path.startswith(endpoint):
                return limit

        return self.default_limit

    def _check_rate_limit(
        self,
        client_id: str,
        endpoint: str,
        limit: int,
        window: int
    ) -> Tuple[bool, int, int]:
        """
        Check and count one request against the window.

        Returns:
            (allowed, remaining, reset_time)
        """
        redis_client = get_redis_client()

        if not redis_client:
            # If Redis unavailable, allow request (graceful degradation)
            logger.warning("Redis unavailable, skipping rate limit check")
            return True, limit, int(time.time()) + window

        key = f"rate_limit:{client_id}:{endpoint}"
        now = int(time.time())

        try:
            count = redis_client.incr(key)
            if count == 1:
                redis_client.expire(key, window)

            ttl = redis_client.ttl(key)
            reset_time = now + (ttl if ttl > 0 else window)

            if count > limit:
                return False, 0, reset_time
            return True, limit - count, reset_time

        except Exception as e:
            # On error, allow request (fail open)
            logger.error(f"Rate limit check error: {e}")
            return True, limit, now + window
