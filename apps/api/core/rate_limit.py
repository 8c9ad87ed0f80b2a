"""
Rate Limiting Middleware

Fixed one-minute windows counted in Redis, per caller and per route group.
Callers are identified by the user ID in their bearer token, falling back to
the client IP for anonymous requests. The chat relay and the grid lookup
have their own, tighter budgets because each request costs an upstream call.

If Redis is disabled or failing, requests are let through.
"""
import logging
import time
from typing import Dict, NamedTuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from core.cache import get_redis_client
from core.config import settings
from core.security import user_id_from_token
from services.chat_assistant import RATE_LIMITED_ERROR, RATE_LIMITED_FALLBACK

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health", "/ping", "/docs", "/redoc", "/openapi.json")
CHAT_ROUTE = "/v1/chat"


class WindowState(NamedTuple):
    allowed: bool
    remaining: int
    reset_at: int


def default_route_limits() -> Dict[str, int]:
    return {
        CHAT_ROUTE: settings.RATE_LIMIT_CHAT_PER_MINUTE,
        "/v1/carbon-intensity": settings.RATE_LIMIT_GRID_PER_MINUTE,
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, default_limit: int = 60, window: int = 60, route_limits: Dict[str, int] = None):
        super().__init__(app)
        self.default_limit = default_limit
        self.window = window
        self.route_limits = route_limits if route_limits is not None else default_route_limits()

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in EXEMPT_PATHS:
            return await call_next(request)

        group, limit = self.limit_for(path)
        state = self.hit(f"rate_limit:{self.caller(request)}:{group}", limit)
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(state.remaining),
            "X-RateLimit-Reset": str(state.reset_at),
        }

        if not state.allowed:
            headers["Retry-After"] = str(max(0, state.reset_at - int(time.time())))
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=self.limited_body(group),
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    def limited_body(self, group: str) -> Dict[str, str]:
        # Chat clients read the same {error, fallback} shape as an upstream 429
        if group == CHAT_ROUTE:
            return {"error": RATE_LIMITED_ERROR, "fallback": RATE_LIMITED_FALLBACK}
        return {"detail": RATE_LIMITED_ERROR, "error_code": "RATE_LIMITED"}

    def caller(self, request: Request) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            user_id = user_id_from_token(auth_header[len("Bearer "):])
            if user_id:
                return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def limit_for(self, path: str):
        """(route group, requests per window). Unlisted routes share one default bucket."""
        for prefix, limit in self.route_limits.items():
            if path == prefix or path.startswith(prefix + "/"):
                return prefix, limit
        return "default", self.default_limit

    def hit(self, key: str, limit: int) -> WindowState:
        now = int(time.time())
        client = get_redis_client()
        if client is None:
            return WindowState(True, limit, now + self.window)

        try:
            pipe = client.pipeline()
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = pipe.execute()
            if ttl is None or ttl < 0:
                # First hit in this window
                client.expire(key, self.window)
                ttl = self.window
        except RedisError as e:
            logger.error(f"Rate limit check failed, allowing request: {e}")
            return WindowState(True, limit, now + self.window)

        reset_at = now + (ttl if ttl and ttl > 0 else self.window)
        if count > limit:
            return WindowState(False, 0, reset_at)
        return WindowState(True, limit - count, reset_at)
