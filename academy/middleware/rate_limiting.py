"""
Per-IP rate limiting for the authentication routes.

Login and registration share one sliding window per client IP
(``auth_rate_limit_requests`` per ``auth_rate_limit_window_seconds``).
Requests over the limit get a 429 in the usual error envelope.
"""

import asyncio
import time
from collections import deque
from typing import Any, Dict, Tuple

from fastapi import status
from starlette.requests import Request

from academy.config import Settings
from academy.utils import Logger, error_response

logger = Logger("rate_limit")


class SlidingWindowCounter:
    """Sliding window counter for one client."""

    def __init__(self, window_seconds: int, max_requests: int):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.requests: deque = deque()
        self._lock = asyncio.Lock()

    async def is_allowed(self) -> Tuple[bool, Dict[str, Any]]:
        async with self._lock:
            now = time.time()
            window_start = now - self.window_seconds

            while self.requests and self.requests[0] <= window_start:
                self.requests.popleft()

            if len(self.requests) < self.max_requests:
                self.requests.append(now)
                return True, self._info(now + self.window_seconds)

            return False, self._info(self.requests[0] + self.window_seconds)

    def _info(self, reset_time: float) -> Dict[str, Any]:
        return {
            "current_requests": len(self.requests),
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "reset_time": reset_time,
        }

    def is_idle(self, now: float) -> bool:
        return not self.requests or self.requests[-1] <= now - self.window_seconds


class AuthRateLimiter:
    """Sliding windows keyed by client IP."""

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.windows: Dict[str, SlidingWindowCounter] = {}

    async def check(self, key: str) -> Tuple[bool, Dict[str, Any]]:
        window = self.windows.get(key)
        if window is None:
            self._cleanup_expired()
            window = SlidingWindowCounter(self.window_seconds, self.max_requests)
            self.windows[key] = window
        return await window.is_allowed()

    def _cleanup_expired(self) -> None:
        now = time.time()
        expired = [key for key, window in self.windows.items() if window.is_idle(now)]
        for key in expired:
            del self.windows[key]


class AuthRateLimitMiddleware:
    """ASGI middleware throttling POSTs to the login and register routes."""

    def __init__(self, app, settings: Settings):
        self.app = app
        self.limited_paths = {
            f"/api/{settings.api_version}/auth/login",
            f"/api/{settings.api_version}/auth/register",
        }
        self.enabled = settings.auth_rate_limit_enabled
        self.limiter = AuthRateLimiter(
            settings.auth_rate_limit_requests,
            settings.auth_rate_limit_window_seconds,
        )

    async def __call__(self, scope, receive, send):
        if (
            not self.enabled
            or scope["type"] != "http"
            or scope["method"] != "POST"
            or scope["path"] not in self.limited_paths
        ):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        ip_address = self._get_client_ip(request)
        allowed, info = await self.limiter.check(ip_address)

        if not allowed:
            retry_after = max(0, int(info["reset_time"] - time.time()))
            minutes = max(1, self.limiter.window_seconds // 60)
            logger.warning(f"Rate limit exceeded for {ip_address} on {scope['path']}")
            response = error_response(
                f"Too many requests from this IP, please try again after {minutes} minutes",
                code=status.HTTP_429_TOO_MANY_REQUESTS,
            )
            response.headers["Retry-After"] = str(retry_after)
            response.headers["X-RateLimit-Limit"] = str(info["max_requests"])
            response.headers["X-RateLimit-Remaining"] = "0"
            await response(scope, receive, send)
            return

        remaining = max(0, info["max_requests"] - info["current_requests"])

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.extend(
                    [
                        (b"x-ratelimit-limit", str(info["max_requests"]).encode()),
                        (b"x-ratelimit-remaining", str(remaining).encode()),
                        (b"x-ratelimit-reset", str(int(info["reset_time"])).encode()),
                    ]
                )
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_headers)

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
