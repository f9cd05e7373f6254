import time
from collections import defaultdict, deque
from typing import Deque

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # Left-most entry is the original client.
        return forwarded.split(",")[0].strip() or "unknown"
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window cap on submissions per client IP; a limit <= 0 disables it."""

    def __init__(
        self,
        app,
        *,
        limit: int,
        window_seconds: int = 60,
        path_prefixes: tuple[str, ...] = ("/apply",),
    ) -> None:
        super().__init__(app)
        self.limit = limit
        self.window_seconds = window_seconds
        self.path_prefixes = path_prefixes
        self._submissions: dict[str, Deque[float]] = defaultdict(deque)

    def _is_limited(self, request: Request) -> bool:
        if self.limit <= 0 or request.method != "POST":
            return False
        return request.url.path.startswith(self.path_prefixes)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for client in list(self._submissions):
            window = self._submissions[client]
            while window and window[0] < cutoff:
                window.popleft()
            if not window:
                del self._submissions[client]

    def _admit(self, client: str) -> bool:
        now = time.monotonic()
        self._prune(now)
        window = self._submissions[client]
        if len(window) >= self.limit:
            return False
        window.append(now)
        return True

    async def dispatch(self, request: Request, call_next):
        if self._is_limited(request) and not self._admit(_client_ip(request)):
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "rate_limited", "message": "Too many submissions. Please retry shortly."},
            )
        return await call_next(request)
