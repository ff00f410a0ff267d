"""
Security Headers Middleware

Adds defensive headers suited to a JSON API.
"""

from typing import Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    Headers:
    - X-Frame-Options: Prevents clickjacking
    - X-Content-Type-Options: Prevents MIME sniffing
    - Referrer-Policy: Controls referrer information
    - Strict-Transport-Security: Enforces HTTPS
    - Cache-Control: Upload results are never cached
    """

    def __init__(
        self,
        app: ASGIApp,
        hsts_max_age: int = 31536000,
        no_store_prefixes: Iterable[str] = ("/upload", "/api"),
    ):
        super().__init__(app)
        self.hsts_header = f"max-age={hsts_max_age}; includeSubDomains"
        self.no_store_prefixes = tuple(no_store_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Strict-Transport-Security", self.hsts_header)

        if request.url.path.startswith(self.no_store_prefixes):
            response.headers.setdefault("Cache-Control", "no-store")

        return response
