"""
Middleware stack for vidpublish.

Provides:
- Request ID injection and request logging
- Security headers
- Unhandled error conversion
"""

from vidpublish.middleware.request_context import RequestContextMiddleware
from vidpublish.middleware.security_headers import SecurityHeadersMiddleware
from vidpublish.middleware.error_handling import UnhandledErrorMiddleware

__all__ = [
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
    "UnhandledErrorMiddleware",
]
