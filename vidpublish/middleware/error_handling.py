"""
Unhandled Error Middleware

Last line of defence: any exception that escapes a route becomes the standard
upload error envelope instead of a bare 500.
"""

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from vidpublish.config import logger
from vidpublish.core.errors import GENERIC_FAILURE_MESSAGE


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Converts escaped exceptions into ``{"success": false, "error": ...}``.

    The exception message is only exposed in debug mode; the full traceback is
    always logged server-side.
    """

    def __init__(self, app: ASGIApp, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled exception in request %s: %s", request_id, exc)

            message = str(exc) if self.debug and str(exc) else GENERIC_FAILURE_MESSAGE
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": message, "requestId": request_id},
            )
