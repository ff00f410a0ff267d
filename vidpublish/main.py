"""vidpublish - FastAPI Application Entry Point.

Single upload endpoint that materializes a video, generates SEO metadata and
publishes it to YouTube, with:
- Request ID tracking and request logging
- Security headers
- Consistent JSON error envelopes
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from vidpublish.config import (
    ALLOWED_HOSTS,
    CORS_ORIGINS,
    DEBUG,
    METADATA_PROVIDER,
    UPLOAD_TMP_DIR,
    UVICORN_LIMIT_CONCURRENCY,
    logger,
)
from vidpublish.middleware import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
    UnhandledErrorMiddleware,
)
from vidpublish.routers import upload
from vidpublish.schemas import HealthResponse
from vidpublish.version import __version__


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info(
        "Starting vidpublish v%s (metadata=%s, tmp=%s)",
        __version__,
        METADATA_PROVIDER,
        UPLOAD_TMP_DIR,
    )
    yield
    logger.info("Shutting down vidpublish")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="vidpublish",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # -------------------------------------------------------------------------
    # Middleware Stack (order matters - first added = last executed)
    # -------------------------------------------------------------------------

    # 1. Unhandled errors (outermost)
    app.add_middleware(UnhandledErrorMiddleware, debug=DEBUG)

    # 2. Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # 3. Request ID + logging
    app.add_middleware(RequestContextMiddleware)

    # 4. Trusted hosts
    if ALLOWED_HOSTS and ALLOWED_HOSTS != ["*"]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS)

    # 5. CORS (innermost for preflight handling)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    @app.get("/healthz", response_model=HealthResponse, include_in_schema=False)
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers and orchestrators."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        """Readiness check - the ephemeral storage directory must exist."""
        if not UPLOAD_TMP_DIR.is_dir():
            return JSONResponse(
                status_code=503,
                content={"status": "unavailable", "reason": "upload directory missing"},
            )
        return {"status": "ready"}

    app.include_router(upload.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "vidpublish.main:app",
        host="0.0.0.0",
        port=8000,
        reload=DEBUG,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
    )
