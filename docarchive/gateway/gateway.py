"""
API Gateway

Main gateway class that orchestrates routing, middleware and error handling.
Acts as the single entry point for all API requests.
"""
from typing import Callable, List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from ..core.config import CORS_ORIGINS, ENVIRONMENT, RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from ..core.logging_config import get_logger
from .middleware import (
    ErrorHandlingMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)

logger = get_logger(__name__)


class APIGateway:
    """
    API Gateway that manages routing, middleware and health endpoints.

    Responsibilities:
    - Initialize FastAPI application
    - Register middleware (CORS, rate limiting, logging, request IDs, errors)
    - Register routers
    - Provide health check endpoints
    """

    def __init__(
        self,
        title: str = "DocArchive API",
        description: str = "Document archive with metadata search and OCR",
        version: str = "1.0.0",
        lifespan: Optional[Callable] = None,
        enable_docs: Optional[bool] = None,
        rate_limit_enabled: Optional[bool] = None,
        cors_origins: Optional[List[str]] = None
    ):
        """
        Initialize API Gateway.

        Args:
            title: API title
            description: API description
            version: API version
            lifespan: Startup/shutdown context manager for the FastAPI app
            enable_docs: Enable API docs (auto-detected from ENVIRONMENT if None)
            rate_limit_enabled: Override RATE_LIMIT_ENABLED
            cors_origins: Override CORS_ORIGINS
        """
        self.title = title
        self.description = description
        self.version = version
        self.enable_docs = enable_docs if enable_docs is not None else ENVIRONMENT != "production"
        self.rate_limit_enabled = RATE_LIMIT_ENABLED if rate_limit_enabled is None else rate_limit_enabled
        self.cors_origins = cors_origins or CORS_ORIGINS

        self.app = FastAPI(
            title=self.title,
            description=self.description,
            version=self.version,
            lifespan=lifespan,
            docs_url="/docs" if self.enable_docs else None,
            redoc_url="/redoc" if self.enable_docs else None
        )

        # Rate limiter (default limit applies to every route via SlowAPIMiddleware)
        self.limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[f"{RATE_LIMIT_PER_MINUTE}/minute"],
            enabled=self.rate_limit_enabled
        )
        self.app.state.limiter = self.limiter
        self.app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

        register_exception_handlers(self.app)

        logger.info("API Gateway initialized")

    def setup_middleware(self):
        """Configure all middleware. The last one added runs first."""
        logger.info("Setting up middleware...")

        # Unexpected exceptions → 500 JSON (innermost, sees the request ID)
        self.app.add_middleware(ErrorHandlingMiddleware)
        logger.debug("  → Error handling middleware added")

        self.app.add_middleware(SlowAPIMiddleware)
        logger.debug(
            f"  → Rate limiting middleware added "
            f"({'enabled' if self.rate_limit_enabled else 'disabled'}, {RATE_LIMIT_PER_MINUTE}/minute)"
        )

        self.app.add_middleware(RequestLoggingMiddleware)
        logger.debug("  → Request logging middleware added")

        self.app.add_middleware(RequestIDMiddleware)
        logger.debug("  → Request ID middleware added")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )
        logger.debug(f"  → CORS middleware added (origins: {', '.join(self.cors_origins)})")

        logger.info("All middleware configured")

    def register_router(self, router: APIRouter, prefix: str = "", tags: Optional[List[str]] = None):
        """
        Register a router with the gateway.

        Args:
            router: FastAPI router instance
            prefix: URL prefix for the router (e.g., "/api")
            tags: OpenAPI tags for documentation
        """
        self.app.include_router(router, prefix=prefix, tags=tags or [])
        logger.info(f"Registered router at prefix '{prefix}' (tags: {', '.join(tags or [])})")

    def register_health_endpoints(self):
        """Register health check endpoints."""

        @self.app.get("/")
        async def root():
            """Root endpoint - API information."""
            return {
                "message": f"{self.title} is running",
                "version": self.version,
                "status": "healthy",
            }

        @self.app.get("/health")
        async def health_check(request: Request):
            """
            Liveness probe.

            Returns 200 once the database and services are initialized,
            503 otherwise.
            """
            state = request.app.state
            missing = [
                name for name in ("db_service", "upload_service", "search_service", "ocr_queue")
                if getattr(state, name, None) is None
            ]
            if missing:
                logger.warning(f"Health check failed: {', '.join(missing)} not initialized")
                return JSONResponse(
                    status_code=503,
                    content={"status": "unhealthy", "reason": f"{', '.join(missing)} not initialized"},
                )
            return {
                "status": "healthy",
                "database": "connected",
                "services": "initialized",
                "ocr_queue": state.ocr_queue.get_queue_status(),
            }

        @self.app.get("/ready")
        async def readiness_check(request: Request):
            """
            Readiness probe.

            Runs a count query to verify the database can serve traffic.
            """
            db_service = getattr(request.app.state, "db_service", None)
            if db_service is None:
                logger.warning("Readiness check failed: Database not initialized")
                return JSONResponse(
                    status_code=503,
                    content={"ready": False, "reason": "Database not initialized"},
                )
            try:
                documents = await db_service.count_documents()
            except Exception as e:
                logger.error(f"Readiness check failed: {e}", exc_info=True)
                return JSONResponse(status_code=503, content={"ready": False, "reason": str(e)})
            return {"ready": True, "documents": documents}

        logger.info("Health check endpoints registered")

    def get_app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self.app
