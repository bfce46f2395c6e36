import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from .gateway import APIGateway
from .routers import documents, ocr, search, uploads
from .services.database import DatabaseFactory
from .services.document_service import DocumentService
from .services.ocr_queue import OCRQueue
from .services.search_service import SearchService
from .services.storage import LocalFileStorage
from .services.text_extraction_service import TextExtractionService
from .services.text_extractors import TextExtractorFactory
from .services.upload_service import UploadService
from .core import config
from .core.logging_config import setup_logging, get_logger

logger = get_logger(__name__)


def create_app(
    database_type: Optional[str] = None,
    database_url: Optional[str] = None,
    upload_dir: Optional[Path] = None,
    rate_limit_enabled: Optional[bool] = None,
    extraction_service=None,
    job_retention_seconds: Optional[int] = None,
    cleanup_interval_seconds: Optional[int] = None
) -> FastAPI:
    """
    Build the application.

    Every argument overrides the matching setting from core.config; tests
    use them to run against a memory database, a temporary upload directory
    and a stub extraction service.
    """
    database_type = database_type or config.DATABASE_TYPE
    database_url = database_url or config.DATABASE_URL
    upload_dir = Path(upload_dir or config.UPLOAD_DIR)
    extraction_service = extraction_service or TextExtractionService()
    retention = config.OCR_JOB_RETENTION_SECONDS if job_retention_seconds is None else job_retention_seconds
    cleanup_interval = (
        config.OCR_CLEANUP_INTERVAL_SECONDS if cleanup_interval_seconds is None else cleanup_interval_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("Starting DocArchive Backend...")
        logger.info("=" * 60)

        import fastapi
        import uvicorn
        logger.info("Framework & Server:")
        logger.info(f"  → FastAPI Version: {fastapi.__version__}")
        logger.info(f"  → Uvicorn Version: {uvicorn.__version__}")
        logger.info(f"  → Python Version: {sys.version.split()[0]}")
        logger.info(f"  → Environment: {config.ENVIRONMENT}")
        logger.info(f"  → Docs URL: {app.docs_url if app.docs_url else 'Disabled (production)'}")

        logger.info(f"Initializing database: {database_type}")
        db_service = await DatabaseFactory.create_and_initialize(
            database_type, database_url=database_url, echo=config.DATABASE_ECHO
        )
        logger.info("  ✅ Database initialized")

        storage = LocalFileStorage(upload_dir)
        await storage.initialize()
        logger.info(f"  ✅ File storage ready ({upload_dir})")

        logger.info(f"Text extraction formats: {', '.join(TextExtractorFactory.get_supported_formats())}")
        logger.info(f"  → OCR languages: {config.OCR_LANGUAGES}")

        ocr_queue = OCRQueue(
            db_service,
            extraction_service,
            retention_seconds=retention,
            cleanup_interval_seconds=cleanup_interval or None,
        )
        ocr_queue.start_cleanup()
        logger.info("OCR Queue:")
        logger.info("  → Single asyncio worker, in-memory jobs")
        logger.info(f"  → Retention: {retention}s, cleanup every {cleanup_interval}s")

        app.state.db_service = db_service
        app.state.storage = storage
        app.state.ocr_queue = ocr_queue
        app.state.upload_service = UploadService(storage, db_service, extraction_service, ocr_queue)
        app.state.document_service = DocumentService(db_service, storage, ocr_queue)
        app.state.search_service = SearchService(db_service)

        logger.info("=" * 60)
        logger.info("✅ DocArchive Backend initialized successfully")
        logger.info("=" * 60)

        yield

        logger.info("Shutting down DocArchive Backend...")
        await ocr_queue.stop(timeout=30)
        await db_service.close()
        for name in ("upload_service", "document_service", "search_service", "ocr_queue", "storage", "db_service"):
            setattr(app.state, name, None)
        logger.info("DocArchive Backend shutdown complete")

    gateway = APIGateway(
        title="DocArchive API",
        description="Document archive with metadata search and background OCR",
        version="1.0.0",
        lifespan=lifespan,
        rate_limit_enabled=rate_limit_enabled,
    )

    # Setup middleware (CORS, rate limiting, logging, error handling)
    gateway.setup_middleware()

    gateway.register_router(uploads.router, prefix="/api", tags=["Uploads"])
    gateway.register_router(search.router, prefix="/api", tags=["Search"])
    gateway.register_router(documents.router, prefix="/api", tags=["Documents"])
    gateway.register_router(ocr.router, prefix="/api", tags=["OCR"])

    gateway.register_health_endpoints()

    return gateway.get_app()


def get_application() -> FastAPI:
    """Application factory used by uvicorn (--factory) and the runner script."""
    setup_logging()
    return create_app()
