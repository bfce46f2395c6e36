"""
Shared dependencies for routers.

Services are created during application startup and stored on app.state;
these functions hand them to route handlers via FastAPI's Depends.
"""
from fastapi import Request

from ..services.database.base import DatabaseInterface
from ..services.document_service import DocumentService
from ..services.ocr_queue import OCRQueue
from ..services.search_service import SearchService
from ..services.upload_service import UploadService


def _get_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise RuntimeError(f"{name} not initialized")
    return service


def get_db_service(request: Request) -> DatabaseInterface:
    """Get database service (dependency injection)."""
    return _get_state(request, "db_service")


def get_upload_service(request: Request) -> UploadService:
    """Get upload service (dependency injection)."""
    return _get_state(request, "upload_service")


def get_document_service(request: Request) -> DocumentService:
    """Get document service (dependency injection)."""
    return _get_state(request, "document_service")


def get_search_service(request: Request) -> SearchService:
    """Get search service (dependency injection)."""
    return _get_state(request, "search_service")


def get_ocr_queue(request: Request) -> OCRQueue:
    """Get the OCR queue (dependency injection)."""
    return _get_state(request, "ocr_queue")
