"""
Document Service - Handles single-document operations.

This service encapsulates:
- Retrieving, updating and deleting documents
- Resolving the stored file for download
- Re-queuing a document for the advanced OCR pass
"""
from pathlib import Path
from typing import Any, Dict

from .database.base import DatabaseInterface
from .storage.base import FileStorageInterface
from .ocr_queue import OCRQueue
from ..api.exceptions import DocumentNotFoundError, InvalidMetadataError, StoredFileNotFoundError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("title", "category")


class DocumentService:
    """Service for document retrieval, editing and lifecycle operations."""

    def __init__(self, db_service: DatabaseInterface, storage: FileStorageInterface, ocr_queue: OCRQueue):
        self.db_service = db_service
        self.storage = storage
        self.ocr_queue = ocr_queue

    async def get_document(self, doc_id: int) -> Dict[str, Any]:
        """
        Get document by ID.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        doc = await self.db_service.get_document(doc_id)
        if not doc:
            raise DocumentNotFoundError()
        return doc

    async def update_document(self, doc_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial metadata update.

        Args:
            doc_id: Document ID
            updates: Only the fields the client sent (snake_case keys)

        Raises:
            InvalidMetadataError: If title or category would become empty
            DocumentNotFoundError: If the document does not exist
        """
        for field_name in REQUIRED_FIELDS:
            if field_name in updates and not updates[field_name]:
                raise InvalidMetadataError(f"{field_name}: must not be empty")

        doc = await self.db_service.update_document(doc_id, updates)
        if not doc:
            raise DocumentNotFoundError()
        logger.info(f"Updated document {doc_id} ({', '.join(sorted(updates)) or 'no fields'})")
        return doc

    async def delete_document(self, doc_id: int) -> None:
        """Delete the stored file, then the document row."""
        doc = await self.get_document(doc_id)

        if doc.get("file_path"):
            removed = await self.storage.delete_file(doc["file_path"])
            if not removed:
                logger.warning(f"File for document {doc_id} was already missing: {doc['file_path']}")

        await self.db_service.delete_document(doc_id)
        logger.info(f"Deleted document {doc_id}")

    async def _existing_file(self, doc: Dict[str, Any]) -> Path:
        file_path = doc.get("file_path")
        if not file_path or not await self.storage.file_exists(file_path):
            raise StoredFileNotFoundError()
        return Path(file_path)

    async def get_download(self, doc_id: int) -> Dict[str, Any]:
        """
        Resolve the stored file of a document.

        Returns:
            Dict with path, original_name and mime_type

        Raises:
            DocumentNotFoundError: If the document does not exist
            StoredFileNotFoundError: If its file is missing on disk
        """
        doc = await self.get_document(doc_id)
        path = await self._existing_file(doc)
        return {
            "path": path,
            "original_name": doc["original_name"],
            "mime_type": doc["mime_type"],
        }

    async def reprocess_document(self, doc_id: int) -> str:
        """
        Queue the advanced OCR pass again for a document.

        Returns:
            The new job id
        """
        doc = await self.get_document(doc_id)
        path = await self._existing_file(doc)
        job_id = await self.ocr_queue.add_job(doc["id"], str(path), doc["mime_type"])
        logger.info(f"Document {doc_id} queued for reprocessing (job {job_id})")
        return job_id
