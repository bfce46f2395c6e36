"""
Upload Service - Handles document upload operations.

This service encapsulates all upload-related business logic:
- Metadata and file validation (all checks run before anything is written)
- File storage coordination
- Quick text extraction at upload time
- Database record creation
- Scheduling the advanced OCR pass for images and scanned PDFs

Example Usage:
    service = UploadService(storage, db_service, extraction_service, ocr_queue)
    documents = await service.upload_documents(files, metadata_json)
"""
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from pydantic import ValidationError

from .database.base import DatabaseInterface
from .storage.base import FileStorageInterface
from .text_extraction_service import TextExtractionService
from .ocr_queue import OCRQueue
from ..api.exceptions import (
    FileTooLargeError,
    InvalidMetadataError,
    NoFilesUploadedError,
    UnsupportedFileTypeError,
)
from ..models.document import UploadMetadata
from ..utils.document_utils import create_document_record
from ..core.config import ALLOWED_MIME_TYPES, MAX_UPLOAD_SIZE, OCR_QUEUE_MIN_TEXT_LENGTH
from ..core.logging_config import get_logger

logger = get_logger(__name__)


def needs_advanced_ocr(mime_type: str, quick_text: str, min_length: int = OCR_QUEUE_MIN_TEXT_LENGTH) -> bool:
    """Images and PDFs whose quick pass found little text get an advanced pass."""
    if not (mime_type.startswith("image/") or mime_type == "application/pdf"):
        return False
    return len((quick_text or "").strip()) < min_length


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into "field: message; field: message"."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "metadata"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class UploadService:
    """
    Service for handling document uploads.

    Attributes:
        storage: File storage adapter for the uploaded bytes
        db_service: Database adapter for document rows
        extraction_service: Runs the quick extraction pass
        ocr_queue: Receives jobs for the advanced pass
    """

    def __init__(
        self,
        storage: FileStorageInterface,
        db_service: DatabaseInterface,
        extraction_service: TextExtractionService,
        ocr_queue: OCRQueue,
        allowed_mime_types: Optional[List[str]] = None,
        max_upload_size: int = MAX_UPLOAD_SIZE
    ):
        self.storage = storage
        self.db_service = db_service
        self.extraction_service = extraction_service
        self.ocr_queue = ocr_queue
        self.allowed_mime_types = set(allowed_mime_types or ALLOWED_MIME_TYPES)
        self.max_upload_size = max_upload_size

    @staticmethod
    def parse_metadata(metadata_json: Optional[str]) -> Dict[str, Any]:
        """
        Parse and validate the metadata JSON string sent with an upload.

        Raises:
            InvalidMetadataError: If the JSON is malformed or fails validation
        """
        if not metadata_json:
            raise InvalidMetadataError("Metadata is required")
        try:
            raw = json.loads(metadata_json)
        except json.JSONDecodeError as e:
            raise InvalidMetadataError(f"Invalid metadata JSON: {e.msg}") from e
        if not isinstance(raw, dict):
            raise InvalidMetadataError("Metadata must be a JSON object")

        try:
            metadata = UploadMetadata.model_validate(raw)
        except ValidationError as e:
            raise InvalidMetadataError(format_validation_error(e)) from e
        except ValueError as e:
            raise InvalidMetadataError(str(e)) from e
        return metadata.model_dump()

    @staticmethod
    def _file_size(file: UploadFile) -> int:
        if file.size is not None:
            return file.size
        file.file.seek(0, 2)
        size = file.file.tell()
        file.file.seek(0)
        return size

    def validate_files(self, files: List[UploadFile]) -> List[int]:
        """
        Check media type and size of every file.

        Returns:
            File sizes in bytes, in the order of ``files``

        Raises:
            NoFilesUploadedError: If the list is empty
            UnsupportedFileTypeError: If a media type is not accepted
            FileTooLargeError: If a file exceeds the size limit
        """
        if not files:
            raise NoFilesUploadedError()

        sizes = []
        for file in files:
            mime_type = file.content_type or ""
            if mime_type not in self.allowed_mime_types:
                raise UnsupportedFileTypeError(
                    f"File type not supported: {file.filename} ({mime_type or 'unknown'})"
                )
            size = self._file_size(file)
            if size > self.max_upload_size:
                raise FileTooLargeError(
                    f"File too large: {file.filename} "
                    f"({size} bytes, limit {self.max_upload_size} bytes)"
                )
            sizes.append(size)
        return sizes

    async def upload_documents(self, files: List[UploadFile], metadata_json: Optional[str]) -> List[Dict[str, Any]]:
        """
        Store every file as a document sharing the same metadata.

        Args:
            files: Uploaded files
            metadata_json: JSON object with title, category and optional fields

        Returns:
            Created document records, in upload order
        """
        if not files:
            raise NoFilesUploadedError()
        metadata = self.parse_metadata(metadata_json)
        sizes = self.validate_files(files)

        documents = []
        for file, size in zip(files, sizes):
            documents.append(await self._store_file(file, size, metadata))

        logger.info(f"Uploaded {len(documents)} documents ('{metadata['title']}')")
        return documents

    async def _store_file(self, file: UploadFile, size: int, metadata: Dict[str, Any]) -> Dict[str, Any]:
        original_name = Path((file.filename or "upload").replace("\\", "/")).name or "upload"
        mime_type = file.content_type

        file_name = self.storage.build_file_name(original_name)
        file_path = await self.storage.save_file(file.file, file_name)
        logger.debug(f"Saved {original_name} as {file_name}")

        loop = asyncio.get_event_loop()
        extracted_text = await loop.run_in_executor(
            None, self.extraction_service.extract_quick, file_path, mime_type
        )

        doc_data = create_document_record(
            metadata,
            file_name=file_name,
            original_name=original_name,
            mime_type=mime_type,
            file_size=size,
            file_path=file_path,
            extracted_text=extracted_text,
        )
        document = await self.db_service.create_document(doc_data)

        if needs_advanced_ocr(mime_type, extracted_text):
            job_id = await self.ocr_queue.add_job(document["id"], file_path, mime_type)
            logger.info(f"Queued advanced OCR for document {document['id']} (job {job_id})")

        return document
