"""
Documents Router - Handles document CRUD operations.

This router is responsible for:
- Retrieving, editing and deleting single documents
- Downloading the stored file
- Re-queuing a document for the advanced OCR pass

Architecture:
- Router handles HTTP request/response only
- Business logic delegated to DocumentService
- Business exceptions are mapped to status codes by the gateway

Example Usage:
    GET /documents/{doc_id} - Get specific document
    PATCH /documents/{doc_id} - Update metadata
    DELETE /documents/{doc_id} - Delete document and file
    GET /documents/{doc_id}/download - Download stored file
    POST /documents/{doc_id}/reprocess - Queue advanced OCR again
"""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ..models.document import DocumentMetadata, DocumentUpdate, MessageResponse, ReprocessResponse
from ..services.document_service import DocumentService
from .dependencies import get_document_service
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/documents/{doc_id}", response_model=DocumentMetadata)
async def get_document(doc_id: int, document_service: DocumentService = Depends(get_document_service)):
    """
    Get a single document by its ID.

    Raises:
        404 if document not found
    """
    return await document_service.get_document(doc_id)


@router.patch("/documents/{doc_id}", response_model=DocumentMetadata)
async def update_document(
    doc_id: int,
    updates: DocumentUpdate,
    document_service: DocumentService = Depends(get_document_service)
):
    """
    Update document metadata.

    Only fields present in the body are changed; documentDate accepts
    "YYYY-MM-DD" or an ISO timestamp.

    Example Request:
        PATCH /documents/3
        {"title": "Contrato revisado", "department": "Jurídico"}
    """
    changes = updates.model_dump(exclude_unset=True)
    return await document_service.update_document(doc_id, changes)


@router.delete("/documents/{doc_id}", response_model=MessageResponse)
async def delete_document(doc_id: int, document_service: DocumentService = Depends(get_document_service)):
    """
    Delete a document and its stored file.

    Note:
        This operation cannot be undone.
    """
    await document_service.delete_document(doc_id)
    return {"message": "Document deleted successfully"}


@router.get("/documents/{doc_id}/download")
async def download_document(doc_id: int, document_service: DocumentService = Depends(get_document_service)):
    """Download the stored file under its original name."""
    download = await document_service.get_download(doc_id)
    return FileResponse(
        download["path"],
        media_type=download["mime_type"],
        filename=download["original_name"],
    )


@router.post("/documents/{doc_id}/reprocess", response_model=ReprocessResponse, response_model_by_alias=True)
async def reprocess_document(doc_id: int, document_service: DocumentService = Depends(get_document_service)):
    """
    Queue the document for the advanced OCR pass again.

    Example Response:
        {"message": "Document queued for reprocessing", "jobId": "3-1718000000000"}
    """
    job_id = await document_service.reprocess_document(doc_id)
    return ReprocessResponse(message="Document queued for reprocessing", job_id=job_id)
