"""
Upload Router - Handles document upload.

Example Usage:
    POST /documents
    Content-Type: multipart/form-data
    files: contract.docx
    metadata: {"title": "Contract A", "category": "contrato"}
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..models.document import UploadResponse
from ..services.upload_service import UploadService
from .dependencies import get_upload_service
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/documents",
    response_model=UploadResponse,
    response_model_by_alias=True,
)
async def upload_documents(
    files: Optional[List[UploadFile]] = File(None),
    metadata: Optional[str] = Form(None),
    upload_service: UploadService = Depends(get_upload_service)
):
    """
    Upload one or more documents sharing the same metadata.

    Every file is validated (media type, size) and the metadata checked
    before anything is written, so a rejected request creates no document.
    Images and scanned PDFs are queued for the advanced OCR pass.

    Status Codes:
        200: Documents created
        400: No files, invalid metadata or unsupported file type
        413: File too large
    """
    documents = await upload_service.upload_documents(files or [], metadata)
    return {"documents": documents}
