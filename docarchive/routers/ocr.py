"""
OCR Router - Exposes the background OCR queue.

Example Usage:
    GET /ocr/status - Queue summary counts
    GET /ocr/job/{job_id} - Single job record
"""
from fastapi import APIRouter, Depends

from ..api.exceptions import JobNotFoundError
from ..models.ocr_job import OCRJobMetadata, OCRQueueStatus
from ..services.ocr_queue import OCRQueue
from .dependencies import get_ocr_queue

router = APIRouter()


@router.get("/ocr/status", response_model=OCRQueueStatus)
async def get_queue_status(ocr_queue: OCRQueue = Depends(get_ocr_queue)):
    """Counts of retained jobs by status."""
    return ocr_queue.get_queue_status()


@router.get("/ocr/job/{job_id}", response_model=OCRJobMetadata)
async def get_job_status(job_id: str, ocr_queue: OCRQueue = Depends(get_ocr_queue)):
    """
    Get a job record.

    Finished jobs are purged after the retention window and then return 404.
    """
    job = ocr_queue.get_job_status(job_id)
    if job is None:
        raise JobNotFoundError()
    return job.to_dict()
