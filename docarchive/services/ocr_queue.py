"""
OCR Queue - background advanced text extraction.

A single worker drains pending jobs one at a time in insertion order and
writes the result back to the document. Jobs live in memory only: a restart
loses them, and finished jobs are purged after the retention window.
"""
import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from .database.base import DatabaseInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class OCRJobStatus(Enum):
    """OCR job status. Values are ordered: a job only moves forward."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_STATUS_RANK = {
    OCRJobStatus.PENDING: 0,
    OCRJobStatus.PROCESSING: 1,
    OCRJobStatus.COMPLETED: 2,
    OCRJobStatus.FAILED: 2,
}


class InvalidJobTransitionError(Exception):
    """Raised when a job would move backwards or leave a final state."""
    pass


@dataclass
class OCRJob:
    """Represents a single advanced-extraction job."""
    id: str
    document_id: int
    file_path: str
    mime_type: str
    status: OCRJobStatus = OCRJobStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    processed_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (OCRJobStatus.COMPLETED, OCRJobStatus.FAILED)

    def _advance(self, new_status: OCRJobStatus):
        if self.is_finished or _STATUS_RANK[new_status] <= _STATUS_RANK[self.status]:
            raise InvalidJobTransitionError(
                f"Job {self.id} cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def mark_processing(self):
        self._advance(OCRJobStatus.PROCESSING)

    def _finish(self, new_status: OCRJobStatus):
        if self.status != OCRJobStatus.PROCESSING:
            raise InvalidJobTransitionError(
                f"Job {self.id} must be processing before it can be {new_status.value}"
            )
        self._advance(new_status)

    def mark_completed(self):
        self._finish(OCRJobStatus.COMPLETED)
        self.processed_at = datetime.now()

    def mark_failed(self, error: str):
        self._finish(OCRJobStatus.FAILED)
        self.error = error
        self.processed_at = datetime.now()

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "file_path": self.file_path,
            "mime_type": self.mime_type,
            "status": self.status.value,
            "created_at": self.created_at,
            "processed_at": self.processed_at,
            "error": self.error,
        }


class OCRQueue:
    """
    Single-consumer queue for the advanced OCR pass.

    add_job() starts the worker when it is idle; the worker then runs until
    no pending job is left. Only one job is ever processing at a time.
    """

    def __init__(
        self,
        db_service: DatabaseInterface,
        extraction_service,
        retention_seconds: int = 3600,
        cleanup_interval_seconds: Optional[int] = None
    ):
        """
        Initialize OCR queue.

        Args:
            db_service: Database adapter that receives the extracted text
            extraction_service: Object with extract_advanced(file_path, mime_type)
            retention_seconds: How long finished jobs stay queryable
            cleanup_interval_seconds: Period of the background purge sweep
                                      (None disables the sweep)
        """
        self.db_service = db_service
        self.extraction_service = extraction_service
        self.retention = timedelta(seconds=retention_seconds)
        self.cleanup_interval_seconds = cleanup_interval_seconds

        # Insertion-ordered job list
        self.jobs: List[OCRJob] = []

        self.is_processing = False
        self._worker: Optional[asyncio.Task] = None
        self._cleanup_task: Optional[asyncio.Task] = None

    def _new_job_id(self, document_id: int) -> str:
        stamp = int(time.time() * 1000)
        existing = {job.id for job in self.jobs}
        while f"{document_id}-{stamp}" in existing:
            stamp += 1
        return f"{document_id}-{stamp}"

    async def add_job(self, document_id: int, file_path: str, mime_type: str) -> str:
        """
        Add a job to the queue and start the worker if it is idle.

        Returns:
            The new job id ("<document id>-<epoch ms>")
        """
        job = OCRJob(
            id=self._new_job_id(document_id),
            document_id=document_id,
            file_path=str(file_path),
            mime_type=mime_type,
        )
        self.jobs.append(job)
        logger.info(f"Added OCR job {job.id} to queue (document {document_id})")

        if not self.is_processing:
            # Flip the guard before the task exists so a second add_job
            # cannot start another worker
            self.is_processing = True
            self._worker = asyncio.create_task(self._process_queue())

        return job.id

    def _next_pending(self) -> Optional[OCRJob]:
        return next((job for job in self.jobs if job.status == OCRJobStatus.PENDING), None)

    async def _process_queue(self):
        """Worker loop: drain pending jobs one at a time."""
        logger.info("Starting OCR queue processing...")
        try:
            while True:
                job = self._next_pending()
                if job is None:
                    break
                await self._process_job(job)
            self.purge_expired()
        finally:
            self.is_processing = False
            logger.info("OCR queue processing completed")

    async def _process_job(self, job: OCRJob):
        """Run one job; errors are recorded on the job and never escape."""
        logger.info(f"Processing OCR job {job.id}")
        job.mark_processing()

        try:
            loop = asyncio.get_event_loop()
            extracted_text = await loop.run_in_executor(
                None,
                self.extraction_service.extract_advanced,
                job.file_path,
                job.mime_type,
            )

            updated = await self.db_service.update_document(
                job.document_id,
                {"extracted_text": extracted_text, "ocr_processed": True},
            )
            if updated is None:
                raise LookupError(f"Document {job.document_id} not found")

            job.mark_completed()
            logger.info(f"Completed OCR job {job.id} ({len(extracted_text)} characters)")

        except Exception as e:
            job.mark_failed(str(e) or type(e).__name__)
            logger.error(f"Failed OCR job {job.id}: {job.error}", exc_info=True)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """
        Drop completed/failed jobs finished more than the retention window ago.

        Returns:
            Number of jobs removed
        """
        cutoff = (now or datetime.now()) - self.retention
        before = len(self.jobs)
        self.jobs = [
            job for job in self.jobs
            if not job.is_finished or (job.processed_at is not None and job.processed_at > cutoff)
        ]
        removed = before - len(self.jobs)
        if removed:
            logger.info(f"Purged {removed} finished OCR jobs")
        return removed

    async def _cleanup_loop(self):
        while True:
            await asyncio.sleep(self.cleanup_interval_seconds)
            self.purge_expired()

    def start_cleanup(self):
        """Start the periodic purge sweep (requires a running event loop)."""
        if self.cleanup_interval_seconds and self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.debug(f"OCR job cleanup every {self.cleanup_interval_seconds}s")

    def get_queue_status(self) -> Dict[str, int]:
        """Counts of retained jobs by status."""
        counts = {status.value: 0 for status in OCRJobStatus}
        for job in self.jobs:
            counts[job.status.value] += 1
        return {"total": len(self.jobs), **counts}

    def get_job_status(self, job_id: str) -> Optional[OCRJob]:
        """Get job by ID (None once purged or unknown)."""
        return next((job for job in self.jobs if job.id == job_id), None)

    async def wait_until_idle(self, timeout: Optional[float] = None) -> Dict[str, int]:
        """
        Wait for the worker to drain the queue.

        Args:
            timeout: Maximum time to wait in seconds (None = no timeout)

        Returns:
            Queue status after waiting
        """
        start_time = time.monotonic()
        while self.is_processing:
            if timeout is not None and (time.monotonic() - start_time) > timeout:
                break
            await asyncio.sleep(0.05)
        return self.get_queue_status()

    async def stop(self, timeout: Optional[float] = None):
        """Stop the cleanup sweep and let the worker finish its pending jobs."""
        pending = self.get_queue_status()["pending"]
        logger.info(f"Stopping OCR queue ({pending} pending jobs)")

        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            await asyncio.gather(self._cleanup_task, return_exceptions=True)
            self._cleanup_task = None

        await self.wait_until_idle(timeout=timeout)
        logger.info("OCR queue stopped")
