import asyncio
import threading
from datetime import datetime, timedelta

import pytest

from docarchive.services.database import MemoryAdapter
from docarchive.services.ocr_queue import InvalidJobTransitionError, OCRJob, OCRJobStatus, OCRQueue
from docarchive.services.text_extractors import TextExtractionError


class FakeExtractor:
    """Returns canned text; paths listed in `failing` raise."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.active = 0
        self.max_active = 0
        self.calls = []
        self._lock = threading.Lock()

    def extract_advanced(self, file_path, mime_type):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.calls.append(file_path)
            if file_path in self.failing:
                raise TextExtractionError(f"cannot read {file_path}")
            return f"texto de {file_path}"
        finally:
            with self._lock:
                self.active -= 1


async def make_documents(db, count):
    ids = []
    for i in range(count):
        doc = await db.create_document({
            "title": f"Doc {i}",
            "category": "teste",
            "file_name": f"{i}.png",
            "original_name": f"{i}.png",
            "mime_type": "image/png",
            "file_size": 10,
            "file_path": f"/files/{i}.png",
            "extracted_text": "rápido",
            "ocr_processed": False,
        })
        ids.append(doc["id"])
    return ids


def test_job_status_only_moves_forward():
    job = OCRJob(id="1-1", document_id=1, file_path="/x.png", mime_type="image/png")
    assert job.status == OCRJobStatus.PENDING

    job.mark_processing()
    with pytest.raises(InvalidJobTransitionError):
        job.mark_processing()

    job.mark_completed()
    assert job.processed_at is not None
    with pytest.raises(InvalidJobTransitionError):
        job.mark_failed("late failure")
    assert job.status == OCRJobStatus.COMPLETED


def test_pending_job_cannot_complete_directly():
    job = OCRJob(id="1-1", document_id=1, file_path="/x.png", mime_type="image/png")
    with pytest.raises(InvalidJobTransitionError):
        job.mark_completed()
    with pytest.raises(InvalidJobTransitionError):
        job.mark_failed("boom")
    assert job.status == OCRJobStatus.PENDING
    assert job.processed_at is None and job.error is None

    job.mark_processing()
    job.mark_failed("boom")
    assert job.status == OCRJobStatus.FAILED
    assert job.error == "boom"
    with pytest.raises(InvalidJobTransitionError):
        job.mark_processing()


def test_enqueued_jobs_are_processed_one_at_a_time():
    async def scenario():
        db = MemoryAdapter()
        await db.initialize()
        ids = await make_documents(db, 5)
        extractor = FakeExtractor()
        queue = OCRQueue(db, extractor)

        job_ids = [await queue.add_job(doc_id, f"/files/{doc_id - 1}.png", "image/png") for doc_id in ids]
        assert queue.is_processing

        status = await queue.wait_until_idle(timeout=5)
        return db, queue, extractor, ids, job_ids, status

    db, queue, extractor, ids, job_ids, status = asyncio.run(scenario())

    assert len(set(job_ids)) == 5
    assert status == {"total": 5, "pending": 0, "processing": 0, "completed": 5, "failed": 0}
    assert extractor.max_active == 1
    # Insertion order
    assert extractor.calls == [f"/files/{i}.png" for i in range(5)]
    assert not queue.is_processing

    doc = asyncio.run(db.get_document(ids[2]))
    assert doc["ocr_processed"] is True
    assert doc["extracted_text"] == "texto de /files/2.png"


def test_failed_job_leaves_document_unchanged():
    async def scenario():
        db = MemoryAdapter()
        await db.initialize()
        ids = await make_documents(db, 2)
        queue = OCRQueue(db, FakeExtractor(failing={"/files/0.png"}))

        bad = await queue.add_job(ids[0], "/files/0.png", "image/png")
        good = await queue.add_job(ids[1], "/files/1.png", "image/png")
        await queue.wait_until_idle(timeout=5)
        return queue, bad, good, await db.get_document(ids[0]), await db.get_document(ids[1])

    queue, bad, good, failed_doc, ok_doc = asyncio.run(scenario())

    failed_job = queue.get_job_status(bad)
    assert failed_job.status == OCRJobStatus.FAILED
    assert "cannot read" in failed_job.error
    assert failed_job.processed_at is not None
    assert failed_doc["ocr_processed"] is False
    assert failed_doc["extracted_text"] == "rápido"

    assert queue.get_job_status(good).status == OCRJobStatus.COMPLETED
    assert ok_doc["ocr_processed"] is True


def test_job_for_deleted_document_fails():
    async def scenario():
        db = MemoryAdapter()
        await db.initialize()
        queue = OCRQueue(db, FakeExtractor())
        job_id = await queue.add_job(99, "/files/99.png", "image/png")
        await queue.wait_until_idle(timeout=5)
        return queue.get_job_status(job_id)

    job = asyncio.run(scenario())
    assert job.status == OCRJobStatus.FAILED
    assert "not found" in job.error


def test_job_ids_are_unique_for_same_document():
    async def scenario():
        db = MemoryAdapter()
        await db.initialize()
        ids = await make_documents(db, 1)
        queue = OCRQueue(db, FakeExtractor())
        first = await queue.add_job(ids[0], "/files/0.png", "image/png")
        second = await queue.add_job(ids[0], "/files/0.png", "image/png")
        await queue.wait_until_idle(timeout=5)
        return first, second

    first, second = asyncio.run(scenario())
    assert first != second
    assert first.startswith("1-") and second.startswith("1-")


def test_purge_expired_removes_only_old_finished_jobs():
    queue = OCRQueue(db_service=None, extraction_service=None, retention_seconds=3600)
    now = datetime.now()

    old = OCRJob(id="1-1", document_id=1, file_path="/a", mime_type="image/png")
    old.mark_processing()
    old.mark_completed()
    old.processed_at = now - timedelta(hours=2)

    recent = OCRJob(id="2-1", document_id=2, file_path="/b", mime_type="image/png")
    recent.mark_processing()
    recent.mark_failed("boom")
    recent.processed_at = now - timedelta(minutes=5)

    pending = OCRJob(id="3-1", document_id=3, file_path="/c", mime_type="image/png")
    pending.created_at = now - timedelta(hours=5)

    queue.jobs = [old, recent, pending]

    assert queue.purge_expired(now=now) == 1
    assert queue.get_job_status("1-1") is None
    assert queue.get_job_status("2-1") is recent
    assert queue.get_job_status("3-1") is pending
    assert queue.get_queue_status() == {"total": 2, "pending": 1, "processing": 0, "completed": 0, "failed": 1}


def test_stop_cancels_cleanup_and_drains():
    async def scenario():
        db = MemoryAdapter()
        await db.initialize()
        ids = await make_documents(db, 2)
        queue = OCRQueue(db, FakeExtractor(), cleanup_interval_seconds=60)
        queue.start_cleanup()
        for doc_id in ids:
            await queue.add_job(doc_id, f"/files/{doc_id - 1}.png", "image/png")
        await queue.stop(timeout=5)
        return queue

    queue = asyncio.run(scenario())
    assert queue._cleanup_task is None
    assert queue.get_queue_status()["completed"] == 2
