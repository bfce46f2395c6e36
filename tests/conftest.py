import io
import json

import pytest
from docx import Document as DocxDocument
from fastapi.testclient import TestClient
from PIL import Image

from docarchive.main import create_app
from docarchive.services.text_extraction_service import TextExtractionService

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PNG_MIME = "image/png"
PDF_MIME = "application/pdf"


class StubExtractionService(TextExtractionService):
    """
    Real extraction for Word files; canned text for images and PDFs so the
    tests do not need a Tesseract binary.
    """

    def __init__(self, quick_text="", advanced_text="Texto reconhecido pelo OCR avançado"):
        self.quick_text = quick_text
        self.advanced_text = advanced_text
        self.advanced_calls = []

    def extract_quick(self, file_path, mime_type):
        if mime_type.startswith("image/") or mime_type == PDF_MIME:
            return self.quick_text
        return super().extract_quick(file_path, mime_type)

    def extract_advanced(self, file_path, mime_type):
        self.advanced_calls.append(str(file_path))
        return self.advanced_text


def make_docx_bytes(*paragraphs):
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def make_png_bytes(size=(40, 20)):
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, format="PNG")
    return buffer.getvalue()


def upload(client, files, **metadata):
    """POST files (list of (name, bytes, mime)) with the given metadata."""
    metadata.setdefault("title", "Contract A")
    metadata.setdefault("category", "contrato")
    return client.post(
        "/api/documents",
        files=[("files", (name, data, mime)) for name, data, mime in files],
        data={"metadata": json.dumps(metadata)},
    )


@pytest.fixture
def extraction_service():
    return StubExtractionService()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def app(upload_dir, extraction_service):
    return create_app(
        database_type="memory",
        upload_dir=upload_dir,
        rate_limit_enabled=False,
        extraction_service=extraction_service,
        cleanup_interval_seconds=0,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
