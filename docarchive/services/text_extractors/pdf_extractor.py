"""
PDF Text Extractor.

Extracts the text layer of PDF files using pypdf. Scanned PDFs without a
text layer yield a fixed placeholder.
"""
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .base import BaseTextExtractor, TextExtractionError
from ...core.logging_config import get_logger

logger = get_logger(__name__)

PDF_PLACEHOLDER_TEXT = "PDF processado - extração avançada de texto em desenvolvimento"


class PDFExtractor(BaseTextExtractor):
    """Extractor for PDF files."""

    def __init__(self):
        super().__init__("PDF")

    def supports(self, mime_type: str) -> bool:
        return mime_type == "application/pdf"

    def extract(self, file_path: Path, advanced: bool = False) -> str:
        """
        Extract text from PDF file.

        Raises:
            TextExtractionError: If the PDF cannot be read
        """
        try:
            reader = PdfReader(str(file_path))
            pages = []
            for page in reader.pages:
                page_text = page.extract_text()
                if page_text and page_text.strip():
                    pages.append(page_text.strip())
        except (OSError, PyPdfError) as e:
            raise TextExtractionError(f"Error extracting text from PDF: {e}") from e

        if not pages:
            logger.info(f"No text layer found in {file_path.name}")
            return PDF_PLACEHOLDER_TEXT

        return "\n".join(pages)
