"""
Word Text Extractor.

Extracts raw text from Word documents using python-docx. Legacy binary
.doc files cannot be parsed and yield a fixed sentinel instead.
"""
from pathlib import Path

from docx import Document as DocxDocument

from .base import BaseTextExtractor
from ...core.logging_config import get_logger

logger = get_logger(__name__)

WORD_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}

UNSUPPORTED_OFFICE_TEXT = "Documento Office - formato não suportado para extração automática"


class DOCXExtractor(BaseTextExtractor):
    """Extractor for Word documents (DOCX, with DOC falling back to a sentinel)."""

    def __init__(self):
        super().__init__("Word")

    def supports(self, mime_type: str) -> bool:
        return mime_type in WORD_MIME_TYPES

    def extract(self, file_path: Path, advanced: bool = False) -> str:
        """
        Extract raw text from a Word file.

        Returns UNSUPPORTED_OFFICE_TEXT instead of raising when the file
        cannot be parsed (e.g. legacy .doc).
        """
        try:
            doc = DocxDocument(str(file_path))
        except Exception as e:
            logger.info(f"python-docx could not open {file_path.name}, document may be older format: {e}")
            return UNSUPPORTED_OFFICE_TEXT

        lines = []
        for paragraph in doc.paragraphs:
            if paragraph.text.strip():
                lines.append(paragraph.text)

        for table in doc.tables:
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    lines.append(" | ".join(row_text))

        return "\n".join(lines)
