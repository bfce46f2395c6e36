"""
Text Extraction Service - quick and advanced extraction passes.

The quick pass runs inside the upload request and never raises; the
advanced pass runs on the OCR queue and reports failures to it.
"""
from pathlib import Path
from typing import Union

from .text_extractors import TextExtractorFactory, TextExtractionError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

EXTRACTION_ERROR_PREFIX = "Erro na extração de texto"


class TextExtractionService:
    """Runs the registered extractors for a stored file."""

    def _extract(self, file_path: Path, mime_type: str, advanced: bool) -> str:
        extractor = TextExtractorFactory.get_extractor(mime_type)
        if extractor is None:
            logger.info(f"Unsupported file type for text extraction: {mime_type}")
            return ""

        text = extractor.extract(file_path, advanced=advanced)
        logger.info(
            f"Extracted {len(text)} characters from {file_path.name} "
            f"({extractor.format_name}, {'advanced' if advanced else 'quick'} pass)"
        )
        return text

    def extract_quick(self, file_path: Union[str, Path], mime_type: str) -> str:
        """
        Best-effort extraction used at upload time.

        Failures are turned into a descriptive placeholder so an upload is
        never blocked by a broken file.
        """
        file_path = Path(file_path)
        try:
            return self._extract(file_path, mime_type, advanced=False)
        except Exception as e:
            logger.error(f"Text extraction error for {file_path.name}: {e}", exc_info=True)
            return f"{EXTRACTION_ERROR_PREFIX}: {e}"

    def extract_advanced(self, file_path: Union[str, Path], mime_type: str) -> str:
        """
        Thorough extraction used by the OCR queue.

        Raises:
            TextExtractionError: If the file cannot be processed
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise TextExtractionError(f"File not found: {file_path}")
        try:
            return self._extract(file_path, mime_type, advanced=True)
        except TextExtractionError:
            raise
        except Exception as e:
            raise TextExtractionError(f"{type(e).__name__}: {e}") from e
