"""
Text Extractor Factory.

Manages registration and retrieval of text extractors for different media types.
Uses the Factory pattern to provide plug-and-play text extraction.
"""
from typing import List, Optional
from .base import BaseTextExtractor
from .image_extractor import ImageOCRExtractor
from .docx_extractor import DOCXExtractor
from .pdf_extractor import PDFExtractor
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class TextExtractorFactory:
    """
    Factory for managing text extractors.

    Extractors are checked in registration order; the first one whose
    supports() accepts the media type wins.
    """

    _extractors: List[BaseTextExtractor] = []
    _initialized = False

    @classmethod
    def _initialize(cls):
        """Initialize default extractors."""
        if cls._initialized:
            return

        from ...core.config import OCR_LANGUAGES, OCR_MAX_IMAGE_DIMENSION, TESSERACT_CMD

        cls.register(
            ImageOCRExtractor(
                languages=OCR_LANGUAGES,
                max_dimension=OCR_MAX_IMAGE_DIMENSION,
                tesseract_cmd=TESSERACT_CMD,
            ),
            skip_init=True,
        )
        cls.register(DOCXExtractor(), skip_init=True)
        cls.register(PDFExtractor(), skip_init=True)

        cls._initialized = True
        logger.info(f"TextExtractorFactory initialized with {len(cls._extractors)} extractors")

    @classmethod
    def register(cls, extractor: BaseTextExtractor, skip_init: bool = False):
        """
        Register a text extractor.

        Args:
            extractor: Text extractor instance to register
            skip_init: If True, skip initialization check (used internally)
        """
        if not skip_init:
            cls._initialize()
        cls._extractors.append(extractor)
        logger.debug(f"Registered extractor: {extractor.format_name}")

    @classmethod
    def get_extractor(cls, mime_type: str) -> Optional[BaseTextExtractor]:
        """
        Get extractor for a media type.

        Returns:
            Text extractor instance or None if the type has no extractor
        """
        cls._initialize()
        for extractor in cls._extractors:
            if extractor.supports(mime_type):
                return extractor
        return None

    @classmethod
    def get_supported_formats(cls) -> list:
        cls._initialize()
        return sorted(extractor.format_name for extractor in cls._extractors)
