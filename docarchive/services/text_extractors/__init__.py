"""
Text Extractors Module - Modular media type handlers.

This module provides a plug-and-play architecture for text extraction
from uploaded files using the Strategy pattern.

To add support for a new media type:
1. Create a new extractor class inheriting from BaseTextExtractor
2. Implement supports() and extract()
3. Register it in TextExtractorFactory
"""
from .base import BaseTextExtractor, TextExtractionError
from .factory import TextExtractorFactory
from .image_extractor import ImageOCRExtractor, clean_ocr_text
from .docx_extractor import DOCXExtractor, UNSUPPORTED_OFFICE_TEXT
from .pdf_extractor import PDFExtractor, PDF_PLACEHOLDER_TEXT

__all__ = [
    "BaseTextExtractor",
    "TextExtractionError",
    "TextExtractorFactory",
    "ImageOCRExtractor",
    "DOCXExtractor",
    "PDFExtractor",
    "clean_ocr_text",
    "UNSUPPORTED_OFFICE_TEXT",
    "PDF_PLACEHOLDER_TEXT",
]
