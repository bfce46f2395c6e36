"""
Base Text Extractor Interface.

All text extractors must inherit from this base class and implement
the extract() method.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class TextExtractionError(Exception):
    """Raised when a file cannot be turned into text."""
    pass


class BaseTextExtractor(ABC):
    """
    Abstract base class for text extractors.

    Each family of media types has its own extractor class that inherits
    from this base class and implements supports() and extract().
    """

    def __init__(self, format_name: str):
        """
        Initialize the extractor.

        Args:
            format_name: Human-readable format name (e.g., 'PDF', 'Image')
        """
        self.format_name = format_name

    @abstractmethod
    def supports(self, mime_type: str) -> bool:
        """Return True if this extractor handles the media type."""
        pass

    @abstractmethod
    def extract(self, file_path: Path, advanced: bool = False) -> str:
        """
        Extract text from a stored file.

        Args:
            file_path: Path of the file on disk
            advanced: Run the slower, more thorough pass (background queue)

        Returns:
            Extracted text content

        Raises:
            TextExtractionError: If extraction fails
        """
        pass
