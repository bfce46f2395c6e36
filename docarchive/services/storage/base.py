"""
Abstract base class for file storage adapters.
All storage implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import BinaryIO


class FileStorageInterface(ABC):
    """
    Abstract interface for blob storage of uploaded documents.
    Paths returned by save_file are what the database stores as file_path.
    """

    @abstractmethod
    async def save_file(self, file: BinaryIO, file_name: str) -> str:
        """
        Save an uploaded file to storage.

        Args:
            file: Readable binary file object (e.g. UploadFile.file)
            file_name: Unique stored filename

        Returns:
            Storage path where the file was saved
        """
        pass

    @abstractmethod
    async def delete_file(self, file_path: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if file was deleted, False if not found
        """
        pass

    @abstractmethod
    async def file_exists(self, file_path: str) -> bool:
        """Check if a file exists in storage."""
        pass

    @abstractmethod
    def build_file_name(self, original_name: str) -> str:
        """Return a unique stored filename for an upload."""
        pass

    @abstractmethod
    async def initialize(self):
        """Initialize storage (create directories, verify access, etc.)."""
        pass
