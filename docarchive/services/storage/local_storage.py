"""
Local filesystem storage adapter implementing FileStorageInterface.
Uploaded files live flat in one directory, named "<epoch-ms>-<original name>".
"""
import shutil
import asyncio
from pathlib import Path
from typing import BinaryIO

from .base import FileStorageInterface
from ...utils.document_utils import build_stored_filename
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class LocalFileStorage(FileStorageInterface):
    """Local filesystem storage adapter."""

    def __init__(self, base_dir: Path):
        """
        Initialize local file storage.

        Args:
            base_dir: Directory that receives uploaded files
        """
        self.base_dir = Path(base_dir)

    async def initialize(self):
        """Initialize storage - ensure base directory exists."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Upload directory: {self.base_dir}")

    def build_file_name(self, original_name: str) -> str:
        return build_stored_filename(original_name, self.base_dir)

    def _get_full_path(self, file_name: str) -> Path:
        # Only the final path component is kept to prevent directory traversal
        return self.base_dir / Path(file_name).name

    async def save_file(self, file: BinaryIO, file_name: str) -> str:
        """Save an uploaded file to local filesystem."""
        full_path = self._get_full_path(file_name)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        def _save():
            file.seek(0)
            with open(full_path, "wb") as buffer:
                shutil.copyfileobj(file, buffer)

        # Run in executor to avoid blocking
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, _save)

        return str(full_path)

    async def delete_file(self, file_path: str) -> bool:
        """Delete a file from local filesystem."""
        full_path = Path(file_path)

        if not full_path.exists():
            return False

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, full_path.unlink)
        return True

    async def file_exists(self, file_path: str) -> bool:
        """Check if a file exists in local filesystem."""
        return Path(file_path).is_file()
