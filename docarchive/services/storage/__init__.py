"""
File Storage abstraction layer.
Uploaded documents are kept on the local filesystem.
"""
from .base import FileStorageInterface
from .local_storage import LocalFileStorage

__all__ = [
    "FileStorageInterface",
    "LocalFileStorage",
]
