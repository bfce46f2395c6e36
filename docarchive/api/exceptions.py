"""
Custom exceptions for API layer.
Separates business exceptions from HTTP exceptions.
"""
from fastapi import HTTPException, status


class DocumentNotFoundError(Exception):
    """Raised when document is not found."""

    def __init__(self, message: str = "Document not found"):
        super().__init__(message)


class StoredFileNotFoundError(Exception):
    """Raised when a document row exists but its file is gone from disk."""

    def __init__(self, message: str = "File not found on disk"):
        super().__init__(message)


class JobNotFoundError(Exception):
    """Raised when an OCR job is unknown or already purged."""

    def __init__(self, message: str = "Job not found"):
        super().__init__(message)


class NoFilesUploadedError(Exception):
    """Raised when an upload request carries no files."""

    def __init__(self, message: str = "No files uploaded"):
        super().__init__(message)


class InvalidMetadataError(Exception):
    """Raised when upload or update metadata fails validation."""
    pass


class InvalidSearchParameterError(Exception):
    """Raised when a search date bound or sort option cannot be used."""
    pass


class UnsupportedFileTypeError(Exception):
    """Raised when an uploaded file has a media type we do not accept."""
    pass


class FileTooLargeError(Exception):
    """Raised when an uploaded file exceeds the size limit."""
    pass


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, (DocumentNotFoundError, StoredFileNotFoundError, JobNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, (
        NoFilesUploadedError, InvalidMetadataError, InvalidSearchParameterError, UnsupportedFileTypeError
    )):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, FileTooLargeError):
        return HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


BUSINESS_EXCEPTIONS = (
    DocumentNotFoundError,
    StoredFileNotFoundError,
    JobNotFoundError,
    NoFilesUploadedError,
    InvalidMetadataError,
    InvalidSearchParameterError,
    UnsupportedFileTypeError,
    FileTooLargeError,
)
