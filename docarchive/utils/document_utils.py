"""
Document utility functions for metadata normalization and validation.
Shared by the upload service, the document service and both database adapters.
"""
import time
from pathlib import Path
from typing import Dict, Any, Optional, Union
from datetime import date, datetime, timezone
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Columns a caller may change through update_document
UPDATABLE_FIELDS = {
    "title",
    "description",
    "subject",
    "category",
    "department",
    "tags",
    "document_date",
    "file_name",
    "original_name",
    "mime_type",
    "file_size",
    "file_path",
    "extracted_text",
    "ocr_processed",
}


def parse_document_date(value: Union[None, str, date, datetime]) -> Optional[datetime]:
    """
    Parse a document date into a naive datetime.

    Accepts date-only strings ("2024-03-15", parsed to midnight), full ISO
    timestamps (a trailing "Z" is accepted; aware values are converted to UTC
    and made naive), ``date`` and ``datetime`` objects. Empty values become None.

    Raises:
        ValueError: If the string is not a recognisable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    else:
        text = str(value).strip()
        if not text:
            return None
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), datetime.min.time())
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_optional_text(value: Optional[str]) -> Optional[str]:
    """Trim whitespace and use None for empty strings."""
    if value is not None and str(value).strip():
        return str(value).strip()
    return None


def prepare_document_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Filter a partial update down to updatable columns.

    Unknown keys and the immutable id/created_at/updated_at are dropped, and a
    string document_date is parsed into a datetime.
    """
    prepared = {}
    for key, value in updates.items():
        if key not in UPDATABLE_FIELDS:
            logger.debug(f"Ignoring non-updatable field '{key}'")
            continue
        if key == "document_date":
            value = parse_document_date(value)
        prepared[key] = value
    return prepared


def build_stored_filename(original_name: str, upload_dir: Path) -> str:
    """
    Build the on-disk name for an upload: "<epoch-ms>-<basename>".

    The millisecond prefix is bumped until the name is free so stored
    filenames stay unique even for simultaneous uploads of the same file.
    """
    basename = Path(original_name.replace("\\", "/")).name or "upload"
    stamp = int(time.time() * 1000)
    candidate = f"{stamp}-{basename}"
    while (upload_dir / candidate).exists():
        stamp += 1
        candidate = f"{stamp}-{basename}"
    return candidate


def create_document_record(
    metadata: Dict[str, Any],
    file_name: str,
    original_name: str,
    mime_type: str,
    file_size: int,
    file_path: str,
    extracted_text: Optional[str],
) -> Dict[str, Any]:
    """
    Create standardized document dictionary for the database adapters.

    Args:
        metadata: Validated user metadata (title, category, ...)
        file_name: Stored (unique) filename
        original_name: Filename as uploaded
        mime_type: Media type as declared by the client
        file_size: Size in bytes
        file_path: Absolute path of the stored file
        extracted_text: Result of the quick extraction pass

    Returns:
        Document dictionary without id/timestamps (set by the adapter)
    """
    return {
        "title": metadata["title"],
        "description": metadata.get("description"),
        "subject": metadata.get("subject"),
        "category": metadata["category"],
        "department": metadata.get("department"),
        "tags": list(metadata.get("tags") or []),
        "document_date": parse_document_date(metadata.get("document_date")),
        "file_name": file_name,
        "original_name": original_name,
        "mime_type": mime_type,
        "file_size": file_size,
        "file_path": file_path,
        "extracted_text": extracted_text,
        "ocr_processed": False,
    }
