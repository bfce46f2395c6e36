"""
In-memory adapter implementing DatabaseInterface.
Perfect for demos and testing - stores all data in memory using Python dicts.
Data is lost on restart (no persistence).
"""
from typing import List, Dict, Optional, Tuple
from datetime import datetime
import copy
import itertools

from .base import DatabaseInterface
from ...utils.document_utils import prepare_document_updates
from ...utils.search_utils import (
    SearchFilters,
    DEFAULT_SORT,
    calculate_offset,
    matches_filters,
    sort_documents,
)
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class MemoryAdapter(DatabaseInterface):
    """
    In-memory database adapter using Python dictionaries.
    Mirrors the SQL adapter's filtering, ordering and pagination.
    Data is lost when the application restarts.
    """

    def __init__(self):
        self._documents: Dict[int, Dict] = {}
        self._ids = itertools.count(1)

        # Index for the unique stored filename
        self._file_name_index: Dict[str, int] = {}

    async def initialize(self):
        """Initialize database (clears any existing data)."""
        self._documents.clear()
        self._file_name_index.clear()
        self._ids = itertools.count(1)

    async def close(self):
        """Close database connection (no-op for in-memory)."""
        pass

    async def create_document(self, doc_data: Dict) -> Dict:
        """Create a new document record."""
        file_name = doc_data.get("file_name")
        if not doc_data.get("title") or not doc_data.get("category"):
            raise ValueError("Document must have a non-empty 'title' and 'category'")
        if file_name in self._file_name_index:
            raise ValueError(f"Stored filename already exists: {file_name}")

        now = datetime.now()
        doc = {
            "description": None,
            "subject": None,
            "department": None,
            "tags": [],
            "document_date": None,
            "extracted_text": None,
            "ocr_processed": False,
        }
        doc.update(copy.deepcopy(doc_data))
        doc["id"] = next(self._ids)
        doc["created_at"] = now
        doc["updated_at"] = now

        self._documents[doc["id"]] = doc
        self._file_name_index[file_name] = doc["id"]

        return copy.deepcopy(doc)

    async def get_document(self, doc_id: int) -> Optional[Dict]:
        """Get a document by ID."""
        doc = self._documents.get(doc_id)
        return copy.deepcopy(doc) if doc else None

    async def update_document(self, doc_id: int, updates: Dict) -> Optional[Dict]:
        """Update a document."""
        if doc_id not in self._documents:
            return None

        doc = self._documents[doc_id]
        prepared = prepare_document_updates(updates)

        old_file_name = doc.get("file_name")
        new_file_name = prepared.get("file_name", old_file_name)
        if new_file_name != old_file_name:
            if new_file_name in self._file_name_index:
                raise ValueError(f"Stored filename already exists: {new_file_name}")
            self._file_name_index.pop(old_file_name, None)
            self._file_name_index[new_file_name] = doc_id

        for key, value in prepared.items():
            doc[key] = copy.deepcopy(value)

        doc["updated_at"] = datetime.now()

        return copy.deepcopy(doc)

    async def delete_document(self, doc_id: int) -> bool:
        """Delete a document."""
        doc = self._documents.pop(doc_id, None)
        if doc is None:
            return False
        self._file_name_index.pop(doc.get("file_name"), None)
        return True

    async def search_documents(
        self,
        filters: SearchFilters,
        page: int = 1,
        limit: int = 10,
        sort_by: str = DEFAULT_SORT
    ) -> Tuple[List[Dict], int]:
        """Filter, sort and paginate documents in memory."""
        matching = [doc for doc in self._documents.values() if matches_filters(doc, filters)]
        ordered = sort_documents(matching, sort_by)

        offset = calculate_offset(page, limit)
        page_docs = ordered[offset:offset + limit]

        return [copy.deepcopy(doc) for doc in page_docs], len(matching)

    async def count_documents(self) -> int:
        return len(self._documents)

