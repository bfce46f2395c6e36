"""
Abstract base class for database adapters.
All database implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Tuple

from ...utils.search_utils import SearchFilters, DEFAULT_SORT
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseInterface(ABC):
    """
    Abstract interface for document persistence.
    All database adapters must implement these methods.
    This allows plug-and-play database support without changing business logic.
    """

    @abstractmethod
    async def create_document(self, doc_data: Dict) -> Dict:
        """Create a new document record and return it with id and timestamps."""
        pass

    @abstractmethod
    async def get_document(self, doc_id: int) -> Optional[Dict]:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def update_document(self, doc_id: int, updates: Dict) -> Optional[Dict]:
        """Merge a partial update into a document and refresh updated_at."""
        pass

    @abstractmethod
    async def delete_document(self, doc_id: int) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def search_documents(
        self,
        filters: SearchFilters,
        page: int = 1,
        limit: int = 10,
        sort_by: str = DEFAULT_SORT
    ) -> Tuple[List[Dict], int]:
        """
        Return one page of documents matching the filters and the total
        number of matching documents.
        """
        pass

    @abstractmethod
    async def count_documents(self) -> int:
        """Count all documents."""
        pass

    @abstractmethod
    async def initialize(self):
        """Initialize database (create tables, indexes, etc.)."""
        pass

    @abstractmethod
    async def close(self):
        """Close database connection."""
        pass
