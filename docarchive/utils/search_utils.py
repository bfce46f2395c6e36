"""
Search utility functions for composing filters and orderings.
Shared by the memory and SQL adapters so both honour the same semantics.
"""
from dataclasses import dataclass
from typing import Dict, Any, List, Optional
from datetime import datetime
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# "relevance" has no scoring; it is an alias for newest-created-first
SORT_OPTIONS = ["relevance", "date-desc", "date-asc", "title", "size"]
DEFAULT_SORT = "relevance"

# Fields matched by the free-text query
TEXT_SEARCH_FIELDS = ["title", "description", "subject", "extracted_text"]


@dataclass
class SearchFilters:
    """Filter set for a document search. Every provided filter is ANDed."""
    query: Optional[str] = None
    category: Optional[str] = None
    department: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def is_empty(self) -> bool:
        return not any([self.query, self.category, self.department, self.date_from, self.date_to])


def calculate_offset(page: int, limit: int) -> int:
    """Offset for 1-based page numbers."""
    return (max(page, 1) - 1) * limit


def escape_like(value: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


def matches_filters(doc: Dict[str, Any], filters: SearchFilters) -> bool:
    """
    Check a document dictionary against a filter set.

    Args:
        doc: Document dictionary
        filters: Filters to apply

    Returns:
        True if document passes all filters, False otherwise
    """
    if filters.query:
        needle = filters.query.lower()
        if not any(needle in (doc.get(field) or "").lower() for field in TEXT_SEARCH_FIELDS):
            return False

    if filters.category and doc.get("category") != filters.category:
        return False

    if filters.department and doc.get("department") != filters.department:
        return False

    document_date = doc.get("document_date")
    if filters.date_from and (document_date is None or document_date < filters.date_from):
        return False
    if filters.date_to and (document_date is None or document_date > filters.date_to):
        return False

    return True


def sort_documents(docs: List[Dict[str, Any]], sort_by: str) -> List[Dict[str, Any]]:
    """
    Order documents for a search result page.

    Date sorts keep undated documents last; ties break on id descending.
    """
    # Stable sorts: apply the tie-breaker first
    ordered = sorted(docs, key=lambda d: d["id"], reverse=True)

    if sort_by in ("date-desc", "date-asc"):
        dated = [d for d in ordered if d.get("document_date") is not None]
        undated = [d for d in ordered if d.get("document_date") is None]
        dated.sort(key=lambda d: d["document_date"], reverse=(sort_by == "date-desc"))
        return dated + undated
    if sort_by == "title":
        return sorted(ordered, key=lambda d: d.get("title") or "")
    if sort_by == "size":
        return sorted(ordered, key=lambda d: d.get("file_size") or 0, reverse=True)

    return sorted(ordered, key=lambda d: d["created_at"], reverse=True)
