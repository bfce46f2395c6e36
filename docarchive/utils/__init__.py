"""
Utility functions - Pure functions with no dependencies on services.
These can be used across all layers.
"""
from .document_utils import parse_document_date, prepare_document_updates, build_stored_filename
from .search_utils import SearchFilters, matches_filters, sort_documents

__all__ = [
    "parse_document_date",
    "prepare_document_updates",
    "build_stored_filename",
    "SearchFilters",
    "matches_filters",
    "sort_documents",
]
