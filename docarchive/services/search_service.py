"""
Search Service - Handles filtered document search.

Normalises raw query parameters into SearchFilters and delegates the
filtering, ordering and pagination to the database adapter.
"""
from typing import Any, Dict, Optional

from .database.base import DatabaseInterface
from ..api.exceptions import InvalidSearchParameterError
from ..utils.document_utils import normalize_optional_text, parse_document_date
from ..utils.search_utils import DEFAULT_SORT, SORT_OPTIONS, SearchFilters
from ..core.config import DEFAULT_PAGE_SIZE
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class SearchService:
    """Service for document search."""

    def __init__(self, db_service: DatabaseInterface):
        self.db_service = db_service

    @staticmethod
    def build_filters(
        query: Optional[str] = None,
        category: Optional[str] = None,
        department: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None
    ) -> SearchFilters:
        """
        Build search filters from raw parameters.

        Blank strings mean "no filter". Dates accept "YYYY-MM-DD" or ISO
        timestamps; both bounds are inclusive.

        Raises:
            InvalidSearchParameterError: If a date bound cannot be parsed
        """
        try:
            parsed_from = parse_document_date(date_from)
            parsed_to = parse_document_date(date_to)
        except ValueError as e:
            raise InvalidSearchParameterError(f"Invalid date filter: {e}") from e

        # A date-only upper bound covers the whole day
        if parsed_to is not None and date_to and len(date_to.strip()) == 10:
            parsed_to = parsed_to.replace(hour=23, minute=59, second=59, microsecond=999999)

        return SearchFilters(
            query=normalize_optional_text(query),
            category=normalize_optional_text(category),
            department=normalize_optional_text(department),
            date_from=parsed_from,
            date_to=parsed_to,
        )

    async def search_documents(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        department: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        sort_by: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Search documents.

        Returns:
            Dict with "documents" (one page) and "total" (all matches)
        """
        filters = self.build_filters(query, category, department, date_from, date_to)
        sort_by = sort_by or DEFAULT_SORT
        if sort_by not in SORT_OPTIONS:
            raise InvalidSearchParameterError(
                f"Invalid sortBy '{sort_by}'. Options: {', '.join(SORT_OPTIONS)}"
            )

        documents, total = await self.db_service.search_documents(
            filters, page=page, limit=limit, sort_by=sort_by
        )
        logger.debug(f"Search {filters} page={page} limit={limit} sort={sort_by}: {total} matches")
        return {"documents": documents, "total": total}
