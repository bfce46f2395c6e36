"""
Search Router - Handles document listing and search.

Example Usage:
    GET /documents?query=contrato&category=Contratos&sortBy=date-desc&page=2
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models.document import DocumentListResponse
from ..services.search_service import SearchService
from .dependencies import get_search_service
from ..core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/documents", response_model=DocumentListResponse)
async def search_documents(
    query: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    search_service: SearchService = Depends(get_search_service)
):
    """
    Search documents with filters, ordering and pagination.

    Query text matches title, description, subject and extracted text
    (case-insensitive). All provided filters must match. sortBy is one of
    relevance, date-desc, date-asc, title, size.

    Returns:
        {"documents": [...], "total": <matches across all pages>}
    """
    return await search_service.search_documents(
        query=query,
        category=category,
        department=department,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
        sort_by=sort_by,
    )
