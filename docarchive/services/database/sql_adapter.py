"""
Relational adapter implementing DatabaseInterface with SQLAlchemy.
Backs the `documents` table on SQLite (default) or PostgreSQL.

SQLAlchemy sessions are synchronous, so every operation runs in the default
executor to keep the event loop free.
"""
import asyncio
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy import create_engine, event, func, or_
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from .base import DatabaseInterface
from .sql_models import Base, DocumentRecord
from ...utils.document_utils import prepare_document_updates
from ...utils.search_utils import SearchFilters, DEFAULT_SORT, calculate_offset, escape_like
from ...core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_connection.create_function("lower", 1, _unicode_lower)


class SQLAdapter(DatabaseInterface):
    """
    SQLAlchemy database adapter.
    One row per document; search filters are composed into a single WHERE
    clause shared by the page query and the count query.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize SQL adapter.

        Args:
            database_url: SQLAlchemy URL (e.g. sqlite:///data/docarchive.db)
            echo: Log every SQL statement
        """
        self.database_url = database_url
        self.echo = echo
        self.engine = None
        self.SessionLocal: Optional[sessionmaker] = None

    async def initialize(self):
        """Create the engine and the documents table if missing."""
        url = make_url(self.database_url)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            # Sessions are used from executor threads
            connect_args["check_same_thread"] = False
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            self.database_url,
            echo=self.echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        if url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _register_sqlite_functions)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        await self._run(lambda: Base.metadata.create_all(bind=self.engine))
        logger.info(f"SQL database ready ({url.get_backend_name()})")

    async def close(self):
        """Dispose of the connection pool."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    async def _run(self, fn: Callable[[], T]) -> T:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, fn)

    def _session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("SQL adapter not initialized")
        return self.SessionLocal()

    async def create_document(self, doc_data: Dict) -> Dict:
        """Insert a new document row."""
        if not doc_data.get("title") or not doc_data.get("category"):
            raise ValueError("Document must have a non-empty 'title' and 'category'")
        values = {k: v for k, v in doc_data.items() if k not in ("id", "created_at", "updated_at")}

        def _create():
            with self._session() as db:
                now = datetime.now()
                record = DocumentRecord(**values, created_at=now, updated_at=now)
                db.add(record)
                db.commit()
                db.refresh(record)
                return record.to_dict()

        return await self._run(_create)

    async def get_document(self, doc_id: int) -> Optional[Dict]:
        def _get():
            with self._session() as db:
                record = db.get(DocumentRecord, doc_id)
                return record.to_dict() if record else None

        return await self._run(_get)

    async def update_document(self, doc_id: int, updates: Dict) -> Optional[Dict]:
        """Merge provided fields into the row and refresh updated_at."""
        prepared = prepare_document_updates(updates)

        def _update():
            with self._session() as db:
                record = db.get(DocumentRecord, doc_id)
                if record is None:
                    return None
                for key, value in prepared.items():
                    setattr(record, key, value)
                record.updated_at = datetime.now()
                db.commit()
                db.refresh(record)
                return record.to_dict()

        return await self._run(_update)

    async def delete_document(self, doc_id: int) -> bool:
        def _delete():
            with self._session() as db:
                deleted = db.query(DocumentRecord).filter(DocumentRecord.id == doc_id).delete()
                db.commit()
                return deleted > 0

        return await self._run(_delete)

    async def search_documents(
        self,
        filters: SearchFilters,
        page: int = 1,
        limit: int = 10,
        sort_by: str = DEFAULT_SORT
    ) -> Tuple[List[Dict], int]:
        """Run the filtered page query and the count query."""
        def _search():
            with self._session() as db:
                conditions = self._build_conditions(filters)

                query = db.query(DocumentRecord).filter(*conditions)
                records = (
                    query.order_by(*self._build_order_by(sort_by))
                    .offset(calculate_offset(page, limit))
                    .limit(limit)
                    .all()
                )

                total = db.query(func.count(DocumentRecord.id)).filter(*conditions).scalar()
                return [record.to_dict() for record in records], int(total or 0)

        return await self._run(_search)

    async def count_documents(self) -> int:
        def _count():
            with self._session() as db:
                return db.query(func.count(DocumentRecord.id)).scalar() or 0

        return await self._run(_count)

    @staticmethod
    def _build_conditions(filters: SearchFilters) -> list:
        conditions = []

        # Text search across title, description, subject, and extracted text
        if filters.query:
            pattern = f"%{escape_like(filters.query)}%"
            conditions.append(
                or_(
                    DocumentRecord.title.ilike(pattern, escape="\\"),
                    DocumentRecord.description.ilike(pattern, escape="\\"),
                    DocumentRecord.subject.ilike(pattern, escape="\\"),
                    DocumentRecord.extracted_text.ilike(pattern, escape="\\"),
                )
            )
        if filters.category:
            conditions.append(DocumentRecord.category == filters.category)
        if filters.department:
            conditions.append(DocumentRecord.department == filters.department)
        if filters.date_from:
            conditions.append(DocumentRecord.document_date >= filters.date_from)
        if filters.date_to:
            conditions.append(DocumentRecord.document_date <= filters.date_to)

        return conditions

    @staticmethod
    def _build_order_by(sort_by: str) -> list:
        if sort_by == "date-desc":
            primary = DocumentRecord.document_date.desc().nulls_last()
        elif sort_by == "date-asc":
            primary = DocumentRecord.document_date.asc().nulls_last()
        elif sort_by == "title":
            primary = DocumentRecord.title.asc()
        elif sort_by == "size":
            primary = DocumentRecord.file_size.desc()
        else:
            primary = DocumentRecord.created_at.desc()
        return [primary, DocumentRecord.id.desc()]
