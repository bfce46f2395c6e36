"""
Database Factory for creating database adapters.
Implements Factory Pattern for plug-and-play database support.
"""
import os
from typing import Optional

from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter
from .sql_adapter import SQLAdapter
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseFactory:
    """
    Factory for creating database adapters.
    Supports SQL (SQLAlchemy, persistent) and Memory (in-memory) backends.
    """

    @staticmethod
    def create(database_type: Optional[str] = None, **kwargs) -> DatabaseInterface:
        """
        Create a database adapter instance.

        Args:
            database_type: Type of database ('sql', 'memory', or None for auto-detect)
            **kwargs: Additional arguments for specific database adapters

        Returns:
            DatabaseInterface instance

        Examples:
            # SQLite / PostgreSQL via SQLAlchemy
            db = DatabaseFactory.create('sql', database_url='sqlite:///data/docarchive.db')

            # Memory (in-memory, non-persistent)
            db = DatabaseFactory.create('memory')
        """
        if database_type is None:
            database_type = os.getenv("DATABASE_TYPE", "sql")

        database_type = database_type.lower()

        if database_type == "sql":
            return DatabaseFactory._create_sql(**kwargs)
        elif database_type == "memory":
            return MemoryAdapter()
        else:
            raise ValueError(
                f"Unsupported database type: {database_type}. "
                f"Supported types: 'sql', 'memory'"
            )

    @staticmethod
    def _create_sql(**kwargs) -> SQLAdapter:
        database_url = kwargs.get("database_url")
        if not database_url:
            from ...core.config import DATABASE_URL
            database_url = DATABASE_URL
        return SQLAdapter(database_url=database_url, echo=kwargs.get("echo", False))

    @staticmethod
    async def create_and_initialize(database_type: Optional[str] = None, **kwargs) -> DatabaseInterface:
        """
        Create database adapter and initialize it.

        Args:
            database_type: Type of database
            **kwargs: Additional arguments

        Returns:
            Initialized DatabaseInterface instance
        """
        db = DatabaseFactory.create(database_type, **kwargs)
        await db.initialize()
        return db
