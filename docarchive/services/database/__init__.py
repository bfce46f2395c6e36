"""
Database abstraction layer for plug-and-play database support.
Supports SQL (SQLAlchemy) and Memory (in-memory) database backends.
"""
from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter
from .sql_adapter import SQLAdapter
from .factory import DatabaseFactory

__all__ = [
    "DatabaseInterface",
    "MemoryAdapter",
    "SQLAdapter",
    "DatabaseFactory"
]
