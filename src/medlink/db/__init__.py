"""Database package - session management and declarative base."""
from .session import (
    Base,
    DatabaseManager,
    DbSession,
    close_db,
    get_db,
    get_db_manager,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "DbSession",
    "close_db",
    "get_db",
    "get_db_manager",
]
