"""Database layer - engine, base classes and column types."""

from circle_kernel.db.base import UUID, Base, UUIDString
from circle_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from circle_kernel.db.types import UTCDateTime

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "UUIDString",
    "UUID",
    "UTCDateTime",
]
