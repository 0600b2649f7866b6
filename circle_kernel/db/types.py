"""
Module: circle_kernel.db.types
Responsibility: Column type decorators shared by every circle model, so
    that timestamps are stored identically on every backend.
Architecture position: Kernel > DB.  May be imported by models/, services/
    and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Timestamps round-trip as timezone-aware UTC datetimes on every
      backend (SQLite drops tzinfo; UTCDateTime restores it).

Failure modes:
    - ValueError on binding a naive datetime (clock injection always
      produces aware values, so a naive one is a programming error).
"""

from datetime import timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored in UTC.

    Contract:
        Accepts aware datetimes only and always returns aware UTC values,
        including on SQLite where the driver stores naive strings.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored; inject a Clock")
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

