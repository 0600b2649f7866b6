"""
Module: circle_kernel.models.circle_event
Responsibility: ORM persistence for the per-circle, hash-chained event trail.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: rows are inserted by CircleEventRecorder and never updated.
    - seq is 1, 2, 3, ... within a circle (unique per circle).
    - hash = H(circle_id | seq | action | payload_hash | prev_hash); prev_hash is
      None only for the circle's first event (circle_created).

Failure modes:
    - IntegrityError on a duplicate (circle_id, seq).
    - EventChainBrokenError when validation detects a mismatch.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from circle_kernel.db.base import Base, UUIDString
from circle_kernel.db.types import UTCDateTime


class CircleAction(str, Enum):
    """Types of recorded circle actions."""

    CIRCLE_CREATED = "circle_created"
    MEMBER_JOINED = "member_joined"
    CIRCLE_STARTED = "circle_started"
    DEPOSIT_RECEIVED = "deposit_received"
    PENALTY_APPLIED = "penalty_applied"
    PAYOUT_SENT = "payout_sent"
    CYCLE_EXECUTED = "cycle_executed"
    REFUND_CLAIMED = "refund_claimed"
    RESERVE_FUNDED = "reserve_funded"
    CIRCLE_PAUSED = "circle_paused"
    CIRCLE_UNPAUSED = "circle_unpaused"


class CircleEvent(Base):
    """One append-only entry of a circle's event trail."""

    __tablename__ = "circle_events"

    __table_args__ = (
        UniqueConstraint("circle_id", "seq", name="uq_circle_event_seq"),
        Index("idx_circle_event_action", "action"),
    )

    circle_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("circles.id"),
        nullable=False,
    )

    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    action: Mapped[str] = mapped_column(String(32), nullable=False)

    # Authenticated address that triggered the action
    actor: Mapped[str] = mapped_column(String(128), nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    prev_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<CircleEvent {self.circle_id}#{self.seq} {self.action}>"

    @property
    def is_genesis(self) -> bool:
        return self.prev_hash is None
