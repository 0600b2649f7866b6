"""
CircleEventRecorder -- hash-chained event trail per circle.

Responsibility:
    Appends one ``CircleEvent`` row for every state change CircleService
    commits (creation, joins, deposits, penalties, payouts, refunds,
    reserve funding, pause/unpause) and validates a circle's chain.

Architecture position:
    Kernel > Services -- imperative shell, called only by CircleService
    within the same transaction as the state change it records.

Invariants enforced:
    EVENT_CHAIN -- every event's ``hash`` is a deterministic function of
    ``(circle_id, seq, action, payload_hash, prev_hash)``; ``seq`` is
    contiguous from 1 within a circle.  The circle row lock taken by
    CircleService serializes appends per circle.

Failure modes:
    - EventChainBrokenError: recomputed hash or predecessor link mismatch.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from circle_kernel.exceptions import EventChainBrokenError
from circle_kernel.logging_config import get_logger
from circle_kernel.models.circle_event import CircleAction, CircleEvent
from circle_kernel.services.base import BaseService
from circle_kernel.utils.hashing import hash_circle_event, hash_payload

logger = get_logger("services.event_recorder")


class CircleEventRecorder(BaseService[CircleEvent]):
    """
    Append-only writer and validator of circle events.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT interpret events; reads belong to CircleSelector.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _last_event(self, circle_id: UUID) -> CircleEvent | None:
        return self.session.execute(
            select(CircleEvent)
            .where(CircleEvent.circle_id == circle_id)
            .order_by(CircleEvent.seq.desc())
            .limit(1)
        ).scalar_one_or_none()

    def record(
        self,
        circle_id: UUID,
        action: CircleAction,
        actor: str,
        occurred_at: datetime,
        payload: dict[str, Any] | None = None,
    ) -> CircleEvent:
        """
        Append an event to the circle's chain.

        Postconditions:
            - A new CircleEvent is flushed with ``seq = previous seq + 1``
              and ``prev_hash`` equal to the previous event's ``hash``.
        """
        last = self._last_event(circle_id)
        seq = 1 if last is None else last.seq + 1
        prev_hash = None if last is None else last.hash

        payload_data = payload or {}
        payload_hash = hash_payload(payload_data)
        event_hash = hash_circle_event(
            circle_id=str(circle_id),
            seq=seq,
            action=action.value,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
        )

        event = CircleEvent(
            circle_id=circle_id,
            seq=seq,
            action=action.value,
            actor=actor,
            occurred_at=occurred_at,
            payload=payload_data,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
            hash=event_hash,
        )
        self.session.add(event)
        self.session.flush()

        logger.debug(
            "circle_event_recorded",
            extra={"circle_id": str(circle_id), "seq": seq, "action": action.value},
        )
        return event

    def validate_chain(self, circle_id: UUID) -> bool:
        """
        Validate the circle's event chain.

        Returns:
            True if every stored hash matches its recomputed value and links
            to its predecessor.

        Raises:
            EventChainBrokenError: At the first mismatching event.
        """
        events = self.session.execute(
            select(CircleEvent)
            .where(CircleEvent.circle_id == circle_id)
            .order_by(CircleEvent.seq)
        ).scalars().all()

        prev_hash: str | None = None
        for expected_seq, event in enumerate(events, start=1):
            if event.seq != expected_seq or event.prev_hash != prev_hash:
                logger.critical(
                    "circle_event_chain_broken",
                    extra={"circle_id": str(circle_id), "seq": event.seq},
                )
                raise EventChainBrokenError(
                    str(circle_id), event.seq, prev_hash or "GENESIS", event.prev_hash or "GENESIS"
                )

            expected_hash = hash_circle_event(
                circle_id=str(circle_id),
                seq=event.seq,
                action=event.action,
                payload_hash=hash_payload(event.payload or {}),
                prev_hash=event.prev_hash,
            )
            if event.hash != expected_hash:
                logger.critical(
                    "circle_event_chain_broken",
                    extra={"circle_id": str(circle_id), "seq": event.seq},
                )
                raise EventChainBrokenError(str(circle_id), event.seq, expected_hash, event.hash)
            prev_hash = event.hash

        logger.info(
            "circle_event_chain_valid",
            extra={"circle_id": str(circle_id), "event_count": len(events)},
        )
        return True
