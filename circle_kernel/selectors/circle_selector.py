"""
CircleSelector -- read-only queries over circles, members and events.

Responsibility:
    Converts Circle / CircleMember / CircleEvent rows into the frozen
    snapshots callers see (CircleSnapshot, MemberSnapshot, CircleEventInfo).
    Derived fields (confirmation finality, round length, phase) are
    evaluated against the injected clock.

Architecture position:
    Kernel > Selectors -- read side.  CircleService reuses ``snapshot()``
    and ``member_snapshot()`` to build its return values so both paths
    agree on every derived field.

Failure modes:
    - CircleNotFoundError: unknown circle identifier.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from circle_kernel.domain.clock import Clock, SystemClock
from circle_kernel.domain.dtos import (
    CircleConfigInfo,
    CircleEventInfo,
    CircleSnapshot,
    MemberSnapshot,
    as_circle_id,
)
from circle_kernel.domain.cycle import next_participant
from circle_kernel.domain.lifecycle import (
    confirmations_final,
    first_cycle_opened_at,
    is_undersubscribed,
    phase_of,
    round_length,
)
from circle_kernel.exceptions import CircleNotFoundError
from circle_kernel.models.circle import Circle
from circle_kernel.models.circle_event import CircleEvent
from circle_kernel.selectors.base import BaseSelector


def resolve_circle_id(circle_id: UUID | str) -> UUID:
    """Parse a circle identifier; malformed values are treated as unknown circles."""
    try:
        return as_circle_id(circle_id)
    except ValueError:
        raise CircleNotFoundError(str(circle_id)) from None


def is_final(circle: Circle, now: datetime) -> bool:
    """Whether the circle's confirmed set is frozen at ``now``."""
    return confirmations_final(
        now,
        circle.created_at,
        circle.join_deadline_secs,
        circle.started_at,
        len(circle.confirmed_slots),
        circle.member_count,
    )


def cycle_opened_at(circle: Circle) -> datetime:
    """When the cycle currently open for deposits opened (circle must be final)."""
    if circle.current_cycle > 0:
        return circle.last_execution_time
    return first_cycle_opened_at(
        circle.created_at,
        circle.join_deadline_secs,
        circle.started_at,
        [m.joined_at for m in circle.members if m.confirmed],
        circle.member_count,
    )


def effective_payout_index(circle: Circle, final: bool) -> int:
    """
    Slot the next payout goes to.

    The stored index can point at a slot excluded when confirmations became
    final; the rotation then starts at the next confirmed slot.
    """
    confirmed = circle.confirmed_slots
    if not final or is_undersubscribed(final, len(confirmed)):
        return circle.next_payout_index
    return next_participant(circle.next_payout_index, confirmed, circle.member_count)


class CircleSelector(BaseSelector[Circle]):
    """Read-only access to circle state."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _load(self, circle_id: UUID | str) -> Circle:
        circle = self.session.get(Circle, resolve_circle_id(circle_id))
        if circle is None:
            raise CircleNotFoundError(str(circle_id))
        return circle

    # -- conversion ----------------------------------------------------------

    def snapshot(self, circle: Circle, now: datetime | None = None) -> CircleSnapshot:
        """Build a CircleSnapshot from an ORM row."""
        now = now or self._clock.now()
        final = is_final(circle, now)
        confirmed = circle.confirmed_slots
        addresses = tuple(m.address for m in circle.members)
        bitmap = circle.bitmap

        config = CircleConfigInfo(
            owner=circle.owner,
            token_asset=circle.token_asset,
            deposit_amount=circle.deposit_amount,
            cycle_interval_secs=circle.cycle_interval_secs,
            join_deadline_secs=circle.join_deadline_secs,
            members=addresses,
            created_at=circle.created_at,
            policy=circle.policy,
        )
        return CircleSnapshot(
            id=circle.id,
            config=config,
            members_confirmed=frozenset(addresses[slot] for slot in confirmed),
            current_cycle=circle.current_cycle,
            next_payout_index=effective_payout_index(circle, final),
            last_execution_time=circle.last_execution_time,
            deposits_bitmap=circle.deposits_bitmap,
            deposited_members=tuple(addresses[slot] for slot in bitmap.slots()),
            escrow_balance=circle.escrow_balance,
            is_paused=circle.is_paused,
            started_at=circle.started_at,
            confirmations_final=final,
            round_length=round_length(final, len(confirmed), circle.member_count),
            phase=phase_of(final, circle.current_cycle, len(confirmed)),
        )

    def member_snapshot(self, circle: Circle, address: str) -> MemberSnapshot:
        """Build a MemberSnapshot; non-members get a default, ``is_member=False`` view."""
        member = circle.member_by_address(address)
        if member is None:
            return MemberSnapshot(
                circle_id=circle.id,
                address=address,
                is_member=False,
                slot_index=None,
                confirmed=False,
                reputation_score=0,
                penalties_accrued=0,
                last_deposit_cycle=0,
                missed_deposits=0,
                late_deposits=0,
                has_deposited=False,
            )
        return MemberSnapshot(
            circle_id=circle.id,
            address=address,
            is_member=True,
            slot_index=member.slot_index,
            confirmed=member.confirmed,
            reputation_score=member.reputation_score,
            penalties_accrued=member.penalties_accrued,
            last_deposit_cycle=member.last_deposit_cycle,
            missed_deposits=member.missed_deposits,
            late_deposits=member.late_deposits,
            has_deposited=circle.bitmap.is_set(member.slot_index),
        )

    # -- queries -------------------------------------------------------------

    def get_circle(self, circle_id: UUID | str) -> CircleSnapshot:
        return self.snapshot(self._load(circle_id))

    def get_member_state(self, circle_id: UUID | str, member: str) -> MemberSnapshot:
        return self.member_snapshot(self._load(circle_id), member)

    def list_circles(self, owner: str | None = None) -> list[CircleSnapshot]:
        """All circles, oldest first, optionally restricted to one owner."""
        stmt = select(Circle).order_by(Circle.created_at)
        if owner is not None:
            stmt = stmt.where(Circle.owner == owner)
        now = self._clock.now()
        return [self.snapshot(c, now) for c in self.session.execute(stmt).scalars().all()]

    def list_events(self, circle_id: UUID | str) -> list[CircleEventInfo]:
        """The circle's event trail in sequence order."""
        circle = self._load(circle_id)
        events = self.session.execute(
            select(CircleEvent)
            .where(CircleEvent.circle_id == circle.id)
            .order_by(CircleEvent.seq)
        ).scalars().all()
        return [
            CircleEventInfo.build(
                seq=e.seq,
                action=e.action,
                actor=e.actor,
                occurred_at=e.occurred_at,
                payload=e.payload,
                hash=e.hash,
            )
            for e in events
        ]
