"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable snapshots returned by every public circle
    operation and query: CircleConfigInfo, CircleSnapshot, MemberSnapshot,
    CycleResult and CircleEventInfo.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies; services and selectors convert ORM rows into
    these objects at the boundary and never hand ORM entities to callers.

Invariants enforced:
    - Snapshots are frozen; mutating one never touches circle state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any
from uuid import UUID

from circle_kernel.domain.lifecycle import CirclePhase, join_deadline
from circle_kernel.domain.policy import CirclePolicy


def escrow_account_for(circle_id: UUID) -> str:
    """Account name of a circle's escrow at the token layer."""
    return f"escrow:{circle_id}"


@dataclass(frozen=True)
class CircleConfigInfo:
    """Immutable circle configuration, including the frozen policy."""

    owner: str
    token_asset: str
    deposit_amount: int
    cycle_interval_secs: int
    join_deadline_secs: int
    members: tuple[str, ...]
    created_at: datetime
    policy: CirclePolicy

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def join_deadline(self) -> datetime:
        return join_deadline(self.created_at, self.join_deadline_secs)


@dataclass(frozen=True)
class CircleSnapshot:
    """
    Point-in-time view of a circle.

    ``round_length`` and ``phase`` are evaluated against the clock of the
    component that produced the snapshot.  ``next_payout_index`` is the slot
    the next payout goes to, skipping slots excluded at finality.
    """

    id: UUID
    config: CircleConfigInfo
    members_confirmed: frozenset[str]
    current_cycle: int
    next_payout_index: int
    last_execution_time: datetime
    deposits_bitmap: int
    deposited_members: tuple[str, ...]
    escrow_balance: int
    is_paused: bool
    started_at: datetime | None
    confirmations_final: bool
    round_length: int
    phase: CirclePhase

    @property
    def escrow_account(self) -> str:
        return escrow_account_for(self.id)

    @property
    def is_completed(self) -> bool:
        return self.phase is CirclePhase.COMPLETED

    @property
    def next_recipient(self) -> str:
        return self.config.members[self.next_payout_index]


@dataclass(frozen=True)
class MemberSnapshot:
    """Point-in-time view of one address within a circle."""

    circle_id: UUID
    address: str
    is_member: bool
    slot_index: int | None
    confirmed: bool
    reputation_score: int
    penalties_accrued: int
    last_deposit_cycle: int
    missed_deposits: int
    late_deposits: int
    has_deposited: bool


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one successful ``execute_cycle``."""

    circle_id: UUID
    cycle: int
    recipient: str
    payout_amount: int
    collected_amount: int
    top_up_amount: int
    depositors: tuple[str, ...]
    penalized: tuple[str, ...]
    next_payout_index: int
    executed_at: datetime
    completed: bool


@dataclass(frozen=True)
class CircleEventInfo:
    """One entry of a circle's hash-chained event trail."""

    seq: int
    action: str
    actor: str
    occurred_at: datetime
    payload: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    hash: str = ""

    @classmethod
    def build(
        cls,
        seq: int,
        action: str,
        actor: str,
        occurred_at: datetime,
        payload: dict[str, Any] | None,
        hash: str,
    ) -> CircleEventInfo:
        return cls(
            seq=seq,
            action=action,
            actor=actor,
            occurred_at=occurred_at,
            payload=MappingProxyType(dict(payload or {})),
            hash=hash,
        )


def as_circle_id(value: UUID | str) -> UUID:
    """Coerce a circle identifier; raises ValueError when malformed."""
    return value if isinstance(value, UUID) else UUID(str(value))
