"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (apart from the Clock and TokenTransfer boundaries)

All domain objects are immutable and deterministic.
"""

from circle_kernel.domain.bitmap import MAX_SLOTS, DepositBitmap
from circle_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from circle_kernel.domain.cycle import CyclePlan, next_participant, plan_cycle
from circle_kernel.domain.dtos import (
    CircleConfigInfo,
    CircleEventInfo,
    CircleSnapshot,
    CycleResult,
    MemberSnapshot,
    as_circle_id,
    escrow_account_for,
)
from circle_kernel.domain.lifecycle import CirclePhase
from circle_kernel.domain.policy import DEFAULT_POLICY, CirclePolicy, PayoutPolicy
from circle_kernel.domain.reputation import (
    MemberStanding,
    apply_deposit,
    apply_missed_deposit,
    apply_refund,
    initial_standing,
)
from circle_kernel.domain.token_transfer import (
    InMemoryTokenLedger,
    TokenTransfer,
    TransferResult,
)

__all__ = [
    "MAX_SLOTS",
    "DepositBitmap",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CyclePlan",
    "next_participant",
    "plan_cycle",
    "CircleConfigInfo",
    "CircleEventInfo",
    "CircleSnapshot",
    "CycleResult",
    "MemberSnapshot",
    "as_circle_id",
    "escrow_account_for",
    "CirclePhase",
    "DEFAULT_POLICY",
    "CirclePolicy",
    "PayoutPolicy",
    "MemberStanding",
    "apply_deposit",
    "apply_missed_deposit",
    "apply_refund",
    "initial_standing",
    "InMemoryTokenLedger",
    "TokenTransfer",
    "TransferResult",
]
