"""
Kernel Invariants Contract.

These invariants are structural law. They are enforced by CircleService
and the circle models. No CirclePolicy or configuration value may override
them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across CircleService, the pure cycle planner,
the DepositBitmap value object and CircleEventRecorder.
"""

from enum import Enum, unique


@unique
class CircleInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Each value names one structural guarantee that the kernel provides
    unconditionally. Policy may influence *how much* moves, but never
    *whether* these rules apply.
    """

    SINGLE_PAYOUT = "single_payout"
    """Exactly one recipient is selected per executed cycle, and it is the
    slot at next_payout_index (skipping excluded slots)."""

    NO_DOUBLE_DEPOSIT = "no_double_deposit"
    """A slot's bit is set at most once per open cycle. Enforced by
    CircleService.deposit against the DepositBitmap."""

    NO_DOUBLE_PAYOUT = "no_double_payout"
    """Every participant is paid once per round. Enforced by the rotating
    payout index and the completion check."""

    CYCLE_MONOTONICITY = "cycle_monotonicity"
    """current_cycle never decreases and grows by exactly one per
    successful execution."""

    ESCROW_CONSERVATION = "escrow_conservation"
    """escrow_balance equals the value actually held by the token layer
    for the circle's escrow account, and never goes negative."""

    ATOMICITY = "atomicity"
    """A failed operation leaves circle and member state unchanged. Token
    transfers happen before any mutation is applied."""

    EVENT_CHAIN = "event_chain"
    """Circle events are append-only and hash-chained per circle.
    Validated by CircleEventRecorder.validate_chain."""


# All invariants as a frozenset for programmatic checks.
ALL_CIRCLE_INVARIANTS: frozenset[CircleInvariant] = frozenset(CircleInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "circle_config",
    "scripts",
)
