"""
Cycle planning -- pure computation of one cycle execution.

Responsibility:
    Given the circle's slot arena, the open cycle's deposit bitmap and the
    rotation index, decide who is paid, how much, who is penalized, and
    where the rotation moves next.  ``CircleService.execute_cycle`` applies
    the plan only after the payout transfer succeeded, which is what makes
    a failed payout leave no trace.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - SINGLE_PAYOUT: exactly one recipient per plan, the first participant
      slot at or after ``next_payout_index``.
    - NO_DOUBLE_PAYOUT: the rotation only ever moves forward through
      participant slots, so a full round pays each participant once.
    - ESCROW_CONSERVATION: the payout never exceeds the escrow balance.

Failure modes:
    - ValueError when there are no participants, the rotation index is out
      of range, or the escrow holds less than the deposits collected (a
      broken conservation invariant, never a user error).
"""

from collections.abc import Collection
from dataclasses import dataclass

from circle_kernel.domain.bitmap import DepositBitmap
from circle_kernel.domain.policy import PayoutPolicy


@dataclass(frozen=True)
class CyclePlan:
    """Everything ``execute_cycle`` will commit if the payout succeeds."""

    recipient_slot: int
    depositor_slots: tuple[int, ...]
    missed_slots: tuple[int, ...]
    collected_amount: int
    payout_amount: int
    next_payout_index: int

    @property
    def top_up_amount(self) -> int:
        return self.payout_amount - self.collected_amount


def next_participant(start: int, participants: Collection[int], width: int) -> int:
    """First participant slot at or after ``start``, wrapping around."""
    if not participants:
        raise ValueError("Circle has no participants")
    if not 0 <= start < width:
        raise ValueError(f"Rotation index {start} outside [0, {width})")
    for offset in range(width):
        slot = (start + offset) % width
        if slot in participants:
            return slot
    raise ValueError(f"No participant slot within width {width}")


def plan_cycle(
    *,
    bitmap: DepositBitmap,
    participants: Collection[int],
    next_payout_index: int,
    deposit_amount: int,
    escrow_balance: int,
    payout_policy: PayoutPolicy,
) -> CyclePlan:
    """
    Plan the execution of the cycle currently open for deposits.

    Args:
        bitmap: Slots that deposited for this cycle.
        participants: Confirmed slots (the only ones owed a payout or a deposit).
        next_payout_index: Stored rotation index.  It may still point at a
            slot excluded when confirmations became final; the recipient is
            then the next participant slot.
        deposit_amount: Fixed deposit per member.
        escrow_balance: Token units currently held for the circle.
        payout_policy: How the pot is sized when members are absent.

    Returns:
        The CyclePlan to commit after a successful payout.
    """
    width = bitmap.width
    recipient = next_participant(next_payout_index, participants, width)

    depositors = tuple(bitmap.slots())
    missed = bitmap.missing(participants)
    collected = deposit_amount * len(depositors)

    if escrow_balance < collected:
        raise ValueError(
            f"Escrow balance {escrow_balance} is below collected deposits {collected}"
        )

    if payout_policy is PayoutPolicy.TOP_UP_FROM_RESERVE:
        payout = min(deposit_amount * len(participants), escrow_balance)
    else:
        payout = collected

    return CyclePlan(
        recipient_slot=recipient,
        depositor_slots=depositors,
        missed_slots=missed,
        collected_amount=collected,
        payout_amount=payout,
        next_payout_index=next_participant((recipient + 1) % width, participants, width),
    )
