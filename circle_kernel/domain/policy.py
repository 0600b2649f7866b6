"""
CirclePolicy -- reputation and penalty constants for a circle.

Responsibility:
    Holds the business constants that decide how much reputation a deposit
    earns, how much a missed or late deposit costs, and how the payout pot
    is sized when members are absent.  A policy is frozen into the circle
    row at creation, so changing the active configuration never rewrites
    the rules of a running circle.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  ``circle_config``
    bridges YAML configuration into this type; the kernel never reads
    configuration itself.

Failure modes:
    - ValueError from ``__post_init__`` on negative constants, a negative
      floor, an initial score below the floor, or basis points above 10000.
"""

from dataclasses import dataclass
from enum import Enum

BASIS_POINTS = 10_000


class PayoutPolicy(str, Enum):
    """How the payout pot is sized when some members did not deposit.

    POT_REDUCTION pays only what was actually collected this cycle.
    TOP_UP_FROM_RESERVE fills the missing deposits from escrow surplus
    (funded reserve), up to the full participant pot.
    """

    POT_REDUCTION = "pot_reduction"
    TOP_UP_FROM_RESERVE = "top_up_from_reserve"


@dataclass(frozen=True)
class CirclePolicy:
    """
    Immutable reputation and penalty constants.

    Guarantees:
        - All adjustments are non-negative integers.
        - ``reputation_floor >= 0`` and ``initial_reputation >= reputation_floor``.
        - Fine rates are basis points of the deposit, in [0, 10000].
    """

    initial_reputation: int = 10
    reputation_reward: int = 1
    missed_reputation_penalty: int = 1
    late_reputation_penalty: int = 1
    reputation_floor: int = 0
    missed_fine_bps: int = 2_000
    late_fine_bps: int = 1_000
    payout_policy: PayoutPolicy = PayoutPolicy.POT_REDUCTION

    def __post_init__(self) -> None:
        for name in (
            "reputation_reward",
            "missed_reputation_penalty",
            "late_reputation_penalty",
            "reputation_floor",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.initial_reputation < self.reputation_floor:
            raise ValueError(
                f"initial_reputation ({self.initial_reputation}) is below "
                f"reputation_floor ({self.reputation_floor})"
            )
        for name in ("missed_fine_bps", "late_fine_bps"):
            value = getattr(self, name)
            if not 0 <= value <= BASIS_POINTS:
                raise ValueError(f"{name} must be within [0, {BASIS_POINTS}], got {value}")
        if not isinstance(self.payout_policy, PayoutPolicy):
            object.__setattr__(self, "payout_policy", PayoutPolicy(self.payout_policy))

    def missed_fine(self, deposit_amount: int) -> int:
        """Fine accrued for a missed deposit, in token units (rounded down)."""
        return deposit_amount * self.missed_fine_bps // BASIS_POINTS

    def late_fine(self, deposit_amount: int) -> int:
        """Fine accrued for a late deposit, in token units (rounded down)."""
        return deposit_amount * self.late_fine_bps // BASIS_POINTS


DEFAULT_POLICY = CirclePolicy()
