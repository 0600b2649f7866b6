"""
DepositBitmap -- fixed-width bit set of member slots.

Responsibility:
    Records which member slots have deposited for the open cycle.  Slot i
    is bit i.  The width equals the circle's member count, so membership
    tests are O(1) and the missed-deposit scan is O(N).

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  Persisted as a plain
    integer on the circle row.

Invariants enforced:
    - NO_DOUBLE_DEPOSIT: ``with_slot`` refuses to set a bit twice.
    - No bit outside [0, width) is ever set.

Failure modes:
    - ValueError on out-of-range slots, a width outside [1, MAX_SLOTS],
      a stored value with bits beyond the width, or a repeated set.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

# Persisted in a signed 64-bit column; circles are kept well inside that.
MAX_SLOTS = 32


@dataclass(frozen=True)
class DepositBitmap:
    """Immutable bit set sized to the circle's member count."""

    width: int
    bits: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_SLOTS:
            raise ValueError(f"Bitmap width must be within [1, {MAX_SLOTS}], got {self.width}")
        if self.bits < 0 or self.bits >> self.width:
            raise ValueError(f"Bitmap value {self.bits:#x} exceeds width {self.width}")

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < self.width:
            raise ValueError(f"Slot {slot} outside bitmap width {self.width}")

    def is_set(self, slot: int) -> bool:
        self._check_slot(slot)
        return bool(self.bits & (1 << slot))

    def with_slot(self, slot: int) -> "DepositBitmap":
        """Return a new bitmap with ``slot`` set."""
        if self.is_set(slot):
            raise ValueError(f"Slot {slot} already set")
        return DepositBitmap(self.width, self.bits | (1 << slot))

    def cleared(self) -> "DepositBitmap":
        return DepositBitmap(self.width)

    def slots(self) -> Iterator[int]:
        """Set slots in ascending order."""
        return (i for i in range(self.width) if self.bits & (1 << i))

    def count(self) -> int:
        return bin(self.bits).count("1")

    def missing(self, candidates: Iterable[int]) -> tuple[int, ...]:
        """Candidate slots whose bit is not set, in ascending order."""
        return tuple(sorted(i for i in candidates if not self.is_set(i)))

    def __contains__(self, slot: int) -> bool:
        return 0 <= slot < self.width and bool(self.bits & (1 << slot))

    def __len__(self) -> int:
        return self.count()
