"""
TokenTransfer -- the token movement collaborator.

Responsibility:
    Defines the narrow contract through which the circle engine moves value
    into and out of a circle's escrow account.  The engine never assumes a
    transfer succeeded: every call returns a ``TransferResult`` and every
    call site has an explicit failure path.

Architecture position:
    Kernel > Domain -- the sanctioned I/O boundary for value movement, in
    the same way ``SystemClock`` is for time.  Production deployments plug
    in an adapter for their token layer; ``InMemoryTokenLedger`` is the
    reference implementation used by tests and demos.

Invariants enforced:
    - ESCROW_CONSERVATION (observable): ``InMemoryTokenLedger.balance_of``
      lets callers check that a circle's ``escrow_balance`` matches what the
      token layer actually holds.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class TransferResult:
    """Definite outcome of one transfer request."""

    success: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "TransferResult":
        return cls(success=True)

    @classmethod
    def failed(cls, reason: str) -> "TransferResult":
        return cls(success=False, reason=reason)


class TokenTransfer(ABC):
    """
    Abstract token transfer interface.

    Contract:
        ``transfer`` is synchronous and returns a definite outcome before
        the engine continues.  Refusals are reported as a failed result,
        never by raising.
    """

    @abstractmethod
    def transfer(self, asset: str, source: str, destination: str, amount: int) -> TransferResult:
        """Move ``amount`` units of ``asset`` from ``source`` to ``destination``."""
        ...


class InMemoryTokenLedger(TokenTransfer):
    """
    Balance-tracking token layer kept in process memory.

    Guarantees:
        - A transfer fails (and moves nothing) when the source balance is
          insufficient, the amount is not positive, or a failure was
          injected for the source or destination account.
        - Every successful transfer is appended to ``history``.
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._blocked: set[str] = set()
        self._fail_next = 0
        self.history: list[tuple[str, str, str, int]] = []

    def mint(self, asset: str, account: str, amount: int) -> None:
        """Credit ``amount`` to ``account`` out of thin air (test setup)."""
        if amount <= 0:
            raise ValueError(f"Mint amount must be positive, got {amount}")
        self._balances[(asset, account)] += amount

    def balance_of(self, asset: str, account: str) -> int:
        return self._balances.get((asset, account), 0)

    def block(self, account: str) -> None:
        """Refuse every transfer touching ``account`` until unblocked."""
        self._blocked.add(account)

    def unblock(self, account: str) -> None:
        self._blocked.discard(account)

    def fail_next(self, count: int = 1) -> None:
        """Refuse the next ``count`` transfers regardless of balances."""
        self._fail_next += count

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> TransferResult:
        if self._fail_next:
            self._fail_next -= 1
            return TransferResult.failed("injected failure")
        if amount <= 0:
            return TransferResult.failed(f"non-positive amount {amount}")
        if source in self._blocked or destination in self._blocked:
            return TransferResult.failed("account blocked")
        if self._balances.get((asset, source), 0) < amount:
            return TransferResult.failed("insufficient balance")

        self._balances[(asset, source)] -= amount
        self._balances[(asset, destination)] += amount
        self.history.append((asset, source, destination, amount))
        return TransferResult.ok()
