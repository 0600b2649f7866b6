"""
Typed Exception Hierarchy for the Circle Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the circle engine (relayers, API layers, wallets) must react to
failures precisely: a TooEarlyError means "come back later", a
PayoutFailedError means "retry once the token layer recovers", an
UnauthorizedError means "wrong caller".  Parsing message strings for that is
fragile, so every failure has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (circle_id, member, amounts, timestamps)

Example:
    try:
        service.execute_cycle(circle_id, caller="relayer")
    except TooEarlyError as e:
        schedule_retry(at=e.ready_at)
    except PayoutFailedError as e:
        log.warning(f"payout to {e.recipient} failed: {e.reason}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CircleKernelError:

    CircleKernelError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidConfigError
    |   +-- InvalidAmountError
    |
    +-- MembershipError
    |   +-- UnauthorizedError
    |   +-- DeadlineExpiredError
    |   +-- AlreadyJoinedError
    |   +-- InsufficientMembersError
    |
    +-- CircleStateError
    |   +-- CircleNotFoundError
    |   +-- CirclePausedError
    |   +-- CycleNotOpenError
    |   +-- TooEarlyError
    |   +-- CircleCompletedError
    |
    +-- DepositError
    |   +-- AlreadyDepositedError
    |
    +-- TransferError
    |   +-- TransferFailedError
    |   +-- PayoutFailedError
    |   +-- InsufficientEscrowError
    |
    +-- RefundError
    |   +-- NothingToClaimError
    |
    +-- AuditError
        +-- EventChainBrokenError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|-----------------------------------------
Configuration   | INVALID_CONFIG        | Bad member list, deposit, durations
                | INVALID_AMOUNT        | Non-positive reserve funding
----------------|-----------------------|-----------------------------------------
Membership      | UNAUTHORIZED          | Caller is not a member / not the owner
                | DEADLINE_EXPIRED      | Join window closed
                | ALREADY_JOINED        | Member confirmed twice
                | INSUFFICIENT_MEMBERS  | Fewer than 2 confirmed at start or finality
----------------|-----------------------|-----------------------------------------
Circle state    | CIRCLE_NOT_FOUND      | Unknown circle identifier
                | CIRCLE_PAUSED         | Deposit/execution while paused
                | CYCLE_NOT_OPEN        | Confirmations not final yet
                | TOO_EARLY             | Cycle interval has not elapsed
                | CIRCLE_COMPLETED      | Every participant was already paid
----------------|-----------------------|-----------------------------------------
Deposit         | ALREADY_DEPOSITED     | Second deposit in the same cycle
----------------|-----------------------|-----------------------------------------
Transfer        | TRANSFER_FAILED       | Token layer refused a deposit/refund
                | PAYOUT_FAILED         | Token layer refused the cycle payout
                | INSUFFICIENT_ESCROW   | Free escrow cannot cover a refund
----------------|-----------------------|-----------------------------------------
Refund          | NOTHING_TO_CLAIM      | No accrued amount, or circle cycling
----------------|-----------------------|-----------------------------------------
Audit           | EVENT_CHAIN_BROKEN    | Circle event hash chain mismatch

===============================================================================
HANDLING PATTERNS
===============================================================================

Every error is terminal for the call that raised it.  The engine performs
no local retry and leaves circle state exactly as it was before the call;
the caller decides whether to retry.  No error is fatal for the circle.
"""


class CircleKernelError(Exception):
    """
    Base exception for all circle kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CIRCLE_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(CircleKernelError):
    """Base exception for invalid circle configuration or arguments."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigError(ConfigurationError):
    """Circle configuration was rejected at creation time."""

    code: str = "INVALID_CONFIG"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid circle configuration: {reason}")


class InvalidAmountError(ConfigurationError):
    """A token amount argument is not a positive integer."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: int):
        self.amount = amount
        super().__init__(f"Amount must be a positive integer, got {amount!r}")


# Membership exceptions


class MembershipError(CircleKernelError):
    """Base exception for membership and caller-identity errors."""

    code: str = "MEMBERSHIP_ERROR"


class UnauthorizedError(MembershipError):
    """Caller is not allowed to perform the operation."""

    code: str = "UNAUTHORIZED"

    def __init__(self, circle_id: str, caller: str, reason: str):
        self.circle_id = circle_id
        self.caller = caller
        self.reason = reason
        super().__init__(f"Caller {caller} unauthorized on circle {circle_id}: {reason}")


class DeadlineExpiredError(MembershipError):
    """Join window has closed."""

    code: str = "DEADLINE_EXPIRED"

    def __init__(self, circle_id: str, member: str, deadline: str):
        self.circle_id = circle_id
        self.member = member
        self.deadline = deadline
        super().__init__(
            f"Join window for circle {circle_id} closed at {deadline}; "
            f"{member} can no longer join"
        )


class AlreadyJoinedError(MembershipError):
    """Member already confirmed participation."""

    code: str = "ALREADY_JOINED"

    def __init__(self, circle_id: str, member: str):
        self.circle_id = circle_id
        self.member = member
        super().__init__(f"Member {member} already joined circle {circle_id}")


class InsufficientMembersError(MembershipError):
    """Too few confirmed members for the circle to cycle."""

    code: str = "INSUFFICIENT_MEMBERS"

    def __init__(self, circle_id: str, confirmed: int, required: int):
        self.circle_id = circle_id
        self.confirmed = confirmed
        self.required = required
        super().__init__(
            f"Circle {circle_id} has {confirmed} confirmed member(s), "
            f"at least {required} required to cycle"
        )


# Circle state exceptions


class CircleStateError(CircleKernelError):
    """Base exception for operations rejected by the circle lifecycle."""

    code: str = "CIRCLE_STATE_ERROR"


class CircleNotFoundError(CircleStateError):
    """Circle with given ID was not found."""

    code: str = "CIRCLE_NOT_FOUND"

    def __init__(self, circle_id: str):
        self.circle_id = circle_id
        super().__init__(f"Circle not found: {circle_id}")


class CirclePausedError(CircleStateError):
    """Circle is paused; financial movement is blocked."""

    code: str = "CIRCLE_PAUSED"

    def __init__(self, circle_id: str, operation: str):
        self.circle_id = circle_id
        self.operation = operation
        super().__init__(f"Circle {circle_id} is paused; {operation} rejected")


class CycleNotOpenError(CircleStateError):
    """No deposit window is open yet."""

    code: str = "CYCLE_NOT_OPEN"

    def __init__(self, circle_id: str, reason: str):
        self.circle_id = circle_id
        self.reason = reason
        super().__init__(f"Cycle not open for circle {circle_id}: {reason}")


class TooEarlyError(CircleStateError):
    """Cycle interval has not elapsed since the last execution."""

    code: str = "TOO_EARLY"

    def __init__(self, circle_id: str, now: str, ready_at: str):
        self.circle_id = circle_id
        self.now = now
        self.ready_at = ready_at
        super().__init__(
            f"Circle {circle_id} cannot execute before {ready_at} (now {now})"
        )


class CircleCompletedError(CircleStateError):
    """Every participant has already received a payout."""

    code: str = "CIRCLE_COMPLETED"

    def __init__(self, circle_id: str, cycles: int):
        self.circle_id = circle_id
        self.cycles = cycles
        super().__init__(f"Circle {circle_id} completed after {cycles} cycle(s)")


# Deposit exceptions


class DepositError(CircleKernelError):
    """Base exception for deposit collection errors."""

    code: str = "DEPOSIT_ERROR"


class AlreadyDepositedError(DepositError):
    """Member already deposited for the open cycle."""

    code: str = "ALREADY_DEPOSITED"

    def __init__(self, circle_id: str, member: str, cycle: int):
        self.circle_id = circle_id
        self.member = member
        self.cycle = cycle
        super().__init__(
            f"Member {member} already deposited for cycle {cycle} of circle {circle_id}"
        )


# Transfer exceptions


class TransferError(CircleKernelError):
    """Base exception for token movement failures."""

    code: str = "TRANSFER_ERROR"


class TransferFailedError(TransferError):
    """Token transfer collaborator refused a deposit, refund or funding."""

    code: str = "TRANSFER_FAILED"

    def __init__(self, source: str, destination: str, amount: int, reason: str):
        self.source = source
        self.destination = destination
        self.amount = amount
        self.reason = reason
        super().__init__(
            f"Transfer of {amount} from {source} to {destination} failed: {reason}"
        )


class PayoutFailedError(TransferError):
    """Token transfer collaborator refused the cycle payout."""

    code: str = "PAYOUT_FAILED"

    def __init__(self, circle_id: str, recipient: str, amount: int, reason: str):
        self.circle_id = circle_id
        self.recipient = recipient
        self.amount = amount
        self.reason = reason
        super().__init__(
            f"Payout of {amount} to {recipient} from circle {circle_id} failed: {reason}"
        )


class InsufficientEscrowError(TransferError):
    """Escrow balance cannot cover the requested release."""

    code: str = "INSUFFICIENT_ESCROW"

    def __init__(self, circle_id: str, requested: int, available: int):
        self.circle_id = circle_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Circle {circle_id} escrow has {available} available, {requested} requested"
        )


# Refund exceptions


class RefundError(CircleKernelError):
    """Base exception for refund claims."""

    code: str = "REFUND_ERROR"


class NothingToClaimError(RefundError):
    """No refundable amount, or refunds are not releasable right now."""

    code: str = "NOTHING_TO_CLAIM"

    def __init__(self, circle_id: str, member: str, reason: str):
        self.circle_id = circle_id
        self.member = member
        self.reason = reason
        super().__init__(f"Nothing to claim for {member} on circle {circle_id}: {reason}")


# Audit exceptions


class AuditError(CircleKernelError):
    """Base exception for event trail errors."""

    code: str = "AUDIT_ERROR"


class EventChainBrokenError(AuditError):
    """Circle event hash chain validation failed."""

    code: str = "EVENT_CHAIN_BROKEN"

    def __init__(self, circle_id: str, seq: int, expected_hash: str, actual_hash: str):
        self.circle_id = circle_id
        self.seq = seq
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Event chain broken for circle {circle_id} at seq {seq}: "
            f"expected {expected_hash}, got {actual_hash}"
        )
