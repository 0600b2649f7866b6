"""
CircleService -- the rotating savings circle engine.

Responsibility:
    Owns every state change of a circle: creation, join confirmation,
    early start, deposits, cycle execution (payout + penalties), refunds,
    reserve funding and pause/unpause.  Token movements go through the
    injected ``TokenTransfer``; time comes from the injected ``Clock``.

Architecture position:
    Kernel > Services -- imperative shell.
    Pure rules live in ``circle_kernel.domain`` (bitmap, cycle planning,
    reputation, lifecycle); this service loads rows under a lock, asks the
    domain what to do, performs the token transfer and then applies the
    result.

Invariants enforced:
    SINGLE_PAYOUT       -- the rotation visits every participant once per round.
    NO_DOUBLE_DEPOSIT   -- the per-cycle bitmap admits one deposit per slot.
    NO_DOUBLE_PAYOUT    -- ``current_cycle`` and ``last_execution_time`` move
                           together; a second execution in the same interval
                           fails with TooEarlyError.
    CYCLE_MONOTONICITY  -- ``current_cycle`` only ever increases by one.
    ESCROW_CONSERVATION -- escrow_balance tracks exactly what the token layer
                           moved in and out of ``escrow:<circle_id>``.
    ATOMICITY           -- every check runs before any mutation and the token
                           transfer runs before circle state is touched; a
                           failed transfer leaves the circle unchanged.
    EVENT_CHAIN         -- each committed change appends a hash-chained event.

Failure modes:
    See ``circle_kernel.exceptions``; every rejection is logged at WARNING
    with its machine-readable code before being raised.

Audit relevance:
    Successful operations log at INFO (circle_created, member_joined,
    deposit_recorded, cycle_executed, refund_claimed, ...) and append a
    CircleEvent in the same transaction.
"""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from circle_kernel.domain.bitmap import MAX_SLOTS
from circle_kernel.domain.clock import Clock, SystemClock
from circle_kernel.domain.cycle import plan_cycle
from circle_kernel.domain.dtos import (
    CircleEventInfo,
    CircleSnapshot,
    CycleResult,
    MemberSnapshot,
    escrow_account_for,
)
from circle_kernel.domain.lifecycle import (
    MIN_MEMBERS,
    CirclePhase,
    cycle_due_at,
    is_undersubscribed,
    join_deadline,
    join_window_open,
    phase_of,
)
from circle_kernel.domain.policy import DEFAULT_POLICY, CirclePolicy
from circle_kernel.domain.reputation import (
    apply_deposit,
    apply_missed_deposit,
    apply_refund,
    initial_standing,
)
from circle_kernel.domain.token_transfer import TokenTransfer
from circle_kernel.exceptions import (
    AlreadyDepositedError,
    AlreadyJoinedError,
    CircleCompletedError,
    CircleKernelError,
    CircleNotFoundError,
    CirclePausedError,
    CycleNotOpenError,
    DeadlineExpiredError,
    InsufficientEscrowError,
    InsufficientMembersError,
    InvalidAmountError,
    InvalidConfigError,
    NothingToClaimError,
    PayoutFailedError,
    TooEarlyError,
    TransferFailedError,
    UnauthorizedError,
)
from circle_kernel.logging_config import LogContext, get_logger
from circle_kernel.models.circle import Circle, CircleMember
from circle_kernel.models.circle_event import CircleAction
from circle_kernel.selectors.circle_selector import (
    CircleSelector,
    cycle_opened_at,
    is_final,
    resolve_circle_id,
)
from circle_kernel.services.base import BaseService
from circle_kernel.services.event_recorder import CircleEventRecorder

logger = get_logger("services.circle")


def _is_amount(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CircleService(BaseService[Circle]):
    """
    Service for running rotating savings circles.

    Contract:
        Every mutating method locks the circle row, validates in a fixed
        order, moves tokens, then updates state and flushes.  Return values
        are frozen snapshots, never ORM entities.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT authenticate callers; the address passed in is trusted
          as the authenticated identity.
    """

    def __init__(
        self,
        session: Session,
        transfer: TokenTransfer,
        clock: Clock | None = None,
        policy: CirclePolicy | None = None,
    ):
        super().__init__(session)
        self._transfer = transfer
        self._clock = clock or SystemClock()
        self._default_policy = policy or DEFAULT_POLICY
        self._events = CircleEventRecorder(session)
        self._selector = CircleSelector(session, self._clock)

    # -- internals -----------------------------------------------------------

    def _get_circle_for_update(self, circle_id: UUID | str) -> Circle:
        """Get ORM Circle with row lock for mutation."""
        circle = self.session.execute(
            select(Circle)
            .where(Circle.id == resolve_circle_id(circle_id))
            .with_for_update()
        ).scalar_one_or_none()
        if circle is None:
            raise self._rejected(CircleNotFoundError(str(circle_id)))
        return circle

    @staticmethod
    def _rejected(error: CircleKernelError) -> CircleKernelError:
        logger.warning(
            "circle_operation_rejected",
            extra={"error_code": error.code, "reason": str(error)},
        )
        return error

    def _context(self, operation: str, circle_id: UUID | str | None, actor: str):
        return LogContext.bind(
            circle_id=None if circle_id is None else str(circle_id),
            actor=actor,
            operation=operation,
        )

    def _validate_config(
        self,
        owner: str,
        token_asset: str,
        deposit_amount: int,
        members: tuple[str, ...],
        cycle_interval_secs: int,
        join_deadline_secs: int,
    ) -> None:
        if not owner:
            raise InvalidConfigError("owner address is required")
        if not token_asset:
            raise InvalidConfigError("token_asset is required")
        if not _is_amount(deposit_amount) or deposit_amount <= 0:
            raise InvalidConfigError(
                f"deposit_amount must be a positive integer, got {deposit_amount!r}"
            )
        if not MIN_MEMBERS <= len(members) <= MAX_SLOTS:
            raise InvalidConfigError(
                f"member count {len(members)} outside {MIN_MEMBERS}..{MAX_SLOTS}"
            )
        if any(not m for m in members):
            raise InvalidConfigError("member addresses must be non-empty")
        if len(set(members)) != len(members):
            raise InvalidConfigError("member addresses must be distinct")
        if not _is_amount(cycle_interval_secs) or cycle_interval_secs <= 0:
            raise InvalidConfigError("cycle_interval_secs must be a positive integer")
        if not _is_amount(join_deadline_secs) or join_deadline_secs < 0:
            raise InvalidConfigError("join_deadline_secs must be a non-negative integer")

    def _require_member(self, circle: Circle, address: str, reason: str) -> CircleMember:
        member = circle.member_by_address(address)
        if member is None:
            raise self._rejected(UnauthorizedError(str(circle.id), address, reason))
        return member

    def _require_owner(self, circle: Circle, caller: str) -> None:
        if caller != circle.owner:
            raise self._rejected(
                UnauthorizedError(str(circle.id), caller, "only the owner may do this")
            )

    def _require_participants(self, circle: Circle, now: datetime) -> None:
        """Reject cycling a circle whose confirmed set ended up below MIN_MEMBERS."""
        confirmed = len(circle.confirmed_slots)
        if is_undersubscribed(is_final(circle, now), confirmed):
            raise self._rejected(
                InsufficientMembersError(str(circle.id), confirmed, MIN_MEMBERS)
            )

    def _record(
        self,
        circle: Circle,
        action: CircleAction,
        actor: str,
        now: datetime,
        payload: dict | None = None,
    ) -> None:
        self._events.record(circle.id, action, actor, now, payload)

    # -- setup ---------------------------------------------------------------

    def create_circle(
        self,
        owner: str,
        token_asset: str,
        deposit_amount: int,
        members: Iterable[str],
        cycle_interval_secs: int,
        join_deadline_secs: int,
        policy: CirclePolicy | None = None,
    ) -> CircleSnapshot:
        """
        Create a circle in the JOINING phase.

        Slot order is the order of ``members``; it fixes the payout rotation.
        The policy (default: the one this service was built with) is frozen
        into the circle.

        Raises:
            InvalidConfigError: Bad member list, deposit amount, durations
                or addresses.
        """
        members = tuple(members)
        with self._context("create_circle", None, owner):
            try:
                self._validate_config(
                    owner,
                    token_asset,
                    deposit_amount,
                    members,
                    cycle_interval_secs,
                    join_deadline_secs,
                )
            except CircleKernelError as error:
                raise self._rejected(error)

            policy = policy or self._default_policy
            now = self._clock.now()
            circle = Circle(
                owner=owner,
                token_asset=token_asset,
                deposit_amount=deposit_amount,
                cycle_interval_secs=cycle_interval_secs,
                join_deadline_secs=join_deadline_secs,
                member_count=len(members),
                created_at=now,
                current_cycle=0,
                next_payout_index=0,
                last_execution_time=now,
                deposits_bitmap=0,
                escrow_balance=0,
                is_paused=False,
            )
            circle.apply_policy(policy)
            standing = initial_standing(policy)
            for slot, address in enumerate(members):
                member = CircleMember(slot_index=slot, address=address, confirmed=False)
                member.apply_standing(standing)
                circle.members.append(member)

            self.session.add(circle)
            self.session.flush()

            self._record(
                circle,
                CircleAction.CIRCLE_CREATED,
                owner,
                now,
                {
                    "owner": owner,
                    "token_asset": token_asset,
                    "deposit_amount": deposit_amount,
                    "members": list(members),
                    "cycle_interval_secs": cycle_interval_secs,
                    "join_deadline_secs": join_deadline_secs,
                    "payout_policy": policy.payout_policy.value,
                },
            )
            logger.info(
                "circle_created",
                extra={
                    "circle_id": str(circle.id),
                    "member_count": len(members),
                    "deposit_amount": deposit_amount,
                    "payout_policy": policy.payout_policy.value,
                },
            )
            return self._selector.snapshot(circle, now)

    def join_circle(self, circle_id: UUID | str, member: str) -> MemberSnapshot:
        """
        Confirm membership of a listed address.

        Allowed while paused.  Joining is possible up to and including the
        join deadline, unless the owner has already started the circle.

        Raises:
            UnauthorizedError: ``member`` is not listed in the circle.
            DeadlineExpiredError: Join window is closed.
            AlreadyJoinedError: ``member`` already confirmed.
        """
        with self._context("join_circle", circle_id, member):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()

            slot = self._require_member(circle, member, "address is not a listed member")
            if not join_window_open(
                now, circle.created_at, circle.join_deadline_secs, circle.started_at
            ):
                deadline = join_deadline(circle.created_at, circle.join_deadline_secs)
                raise self._rejected(
                    DeadlineExpiredError(str(circle.id), member, deadline.isoformat())
                )
            if slot.confirmed:
                raise self._rejected(AlreadyJoinedError(str(circle.id), member))

            slot.confirmed = True
            slot.joined_at = now
            self.session.flush()

            self._record(
                circle,
                CircleAction.MEMBER_JOINED,
                member,
                now,
                {"member": member, "slot_index": slot.slot_index},
            )
            logger.info(
                "member_joined",
                extra={
                    "slot_index": slot.slot_index,
                    "confirmed_count": len(circle.confirmed_slots),
                    "member_count": circle.member_count,
                },
            )
            return self._selector.member_snapshot(circle, member)

    def start_circle(self, circle_id: UUID | str, owner: str) -> CircleSnapshot:
        """
        Close the join window early and open the first cycle.

        Members not yet confirmed are excluded from the rotation for good.

        Raises:
            UnauthorizedError: Caller is not the owner.
            DeadlineExpiredError: Confirmations are already final.
            InsufficientMembersError: Fewer than two members confirmed.
        """
        with self._context("start_circle", circle_id, owner):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()

            self._require_owner(circle, owner)
            if is_final(circle, now):
                deadline = join_deadline(circle.created_at, circle.join_deadline_secs)
                raise self._rejected(
                    DeadlineExpiredError(str(circle.id), owner, deadline.isoformat())
                )
            confirmed = len(circle.confirmed_slots)
            if confirmed < MIN_MEMBERS:
                raise self._rejected(
                    InsufficientMembersError(str(circle.id), confirmed, MIN_MEMBERS)
                )

            circle.started_at = now
            self.session.flush()

            self._record(
                circle,
                CircleAction.CIRCLE_STARTED,
                owner,
                now,
                {"confirmed_count": confirmed},
            )
            logger.info(
                "circle_started",
                extra={"confirmed_count": confirmed, "member_count": circle.member_count},
            )
            return self._selector.snapshot(circle, now)

    # -- cycling -------------------------------------------------------------

    def deposit(self, circle_id: UUID | str, member: str) -> MemberSnapshot:
        """
        Pay the fixed deposit for the open cycle into escrow.

        A deposit made more than one interval after the cycle opened (the
        previous execution, or the moment confirmations became final for the
        first cycle) is accepted but counted as late: the reputation penalty and late fine apply instead of the
        on-time reward.

        Raises:
            CirclePausedError: Circle is paused.
            UnauthorizedError: ``member`` is not a confirmed member.
            AlreadyDepositedError: Slot already deposited this cycle.
            CycleNotOpenError: Confirmations are not final yet.
            InsufficientMembersError: Fewer than two members were confirmed.
            CircleCompletedError: Every participant has been paid.
            TransferFailedError: Token layer refused the transfer.
        """
        with self._context("deposit", circle_id, member):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()
            circle_key = str(circle.id)

            if circle.is_paused:
                raise self._rejected(CirclePausedError(circle_key, "deposit"))
            slot = circle.member_by_address(member)
            if slot is None or not slot.confirmed:
                raise self._rejected(
                    UnauthorizedError(circle_key, member, "address is not a confirmed member")
                )
            funded_cycle = circle.current_cycle + 1
            bitmap = circle.bitmap
            if bitmap.is_set(slot.slot_index):
                raise self._rejected(AlreadyDepositedError(circle_key, member, funded_cycle))
            if not is_final(circle, now):
                raise self._rejected(CycleNotOpenError(circle_key, "join window still open"))
            self._require_participants(circle, now)
            if circle.current_cycle >= len(circle.confirmed_slots):
                raise self._rejected(CircleCompletedError(circle_key, circle.current_cycle))

            amount = circle.deposit_amount
            escrow = escrow_account_for(circle.id)
            result = self._transfer.transfer(circle.token_asset, member, escrow, amount)
            if not result.success:
                raise self._rejected(TransferFailedError(member, escrow, amount, result.reason))

            late = now > cycle_due_at(cycle_opened_at(circle), circle.cycle_interval_secs)
            policy = circle.policy
            circle.deposits_bitmap = bitmap.with_slot(slot.slot_index).bits
            circle.escrow_balance += amount
            slot.apply_standing(apply_deposit(slot.standing, policy, amount, funded_cycle, late))
            self.session.flush()

            self._record(
                circle,
                CircleAction.DEPOSIT_RECEIVED,
                member,
                now,
                {"member": member, "cycle": funded_cycle, "amount": amount, "late": late},
            )
            if late:
                self._record(
                    circle,
                    CircleAction.PENALTY_APPLIED,
                    member,
                    now,
                    {
                        "member": member,
                        "cycle": funded_cycle,
                        "kind": "late",
                        "fine": policy.late_fine(amount),
                        "reputation_score": slot.reputation_score,
                    },
                )
            logger.info(
                "deposit_recorded",
                extra={
                    "cycle": funded_cycle,
                    "amount": amount,
                    "late": late,
                    "escrow_balance": circle.escrow_balance,
                },
            )
            return self._selector.member_snapshot(circle, member)

    def execute_cycle(self, circle_id: UUID | str, caller: str) -> CycleResult:
        """
        Pay the current recipient and advance the rotation.

        Anyone may trigger execution.  Confirmed members who did not deposit
        are penalized only once the payout has succeeded; a failed payout
        leaves the circle exactly as it was so the call can be retried.

        Raises:
            CirclePausedError: Circle is paused.
            CycleNotOpenError: Confirmations are not final yet.
            InsufficientMembersError: Fewer than two members were confirmed.
            CircleCompletedError: Every participant has been paid.
            TooEarlyError: The cycle interval has not elapsed since the cycle opened.
            PayoutFailedError: Token layer refused the payout.
        """
        with self._context("execute_cycle", circle_id, caller):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()
            circle_key = str(circle.id)

            if circle.is_paused:
                raise self._rejected(CirclePausedError(circle_key, "execute_cycle"))
            if not is_final(circle, now):
                raise self._rejected(CycleNotOpenError(circle_key, "join window still open"))
            self._require_participants(circle, now)
            participants = circle.confirmed_slots
            if circle.current_cycle >= len(participants):
                raise self._rejected(CircleCompletedError(circle_key, circle.current_cycle))
            ready_at = cycle_due_at(cycle_opened_at(circle), circle.cycle_interval_secs)
            if now < ready_at:
                raise self._rejected(
                    TooEarlyError(circle_key, now.isoformat(), ready_at.isoformat())
                )

            plan = plan_cycle(
                bitmap=circle.bitmap,
                participants=participants,
                next_payout_index=circle.next_payout_index,
                deposit_amount=circle.deposit_amount,
                escrow_balance=circle.escrow_balance,
                payout_policy=circle.policy.payout_policy,
            )
            slots = {m.slot_index: m for m in circle.members}
            recipient = slots[plan.recipient_slot]

            if plan.payout_amount > 0:
                result = self._transfer.transfer(
                    circle.token_asset,
                    escrow_account_for(circle.id),
                    recipient.address,
                    plan.payout_amount,
                )
                if not result.success:
                    raise self._rejected(
                        PayoutFailedError(
                            circle_key, recipient.address, plan.payout_amount, result.reason
                        )
                    )

            policy = circle.policy
            cycle = circle.current_cycle + 1
            for slot_index in plan.missed_slots:
                missed = slots[slot_index]
                missed.apply_standing(
                    apply_missed_deposit(missed.standing, policy, circle.deposit_amount)
                )

            circle.escrow_balance -= plan.payout_amount
            circle.deposits_bitmap = circle.bitmap.cleared().bits
            circle.last_execution_time = now
            circle.current_cycle = cycle
            circle.next_payout_index = plan.next_payout_index
            self.session.flush()

            penalized = tuple(slots[s].address for s in plan.missed_slots)
            for slot_index in plan.missed_slots:
                missed = slots[slot_index]
                self._record(
                    circle,
                    CircleAction.PENALTY_APPLIED,
                    caller,
                    now,
                    {
                        "member": missed.address,
                        "cycle": cycle,
                        "kind": "missed",
                        "fine": policy.missed_fine(circle.deposit_amount),
                        "reputation_score": missed.reputation_score,
                    },
                )
            self._record(
                circle,
                CircleAction.PAYOUT_SENT,
                caller,
                now,
                {
                    "recipient": recipient.address,
                    "cycle": cycle,
                    "amount": plan.payout_amount,
                    "top_up": plan.top_up_amount,
                },
            )
            completed = cycle >= len(participants)
            self._record(
                circle,
                CircleAction.CYCLE_EXECUTED,
                caller,
                now,
                {
                    "cycle": cycle,
                    "depositors": [slots[s].address for s in plan.depositor_slots],
                    "penalized": list(penalized),
                    "next_payout_index": plan.next_payout_index,
                    "completed": completed,
                },
            )
            logger.info(
                "cycle_executed",
                extra={
                    "cycle": cycle,
                    "recipient": recipient.address,
                    "payout_amount": plan.payout_amount,
                    "collected_amount": plan.collected_amount,
                    "penalized_count": len(penalized),
                    "escrow_balance": circle.escrow_balance,
                    "completed": completed,
                },
            )
            return CycleResult(
                circle_id=circle.id,
                cycle=cycle,
                recipient=recipient.address,
                payout_amount=plan.payout_amount,
                collected_amount=plan.collected_amount,
                top_up_amount=plan.top_up_amount,
                depositors=tuple(slots[s].address for s in plan.depositor_slots),
                penalized=penalized,
                next_payout_index=plan.next_payout_index,
                executed_at=now,
                completed=completed,
            )

    # -- reserve and refunds -------------------------------------------------

    def fund_reserve(self, circle_id: UUID | str, funder: str, amount: int) -> CircleSnapshot:
        """
        Move tokens from ``funder`` into the circle's escrow as reserve.

        The reserve backs refunds and, under the top-up payout policy,
        covers for absent depositors.

        Raises:
            InvalidAmountError: ``amount`` is not a positive integer.
            TransferFailedError: Token layer refused the transfer.
        """
        with self._context("fund_reserve", circle_id, funder):
            if not _is_amount(amount) or amount <= 0:
                raise self._rejected(InvalidAmountError(amount))
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()

            escrow = escrow_account_for(circle.id)
            result = self._transfer.transfer(circle.token_asset, funder, escrow, amount)
            if not result.success:
                raise self._rejected(TransferFailedError(funder, escrow, amount, result.reason))

            circle.escrow_balance += amount
            self.session.flush()

            self._record(
                circle,
                CircleAction.RESERVE_FUNDED,
                funder,
                now,
                {"funder": funder, "amount": amount},
            )
            logger.info(
                "reserve_funded",
                extra={"amount": amount, "escrow_balance": circle.escrow_balance},
            )
            return self._selector.snapshot(circle, now)

    def claim_refund(self, circle_id: UUID | str, member: str) -> int:
        """
        Pay a member their accrued penalties back out of escrow.

        Only possible while the circle is paused or after it completed.

        Returns:
            The amount refunded.

        Raises:
            NothingToClaimError: No accrued penalties, or the circle is
                neither paused nor completed.
            InsufficientEscrowError: Escrow, less the deposits collected for
                the open cycle, cannot cover the claim.
            TransferFailedError: Token layer refused the transfer.
        """
        with self._context("claim_refund", circle_id, member):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()
            circle_key = str(circle.id)

            slot = circle.member_by_address(member)
            amount = 0 if slot is None else slot.penalties_accrued
            if amount == 0:
                raise self._rejected(
                    NothingToClaimError(circle_key, member, "no accrued penalties")
                )
            phase = phase_of(
                is_final(circle, now), circle.current_cycle, len(circle.confirmed_slots)
            )
            if not (circle.is_paused or phase is CirclePhase.COMPLETED):
                raise self._rejected(
                    NothingToClaimError(
                        circle_key, member, "circle is neither paused nor completed"
                    )
                )
            # deposits collected for the open cycle belong to its recipient
            available = circle.escrow_balance - circle.deposit_amount * circle.bitmap.count()
            if available < amount:
                raise self._rejected(InsufficientEscrowError(circle_key, amount, available))

            escrow = escrow_account_for(circle.id)
            result = self._transfer.transfer(circle.token_asset, escrow, member, amount)
            if not result.success:
                raise self._rejected(TransferFailedError(escrow, member, amount, result.reason))

            circle.escrow_balance -= amount
            slot.apply_standing(apply_refund(slot.standing))
            self.session.flush()

            self._record(
                circle,
                CircleAction.REFUND_CLAIMED,
                member,
                now,
                {"member": member, "amount": amount},
            )
            logger.info(
                "refund_claimed",
                extra={"amount": amount, "escrow_balance": circle.escrow_balance},
            )
            return amount

    # -- administration ------------------------------------------------------

    def pause(self, circle_id: UUID | str, owner: str) -> CircleSnapshot:
        """Suspend deposits and executions.  Owner only; idempotent."""
        return self._set_paused(circle_id, owner, True)

    def unpause(self, circle_id: UUID | str, owner: str) -> CircleSnapshot:
        """Resume deposits and executions.  Owner only; idempotent."""
        return self._set_paused(circle_id, owner, False)

    def _set_paused(self, circle_id: UUID | str, owner: str, paused: bool) -> CircleSnapshot:
        operation = "pause" if paused else "unpause"
        with self._context(operation, circle_id, owner):
            circle = self._get_circle_for_update(circle_id)
            now = self._clock.now()
            self._require_owner(circle, owner)

            if circle.is_paused != paused:
                circle.is_paused = paused
                self.session.flush()
                self._record(
                    circle,
                    CircleAction.CIRCLE_PAUSED if paused else CircleAction.CIRCLE_UNPAUSED,
                    owner,
                    now,
                )
                logger.info("circle_paused" if paused else "circle_unpaused")
            return self._selector.snapshot(circle, now)

    # -- reads ---------------------------------------------------------------

    def get_circle(self, circle_id: UUID | str) -> CircleSnapshot:
        return self._selector.get_circle(circle_id)

    def get_member_state(self, circle_id: UUID | str, member: str) -> MemberSnapshot:
        return self._selector.get_member_state(circle_id, member)

    def list_events(self, circle_id: UUID | str) -> list[CircleEventInfo]:
        return self._selector.list_events(circle_id)

    def validate_event_chain(self, circle_id: UUID | str) -> bool:
        """Validate the circle's hash-chained event trail."""
        circle = self._selector.get_circle(circle_id)
        return self._events.validate_chain(circle.id)
