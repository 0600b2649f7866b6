"""
Tests for deposit collection.

Invariants exercised:
- One deposit per member per cycle (bitmap).
- A failed token transfer records nothing.
- Late deposits are accepted but penalized.
- Check order: paused, unauthorized, already deposited, not open,
  too few participants, completed.
- The first cycle opens when confirmations become final.
"""

import pytest

from circle_kernel.domain.dtos import escrow_account_for
from circle_kernel.exceptions import (
    AlreadyDepositedError,
    CircleCompletedError,
    CirclePausedError,
    CycleNotOpenError,
    InsufficientMembersError,
    TooEarlyError,
    TransferFailedError,
    UnauthorizedError,
)
from tests.conftest import ASSET, CYCLE_INTERVAL, DAY, DEPOSIT, OWNER, STARTING_BALANCE


class TestDeposit:
    """Happy path."""

    def test_deposit_moves_tokens_into_escrow(self, active_circle, circle_service, token_ledger):
        state = circle_service.deposit(active_circle.id, "bob")

        assert state.has_deposited
        assert state.last_deposit_cycle == 1
        assert state.reputation_score == 11
        assert token_ledger.balance_of(ASSET, "bob") == STARTING_BALANCE - DEPOSIT
        assert token_ledger.balance_of(ASSET, escrow_account_for(active_circle.id)) == DEPOSIT

        circle = circle_service.get_circle(active_circle.id)
        assert circle.escrow_balance == DEPOSIT
        assert circle.deposits_bitmap == 0b010
        assert circle.deposited_members == ("bob",)

    def test_deposit_is_recorded_and_logged(self, active_circle, circle_service, captured_logs):
        circle_service.deposit(active_circle.id, "carol")

        events = circle_service.list_events(active_circle.id)
        assert events[-1].action == "deposit_received"
        assert events[-1].payload["cycle"] == 1
        assert events[-1].payload["late"] is False

        deposits = [r for r in captured_logs() if r["message"] == "deposit_recorded"]
        assert deposits[0]["circle_id"] == str(active_circle.id)
        assert deposits[0]["actor"] == "carol"


class TestDepositRejections:
    """Every rejection leaves the circle unchanged."""

    def test_double_deposit_rejected(self, active_circle, circle_service, token_ledger):
        circle_service.deposit(active_circle.id, "bob")
        with pytest.raises(AlreadyDepositedError) as exc_info:
            circle_service.deposit(active_circle.id, "bob")

        assert exc_info.value.cycle == 1
        assert circle_service.get_circle(active_circle.id).escrow_balance == DEPOSIT
        assert token_ledger.balance_of(ASSET, "bob") == STARTING_BALANCE - DEPOSIT

    def test_non_member_unauthorized(self, active_circle, circle_service):
        with pytest.raises(UnauthorizedError):
            circle_service.deposit(active_circle.id, "mallory")

    def test_unconfirmed_member_unauthorized(self, create_circle, circle_service, deterministic_clock):
        circle = create_circle(join=("alice", "bob"))
        deterministic_clock.advance(24 * 3600 + 1)
        with pytest.raises(UnauthorizedError):
            circle_service.deposit(circle.id, "carol")

    def test_deposit_before_confirmations_final(self, create_circle, circle_service):
        circle = create_circle(join=("alice", "bob"))
        with pytest.raises(CycleNotOpenError):
            circle_service.deposit(circle.id, "alice")

    def test_deposit_opens_after_deadline(self, create_circle, circle_service, deterministic_clock):
        circle = create_circle(join=("alice", "bob"))
        deterministic_clock.advance(24 * 3600 + 1)
        assert circle_service.deposit(circle.id, "alice").has_deposited

    def test_paused_rejected(self, active_circle, circle_service):
        circle_service.pause(active_circle.id, OWNER)
        with pytest.raises(CirclePausedError):
            circle_service.deposit(active_circle.id, "bob")

    def test_paused_checked_before_membership(self, active_circle, circle_service):
        circle_service.pause(active_circle.id, OWNER)
        with pytest.raises(CirclePausedError):
            circle_service.deposit(active_circle.id, "mallory")

    def test_transfer_failure_leaves_state_unchanged(
        self, active_circle, circle_service, token_ledger
    ):
        token_ledger.fail_next()
        with pytest.raises(TransferFailedError) as exc_info:
            circle_service.deposit(active_circle.id, "bob")

        assert exc_info.value.reason == "injected failure"
        circle = circle_service.get_circle(active_circle.id)
        assert circle.deposits_bitmap == 0
        assert circle.escrow_balance == 0
        state = circle_service.get_member_state(active_circle.id, "bob")
        assert state.reputation_score == 10
        assert state.last_deposit_cycle == 0
        assert [e.action for e in circle_service.list_events(active_circle.id)].count(
            "deposit_received"
        ) == 0

    def test_retry_after_transfer_failure_succeeds(
        self, active_circle, circle_service, token_ledger
    ):
        token_ledger.fail_next()
        with pytest.raises(TransferFailedError):
            circle_service.deposit(active_circle.id, "bob")
        assert circle_service.deposit(active_circle.id, "bob").has_deposited

    def test_insufficient_member_balance(self, active_circle, circle_service, token_ledger):
        token_ledger.transfer(ASSET, "bob", "erin", STARTING_BALANCE)
        with pytest.raises(TransferFailedError):
            circle_service.deposit(active_circle.id, "bob")

    def test_completed_circle_rejects_deposit(self, create_circle, circle_service, run_cycle):
        circle = create_circle(members=("alice", "bob"))
        run_cycle(circle.id, ("alice", "bob"))
        run_cycle(circle.id, ("alice", "bob"))

        with pytest.raises(CircleCompletedError):
            circle_service.deposit(circle.id, "alice")


class TestLateDeposit:
    """Deposits made after the cycle became due."""

    def test_late_deposit_is_penalized(self, active_circle, circle_service, deterministic_clock):
        deterministic_clock.advance(CYCLE_INTERVAL + 1)
        state = circle_service.deposit(active_circle.id, "bob")

        assert state.has_deposited
        assert state.reputation_score == 9
        assert state.penalties_accrued == DEPOSIT * 1_000 // 10_000
        assert state.late_deposits == 1

        actions = [e.action for e in circle_service.list_events(active_circle.id)]
        assert actions[-2:] == ["deposit_received", "penalty_applied"]

    def test_deposit_exactly_at_due_time_is_on_time(
        self, active_circle, circle_service, deterministic_clock
    ):
        deterministic_clock.advance(CYCLE_INTERVAL)
        state = circle_service.deposit(active_circle.id, "bob")
        assert state.late_deposits == 0
        assert state.reputation_score == 11


class TestLongJoinWindow:
    """Join window longer than the cycle interval: the first cycle's clock
    starts when confirmations become final, not at creation."""

    INTERVAL = 2 * DAY
    DEADLINE = 5 * DAY

    def _circle(self, create_circle):
        return create_circle(
            join=("alice", "bob"),
            cycle_interval_secs=self.INTERVAL,
            join_deadline_secs=self.DEADLINE,
        )

    def test_deposit_right_after_start_is_on_time(
        self, create_circle, circle_service, deterministic_clock
    ):
        circle = self._circle(create_circle)
        deterministic_clock.advance(3 * DAY)
        circle_service.start_circle(circle.id, OWNER)

        state = circle_service.deposit(circle.id, "alice")

        assert state.reputation_score == 11
        assert state.penalties_accrued == 0
        assert state.late_deposits == 0

    def test_deposit_after_deadline_is_on_time(
        self, create_circle, circle_service, deterministic_clock
    ):
        circle = self._circle(create_circle)
        deterministic_clock.advance(self.DEADLINE + 1)

        state = circle_service.deposit(circle.id, "alice")
        assert state.late_deposits == 0
        assert state.reputation_score == 11

    def test_late_once_interval_passed_since_start(
        self, create_circle, circle_service, deterministic_clock
    ):
        circle = self._circle(create_circle)
        deterministic_clock.advance(3 * DAY)
        circle_service.start_circle(circle.id, OWNER)
        deterministic_clock.advance(self.INTERVAL + 1)

        state = circle_service.deposit(circle.id, "bob")
        assert state.late_deposits == 1
        assert state.reputation_score == 9

    def test_execution_waits_a_full_interval_after_start(
        self, create_circle, circle_service, deterministic_clock
    ):
        circle = self._circle(create_circle)
        deterministic_clock.advance(3 * DAY)
        circle_service.start_circle(circle.id, OWNER)
        circle_service.deposit(circle.id, "alice")

        with pytest.raises(TooEarlyError):
            circle_service.execute_cycle(circle.id, "keeper")

        deterministic_clock.advance(self.INTERVAL)
        assert circle_service.execute_cycle(circle.id, "keeper").recipient == "alice"


class TestUndersubscribedDeposit:
    def test_single_confirmed_member_cannot_deposit(
        self, create_circle, circle_service, deterministic_clock, token_ledger
    ):
        circle = create_circle(join=("alice",))
        deterministic_clock.advance(DAY + 1)

        with pytest.raises(InsufficientMembersError) as exc_info:
            circle_service.deposit(circle.id, "alice")

        assert exc_info.value.confirmed == 1
        assert token_ledger.balance_of(ASSET, "alice") == STARTING_BALANCE
        assert circle_service.get_circle(circle.id).escrow_balance == 0
