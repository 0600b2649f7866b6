"""
Tests for refunds, reserve funding and pause/unpause administration.
"""

import pytest

from circle_kernel.domain.dtos import escrow_account_for
from circle_kernel.exceptions import (
    InsufficientEscrowError,
    InvalidAmountError,
    NothingToClaimError,
    TransferFailedError,
    UnauthorizedError,
)
from tests.conftest import ASSET, CYCLE_INTERVAL, DEPOSIT, OWNER, STARTING_BALANCE


@pytest.fixture
def bob_penalized(active_circle, run_cycle):
    """Cycle 1 executed without bob's deposit: bob owes a 20 fine."""
    run_cycle(active_circle.id, ("alice", "carol"))
    return active_circle


class TestClaimRefund:
    def test_nothing_to_claim_without_penalties(self, active_circle, circle_service):
        circle_service.pause(active_circle.id, OWNER)
        with pytest.raises(NothingToClaimError):
            circle_service.claim_refund(active_circle.id, "carol")

    def test_non_member_has_nothing_to_claim(self, active_circle, circle_service):
        with pytest.raises(NothingToClaimError):
            circle_service.claim_refund(active_circle.id, "mallory")

    def test_not_claimable_while_cycling(self, bob_penalized, circle_service):
        with pytest.raises(NothingToClaimError) as exc_info:
            circle_service.claim_refund(bob_penalized.id, "bob")
        assert "paused" in exc_info.value.reason

    def test_insufficient_escrow(self, bob_penalized, circle_service):
        circle_service.pause(bob_penalized.id, OWNER)
        with pytest.raises(InsufficientEscrowError) as exc_info:
            circle_service.claim_refund(bob_penalized.id, "bob")
        assert exc_info.value.requested == 20
        assert exc_info.value.available == 0

    def test_open_cycle_deposits_are_not_refundable(
        self, bob_penalized, circle_service, deterministic_clock, token_ledger
    ):
        circle_service.deposit(bob_penalized.id, "alice")
        circle_service.pause(bob_penalized.id, OWNER)

        with pytest.raises(InsufficientEscrowError) as exc_info:
            circle_service.claim_refund(bob_penalized.id, "bob")
        assert exc_info.value.available == 0
        assert circle_service.get_circle(bob_penalized.id).escrow_balance == DEPOSIT

        circle_service.fund_reserve(bob_penalized.id, "sponsor", 20)
        assert circle_service.claim_refund(bob_penalized.id, "bob") == 20

        circle_service.unpause(bob_penalized.id, OWNER)
        deterministic_clock.advance(CYCLE_INTERVAL)
        result = circle_service.execute_cycle(bob_penalized.id, "keeper")

        assert result.recipient == "bob"
        assert result.payout_amount == DEPOSIT
        assert circle_service.get_circle(bob_penalized.id).escrow_balance == 0
        assert token_ledger.balance_of(ASSET, escrow_account_for(bob_penalized.id)) == 0

    def test_refund_from_reserve_while_paused(self, bob_penalized, circle_service, token_ledger):
        circle_service.fund_reserve(bob_penalized.id, "sponsor", 100)
        circle_service.pause(bob_penalized.id, OWNER)

        refunded = circle_service.claim_refund(bob_penalized.id, "bob")

        assert refunded == 20
        assert token_ledger.balance_of(ASSET, "bob") == STARTING_BALANCE + 20
        assert circle_service.get_member_state(bob_penalized.id, "bob").penalties_accrued == 0
        assert circle_service.get_circle(bob_penalized.id).escrow_balance == 80
        assert token_ledger.balance_of(ASSET, escrow_account_for(bob_penalized.id)) == 80

        with pytest.raises(NothingToClaimError):
            circle_service.claim_refund(bob_penalized.id, "bob")

    def test_refund_after_completion(self, bob_penalized, circle_service, run_cycle):
        run_cycle(bob_penalized.id, ("alice", "bob", "carol"))
        run_cycle(bob_penalized.id, ("alice", "bob", "carol"))
        circle_service.fund_reserve(bob_penalized.id, "sponsor", 20)

        assert circle_service.get_circle(bob_penalized.id).is_completed
        assert circle_service.claim_refund(bob_penalized.id, "bob") == 20

    def test_transfer_failure_leaves_state_unchanged(
        self, bob_penalized, circle_service, token_ledger
    ):
        circle_service.fund_reserve(bob_penalized.id, "sponsor", 100)
        circle_service.pause(bob_penalized.id, OWNER)
        token_ledger.fail_next()

        with pytest.raises(TransferFailedError):
            circle_service.claim_refund(bob_penalized.id, "bob")

        assert circle_service.get_member_state(bob_penalized.id, "bob").penalties_accrued == 20
        assert circle_service.get_circle(bob_penalized.id).escrow_balance == 100


class TestFundReserve:
    def test_reserve_increases_escrow(self, active_circle, circle_service, token_ledger):
        snapshot = circle_service.fund_reserve(active_circle.id, "sponsor", 250)

        assert snapshot.escrow_balance == 250
        assert token_ledger.balance_of(ASSET, "sponsor") == STARTING_BALANCE - 250
        assert circle_service.list_events(active_circle.id)[-1].action == "reserve_funded"

    @pytest.mark.parametrize("amount", [0, -1, True])
    def test_invalid_amount(self, active_circle, circle_service, amount):
        with pytest.raises(InvalidAmountError):
            circle_service.fund_reserve(active_circle.id, "sponsor", amount)

    def test_transfer_failure(self, active_circle, circle_service):
        with pytest.raises(TransferFailedError):
            circle_service.fund_reserve(active_circle.id, "nobody", 10)
        assert circle_service.get_circle(active_circle.id).escrow_balance == 0


class TestPause:
    def test_only_owner_may_pause(self, active_circle, circle_service):
        with pytest.raises(UnauthorizedError):
            circle_service.pause(active_circle.id, "bob")
        with pytest.raises(UnauthorizedError):
            circle_service.unpause(active_circle.id, "bob")

    def test_pause_and_unpause(self, active_circle, circle_service):
        assert circle_service.pause(active_circle.id, OWNER).is_paused
        assert not circle_service.unpause(active_circle.id, OWNER).is_paused
        assert circle_service.deposit(active_circle.id, "bob").has_deposited

    def test_repeated_pause_records_one_event(self, active_circle, circle_service):
        circle_service.pause(active_circle.id, OWNER)
        circle_service.pause(active_circle.id, OWNER)

        actions = [e.action for e in circle_service.list_events(active_circle.id)]
        assert actions.count("circle_paused") == 1

    def test_queries_available_while_paused(self, active_circle, circle_service):
        circle_service.pause(active_circle.id, OWNER)
        assert circle_service.get_circle(active_circle.id).is_paused
        assert circle_service.get_member_state(active_circle.id, "bob").is_member
