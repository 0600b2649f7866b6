"""
Tests for circle lifecycle rules: join window, confirmation finality,
cycle due time and phase.
"""

from datetime import datetime, timedelta, timezone

from circle_kernel.domain.lifecycle import (
    CirclePhase,
    confirmations_final,
    cycle_due_at,
    first_cycle_opened_at,
    join_window_open,
    phase_of,
    round_length,
)

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
DEADLINE_SECS = 3600


class TestJoinWindow:
    def test_open_until_deadline_inclusive(self):
        at_deadline = CREATED + timedelta(seconds=DEADLINE_SECS)
        assert join_window_open(at_deadline, CREATED, DEADLINE_SECS, None)
        assert not join_window_open(at_deadline + timedelta(seconds=1), CREATED, DEADLINE_SECS, None)

    def test_closed_once_started(self):
        assert not join_window_open(CREATED, CREATED, DEADLINE_SECS, started_at=CREATED)


class TestConfirmationsFinal:
    def test_final_when_everyone_joined(self):
        assert confirmations_final(CREATED, CREATED, DEADLINE_SECS, None, 3, 3)

    def test_not_final_while_window_open(self):
        assert not confirmations_final(CREATED, CREATED, DEADLINE_SECS, None, 2, 3)

    def test_final_after_deadline(self):
        later = CREATED + timedelta(seconds=DEADLINE_SECS + 1)
        assert confirmations_final(later, CREATED, DEADLINE_SECS, None, 2, 3)

    def test_final_when_started(self):
        assert confirmations_final(CREATED, CREATED, DEADLINE_SECS, CREATED, 2, 3)


class TestCycleTiming:
    def test_due_at_adds_interval(self):
        assert cycle_due_at(CREATED, 60) == CREATED + timedelta(seconds=60)

    def test_first_cycle_opens_at_explicit_start(self):
        started = CREATED + timedelta(seconds=600)
        joined = [CREATED, CREATED + timedelta(seconds=60)]
        assert first_cycle_opened_at(CREATED, DEADLINE_SECS, started, joined, 3) == started

    def test_first_cycle_opens_at_last_join_when_everyone_joined(self):
        last = CREATED + timedelta(seconds=900)
        joined = [CREATED, last, CREATED + timedelta(seconds=60)]
        assert first_cycle_opened_at(CREATED, DEADLINE_SECS, None, joined, 3) == last

    def test_first_cycle_opens_at_deadline_otherwise(self):
        joined = [CREATED, CREATED + timedelta(seconds=60)]
        assert first_cycle_opened_at(CREATED, DEADLINE_SECS, None, joined, 3) == (
            CREATED + timedelta(seconds=DEADLINE_SECS)
        )


class TestPhase:
    def test_phases(self):
        assert phase_of(False, 0, 0) is CirclePhase.JOINING
        assert phase_of(True, 1, 3) is CirclePhase.CYCLING
        assert phase_of(True, 3, 3) is CirclePhase.COMPLETED

    def test_too_few_participants_never_completes(self):
        assert phase_of(True, 0, 1) is CirclePhase.UNDERSUBSCRIBED
        assert phase_of(True, 0, 0) is CirclePhase.UNDERSUBSCRIBED
        assert round_length(True, 1, 3) == 0

    def test_round_length_counts_confirmed_once_final(self):
        assert round_length(False, 2, 4) == 4
        assert round_length(True, 2, 4) == 2
