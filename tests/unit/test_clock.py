"""Tests for the injectable clocks."""

from datetime import datetime, timedelta, timezone

import pytest

from circle_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:
    def test_stable_until_advanced(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()
        start = clock.now()
        clock.advance(90)
        assert clock.now() - start == timedelta(seconds=90)

    def test_cannot_move_backwards(self):
        with pytest.raises(ValueError):
            DeterministicClock().advance(-1)

    def test_set_time_resets_offset(self):
        clock = DeterministicClock()
        clock.advance(3600)
        target = datetime(2025, 6, 1, tzinfo=timezone.utc)
        clock.set_time(target)
        assert clock.now() == target

    def test_now_utc_normalizes(self):
        offset = timezone(timedelta(hours=2))
        clock = DeterministicClock(datetime(2024, 1, 1, 14, 0, tzinfo=offset))
        assert clock.now_utc() == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert clock.now_utc().tzinfo == timezone.utc


class TestSystemClock:
    def test_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None
        assert SystemClock().now_utc().tzinfo == timezone.utc
