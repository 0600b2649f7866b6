"""
Lifecycle -- pure time and phase rules of a circle.

A circle moves through these phases:

    JOINING         -> join window open, no deposits accepted
    CYCLING         -> confirmations final, deposits and executions accepted
    COMPLETED       -> every participant paid once; terminal, still queryable
    UNDERSUBSCRIBED -> confirmations became final with fewer than
                       MIN_MEMBERS participants; terminal, never cycles

Confirmations become final when every listed member has joined, when the
join deadline has passed, or when the owner starts the circle explicitly.
Members still unconfirmed at that point are excluded for good.
"""

from collections.abc import Collection
from datetime import datetime, timedelta
from enum import Enum

MIN_MEMBERS = 2


class CirclePhase(str, Enum):
    JOINING = "joining"
    CYCLING = "cycling"
    COMPLETED = "completed"
    UNDERSUBSCRIBED = "undersubscribed"


def join_deadline(created_at: datetime, join_deadline_secs: int) -> datetime:
    return created_at + timedelta(seconds=join_deadline_secs)


def join_window_open(
    now: datetime,
    created_at: datetime,
    join_deadline_secs: int,
    started_at: datetime | None,
) -> bool:
    """Joining is allowed up to and including the deadline, unless started."""
    return started_at is None and now <= join_deadline(created_at, join_deadline_secs)


def confirmations_final(
    now: datetime,
    created_at: datetime,
    join_deadline_secs: int,
    started_at: datetime | None,
    confirmed_count: int,
    member_count: int,
) -> bool:
    if started_at is not None or confirmed_count == member_count:
        return True
    return now > join_deadline(created_at, join_deadline_secs)


def first_cycle_opened_at(
    created_at: datetime,
    join_deadline_secs: int,
    started_at: datetime | None,
    joined_at: Collection[datetime],
    member_count: int,
) -> datetime:
    """
    Moment confirmations became final, which opens the first deposit window.

    Only meaningful once confirmations are final.  ``joined_at`` holds the
    join times of the confirmed members.
    """
    if started_at is not None:
        return started_at
    if joined_at and len(joined_at) == member_count:
        return max(joined_at)
    return join_deadline(created_at, join_deadline_secs)


def cycle_due_at(opened_at: datetime, cycle_interval_secs: int) -> datetime:
    """End of the cycle window that opened at ``opened_at``."""
    return opened_at + timedelta(seconds=cycle_interval_secs)


def is_undersubscribed(final: bool, confirmed_count: int) -> bool:
    return final and confirmed_count < MIN_MEMBERS


def round_length(final: bool, confirmed_count: int, member_count: int) -> int:
    """Number of executions in a full round (one per participant)."""
    if not final:
        return member_count
    return 0 if is_undersubscribed(final, confirmed_count) else confirmed_count


def phase_of(final: bool, current_cycle: int, confirmed_count: int) -> CirclePhase:
    if not final:
        return CirclePhase.JOINING
    if is_undersubscribed(final, confirmed_count):
        return CirclePhase.UNDERSUBSCRIBED
    if current_cycle >= confirmed_count:
        return CirclePhase.COMPLETED
    return CirclePhase.CYCLING
