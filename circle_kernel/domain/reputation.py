"""
Reputation -- pure penalty and reputation arithmetic.

Responsibility:
    Computes a member's new standing after a timely deposit, a late deposit,
    a missed deposit, or a refund claim.  Every function takes a frozen
    ``MemberStanding`` and returns a new one; persistence is the service
    layer's job.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Reputation never drops below ``policy.reputation_floor`` (itself >= 0),
      so repeated misses cannot spiral below the floor.
    - ``penalties_accrued`` never goes negative.
"""

from dataclasses import dataclass, replace

from circle_kernel.domain.policy import CirclePolicy


@dataclass(frozen=True)
class MemberStanding:
    """Reputation and penalty state of one member slot."""

    reputation_score: int
    penalties_accrued: int = 0
    last_deposit_cycle: int = 0
    missed_deposits: int = 0
    late_deposits: int = 0

    def __post_init__(self) -> None:
        if self.reputation_score < 0:
            raise ValueError(f"reputation_score must be >= 0, got {self.reputation_score}")
        if self.penalties_accrued < 0:
            raise ValueError(f"penalties_accrued must be >= 0, got {self.penalties_accrued}")


def initial_standing(policy: CirclePolicy) -> MemberStanding:
    return MemberStanding(reputation_score=policy.initial_reputation)


def _lower(score: int, amount: int, policy: CirclePolicy) -> int:
    return max(policy.reputation_floor, score - amount)


def apply_deposit(
    standing: MemberStanding,
    policy: CirclePolicy,
    deposit_amount: int,
    funded_cycle: int,
    late: bool,
) -> MemberStanding:
    """
    Standing after a successful deposit funding ``funded_cycle``.

    A timely deposit earns ``reputation_reward``.  A late one (made after the
    cycle was already due) loses ``late_reputation_penalty`` and accrues the
    late fine instead.
    """
    if not late:
        return replace(
            standing,
            reputation_score=standing.reputation_score + policy.reputation_reward,
            last_deposit_cycle=funded_cycle,
        )
    return replace(
        standing,
        reputation_score=_lower(standing.reputation_score, policy.late_reputation_penalty, policy),
        penalties_accrued=standing.penalties_accrued + policy.late_fine(deposit_amount),
        last_deposit_cycle=funded_cycle,
        late_deposits=standing.late_deposits + 1,
    )


def apply_missed_deposit(
    standing: MemberStanding,
    policy: CirclePolicy,
    deposit_amount: int,
) -> MemberStanding:
    """Standing after a cycle closed without this member's deposit."""
    return replace(
        standing,
        reputation_score=_lower(standing.reputation_score, policy.missed_reputation_penalty, policy),
        penalties_accrued=standing.penalties_accrued + policy.missed_fine(deposit_amount),
        missed_deposits=standing.missed_deposits + 1,
    )


def apply_refund(standing: MemberStanding) -> MemberStanding:
    """Standing after the accrued amount was paid out to the member."""
    return replace(standing, penalties_accrued=0)
