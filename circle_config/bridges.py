"""
Bridges -- translate validated policy sets into kernel inputs.

The kernel never imports ``circle_config``; this module is the one place
the configuration layer reaches into kernel types.
"""

from __future__ import annotations

from circle_config.schema import CirclePolicySet
from circle_kernel.domain.policy import CirclePolicy, PayoutPolicy


def build_circle_policy(policy_set: CirclePolicySet) -> CirclePolicy:
    """Build the kernel CirclePolicy frozen into each new circle."""
    rep = policy_set.reputation
    return CirclePolicy(
        initial_reputation=rep.initial,
        reputation_reward=rep.deposit_reward,
        missed_reputation_penalty=rep.missed_penalty,
        late_reputation_penalty=rep.late_penalty,
        reputation_floor=rep.floor,
        missed_fine_bps=policy_set.fines.missed_bps,
        late_fine_bps=policy_set.fines.late_bps,
        payout_policy=PayoutPolicy(policy_set.payout_policy),
    )
