"""
CirclePolicySet schema.

Defines the human-authored, reviewable source artifact for circle policy.
YAML files are parsed into these types by the loader, checked by the
validator and bridged into the kernel's ``CirclePolicy`` by ``bridges``.

Key distinction:
  CirclePolicySet = source artifact (human-authored, versioned, checksummed)
  CirclePolicy    = runtime artifact (kernel value object frozen per circle)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReputationRules:
    """Reputation score movements."""

    initial: int
    deposit_reward: int
    missed_penalty: int
    late_penalty: int
    floor: int = 0


@dataclass(frozen=True)
class FineRules:
    """Fines accrued into ``penalties_accrued``, in basis points of the deposit."""

    missed_bps: int
    late_bps: int


@dataclass(frozen=True)
class CirclePolicySet:
    """A complete, versioned policy configuration."""

    set_id: str
    version: int
    reputation: ReputationRules
    fines: FineRules
    payout_policy: str
    description: str = ""
    checksum: str = ""
