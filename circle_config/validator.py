"""
Policy set validator.

Checks a parsed ``CirclePolicySet`` before it is bridged into the kernel.
Collects every problem instead of stopping at the first so a reviewer sees
the whole list at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from circle_config.schema import CirclePolicySet
from circle_kernel.domain.policy import BASIS_POINTS, PayoutPolicy


@dataclass
class ConfigValidationResult:
    """Accumulated validation errors and warnings."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_policy_set(policy_set: CirclePolicySet) -> ConfigValidationResult:
    result = ConfigValidationResult()
    _validate_reputation(policy_set, result)
    _validate_fines(policy_set, result)

    valid_policies = {p.value for p in PayoutPolicy}
    if policy_set.payout_policy not in valid_policies:
        result.add_error(
            f"payout_policy {policy_set.payout_policy!r} not in {sorted(valid_policies)}"
        )
    if policy_set.version < 1:
        result.add_error(f"version must be >= 1, got {policy_set.version}")
    return result


def _validate_reputation(policy_set: CirclePolicySet, result: ConfigValidationResult) -> None:
    rep = policy_set.reputation
    for name in ("initial", "deposit_reward", "missed_penalty", "late_penalty", "floor"):
        if getattr(rep, name) < 0:
            result.add_error(f"reputation.{name} must be non-negative")
    if rep.initial < rep.floor:
        result.add_error(
            f"reputation.initial ({rep.initial}) is below reputation.floor ({rep.floor})"
        )
    if rep.deposit_reward == 0:
        result.add_warning("reputation.deposit_reward is 0; on-time deposits earn nothing")


def _validate_fines(policy_set: CirclePolicySet, result: ConfigValidationResult) -> None:
    fines = policy_set.fines
    for name in ("missed_bps", "late_bps"):
        value = getattr(fines, name)
        if not 0 <= value <= BASIS_POINTS:
            result.add_error(f"fines.{name} must be within 0..{BASIS_POINTS}, got {value}")
