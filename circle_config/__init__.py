"""
circle_config -- single public entrypoint for circle policy configuration.

Responsibility:
    Provides the way to obtain the circle policy at runtime through
    ``get_active_policy()``.  Loads a YAML policy set, validates it,
    checksums it and bridges it into the kernel's ``CirclePolicy``.

Architecture position:
    Configuration -- sits above ``circle_kernel``.  The kernel MUST NEVER
    import from ``circle_config``.

Failure modes:
    - ``FileNotFoundError`` -- the policy file does not exist.
    - ``KeyError`` -- a required key is missing.
    - ``ValueError`` -- type or validation failures.

Audit relevance:
    Every successful ``get_active_policy()`` call emits a
    ``circle_config_trace`` log entry with the set id, version and
    checksum, tying circles created afterwards to the exact policy file.
"""

from __future__ import annotations

from pathlib import Path

from circle_config.bridges import build_circle_policy
from circle_config.loader import load_policy_set
from circle_config.validator import validate_policy_set
from circle_kernel.domain.policy import CirclePolicy
from circle_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_policy(path: Path | str | None = None) -> CirclePolicy:
    """
    Load, validate and bridge a policy set.

    Args:
        path: YAML policy file.  Defaults to ``circle_config/sets/default.yaml``.

    Returns:
        The kernel CirclePolicy described by the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the policy set fails validation.
    """
    policy_path = Path(path) if path is not None else DEFAULT_POLICY_PATH
    policy_set = load_policy_set(policy_path)

    validation = validate_policy_set(policy_set)
    if not validation.is_valid:
        raise ValueError(
            "Policy validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("circle_config_warning", extra={"detail": warning})

    policy = build_circle_policy(policy_set)

    _logger.info(
        "circle_config_trace",
        extra={
            "trace_type": "circle_config_trace",
            "config_set_id": policy_set.set_id,
            "config_set_version": policy_set.version,
            "checksum": policy_set.checksum,
            "source": str(policy_path),
            "payout_policy": policy.payout_policy.value,
        },
    )
    return policy


__all__ = ["DEFAULT_POLICY_PATH", "get_active_policy"]
