"""
Configuration Loader (``circle_config.loader``).

Responsibility
--------------
Loads policy YAML files and parses them into typed ``circle_config.schema``
dataclass instances.  Runtime callers go through
``circle_config.get_active_policy()`` instead of calling this directly.

Invariants enforced
-------------------
* Required keys are never defaulted silently; a missing key raises
  ``KeyError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-integer values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from circle_config.schema import CirclePolicySet, FineRules, ReputationRules


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _as_int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def parse_reputation(data: dict[str, Any]) -> ReputationRules:
    return ReputationRules(
        initial=_as_int(data, "initial"),
        deposit_reward=_as_int(data, "deposit_reward"),
        missed_penalty=_as_int(data, "missed_penalty"),
        late_penalty=_as_int(data, "late_penalty"),
        floor=_as_int(data, "floor") if "floor" in data else 0,
    )


def parse_fines(data: dict[str, Any]) -> FineRules:
    return FineRules(
        missed_bps=_as_int(data, "missed_bps"),
        late_bps=_as_int(data, "late_bps"),
    )


def parse_policy_set(data: dict[str, Any]) -> CirclePolicySet:
    """Parse a policy set dict (as loaded from YAML) into a CirclePolicySet."""
    return CirclePolicySet(
        set_id=str(data["set_id"]),
        version=_as_int(data, "version"),
        description=str(data.get("description", "")),
        reputation=parse_reputation(data["reputation"]),
        fines=parse_fines(data["fines"]),
        payout_policy=str(data["payout_policy"]),
        checksum=compute_checksum(data),
    )


def load_policy_set(path: Path) -> CirclePolicySet:
    return parse_policy_set(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums, regardless of
    key order in the source file.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
