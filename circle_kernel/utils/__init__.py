"""Utility modules for the circle kernel."""

from circle_kernel.utils.hashing import (
    canonicalize_json,
    hash_circle_event,
    hash_payload,
)

__all__ = [
    "canonicalize_json",
    "hash_circle_event",
    "hash_payload",
]
