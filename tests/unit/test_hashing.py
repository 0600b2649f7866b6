"""Tests for deterministic hashing used by the event trail."""

from datetime import datetime, timezone
from uuid import UUID

import pytest

from circle_kernel.utils.hashing import canonicalize_json, hash_circle_event, hash_payload


class TestCanonicalJson:
    def test_key_order_does_not_matter(self):
        assert canonicalize_json({"b": 1, "a": 2}) == canonicalize_json({"a": 2, "b": 1})

    def test_special_types(self):
        data = {
            "at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "id": UUID(int=1),
            "tags": {"z", "a"},
        }
        assert canonicalize_json(data) == (
            '{"at":"2024-01-01T00:00:00+00:00",'
            '"id":"00000000-0000-0000-0000-000000000001","tags":["a","z"]}'
        )

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            canonicalize_json({"x": object()})


class TestEventHash:
    def test_hash_payload_is_stable(self):
        assert hash_payload({"amount": 100}) == hash_payload({"amount": 100})
        assert len(hash_payload({})) == 64

    def test_every_component_changes_the_hash(self):
        base = dict(circle_id="c", seq=1, action="deposit_received", payload_hash="p", prev_hash=None)
        reference = hash_circle_event(**base)
        for key, value in [("circle_id", "d"), ("seq", 2), ("action", "x"), ("payload_hash", "q"), ("prev_hash", "h")]:
            assert hash_circle_event(**{**base, key: value}) != reference
