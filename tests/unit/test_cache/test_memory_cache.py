"""Unit tests for the in-process tagged cache."""

import asyncio
from datetime import datetime, timedelta

import pytest

from src.cache import MemoryTaggedCache, tag_namespace

from tests.helpers.time import FIXED_NOW


class FakeClock:
    """Settable clock."""

    def __init__(self) -> None:
        self.now = FIXED_NOW

    def __call__(self) -> datetime:
        return self.now


class TestTagNamespace:
    """Tests for tag_namespace."""

    @pytest.mark.unit
    def test_order_and_duplicates_are_ignored(self) -> None:
        """Test that equal tag sets give equal namespaces."""
        assert tag_namespace(["b", "a", "b"]) == tag_namespace(("a", "b")) == '["a","b"]'

    @pytest.mark.unit
    def test_empty(self) -> None:
        """Test the namespace of untagged entries."""
        assert tag_namespace(()) == "[]"

    @pytest.mark.unit
    def test_separator_characters_cannot_collide(self) -> None:
        """Test that a tag containing a separator is not a pair of tags."""
        assert tag_namespace(("a", "b")) != tag_namespace(("a|b",))
        assert tag_namespace(("a", "b")) != tag_namespace(("a\",\"b",))


class TestMemoryTaggedCache:
    """Tests for MemoryTaggedCache."""

    @pytest.mark.unit
    def test_put_then_get(self) -> None:
        """Test a simple round trip."""
        cache = MemoryTaggedCache(clock=FakeClock())

        asyncio.run(cache.put("k", ["t"], {"a": [1]}, None))

        assert asyncio.run(cache.get("k", ["t"])) == {"a": [1]}
        assert asyncio.run(cache.has("k", ["t"]))

    @pytest.mark.unit
    def test_joined_tag_is_a_different_set(self) -> None:
        """Test that a single tag spelled like two tags misses."""
        cache = MemoryTaggedCache()

        asyncio.run(cache.put("k", ("a", "b"), "value-for-a-and-b", None))

        assert asyncio.run(cache.get("k", ("a|b",))) is None
        assert asyncio.run(cache.forget("k", ("a|b",))) is False
        assert asyncio.run(cache.get("k", ("b", "a"))) == "value-for-a-and-b"

    @pytest.mark.unit
    def test_values_are_copied(self) -> None:
        """Test that callers cannot mutate stored values."""
        cache = MemoryTaggedCache()
        value = {"a": [1]}

        asyncio.run(cache.put("k", [], value, None))
        value["a"].append(2)
        fetched = asyncio.run(cache.get("k", []))
        fetched["a"].append(3)

        assert asyncio.run(cache.get("k", [])) == {"a": [1]}

    @pytest.mark.unit
    def test_tag_set_scopes_lookups(self) -> None:
        """Test that a key is only visible under the tags it was written with."""
        cache = MemoryTaggedCache()

        asyncio.run(cache.put("k", ["a", "b"], 1, None))

        assert asyncio.run(cache.get("k", ["b", "a"])) == 1
        assert asyncio.run(cache.get("k", ["a"])) is None
        assert asyncio.run(cache.get("k", [])) is None

    @pytest.mark.unit
    def test_expiry(self) -> None:
        """Test that entries vanish at their expiry instant."""
        clock = FakeClock()
        cache = MemoryTaggedCache(clock=clock)
        asyncio.run(cache.put("k", [], 1, FIXED_NOW + timedelta(minutes=5)))

        clock.now = FIXED_NOW + timedelta(minutes=4)
        assert asyncio.run(cache.has("k", []))

        clock.now = FIXED_NOW + timedelta(minutes=5)
        assert not asyncio.run(cache.has("k", []))
        assert len(cache) == 0

    @pytest.mark.unit
    def test_forget(self) -> None:
        """Test that forget reports whether something was removed."""
        cache = MemoryTaggedCache()
        asyncio.run(cache.put("k", ["t"], 1, None))

        assert asyncio.run(cache.forget("k", ["t"])) is True
        assert asyncio.run(cache.forget("k", ["t"])) is False

    @pytest.mark.unit
    def test_flush_by_tag(self) -> None:
        """Test that flushing a tag drops every entry carrying it."""
        cache = MemoryTaggedCache()
        asyncio.run(cache.put("k1", ["vehicle", "dealer-1"], 1, None))
        asyncio.run(cache.put("k2", ["vehicle"], 2, None))
        asyncio.run(cache.put("k3", ["dealer-2"], 3, None))

        assert asyncio.run(cache.flush("vehicle")) == 2
        assert len(cache) == 1
        assert asyncio.run(cache.get("k3", ["dealer-2"])) == 3
