"""Unit tests for cache fingerprint derivation."""

import pytest

from src.cache import compute_fingerprint
from src.settings import DEFAULT_CACHE_KEY_SEED


URL = "https://api.example.com/widgets"


class TestComputeFingerprint:
    """Tests for compute_fingerprint."""

    @pytest.mark.unit
    def test_deterministic(self) -> None:
        """Test that equal inputs give equal digests."""
        first = compute_fingerprint("Widget", URL, b'{"id":1}', DEFAULT_CACHE_KEY_SEED)
        second = compute_fingerprint("Widget", URL, b'{"id":1}', DEFAULT_CACHE_KEY_SEED)

        assert first == second
        assert len(first) == 64
        assert set(first) <= set("0123456789abcdef")

    @pytest.mark.unit
    def test_every_input_participates(self) -> None:
        """Test that changing any single input changes the digest."""
        base = compute_fingerprint("Widget", URL, b"x", "seed-1")
        variants = [
            compute_fingerprint("Gadget", URL, b"x", "seed-1"),
            compute_fingerprint("Widget", URL + "/1", b"x", "seed-1"),
            compute_fingerprint("Widget", URL, b"y", "seed-1"),
            compute_fingerprint("Widget", URL, b"x", "seed-2"),
        ]

        assert base not in variants
        assert len(set(variants)) == len(variants)

    @pytest.mark.unit
    def test_no_body_differs_from_empty_body(self) -> None:
        """Test that a missing body and an empty body are distinct."""
        assert compute_fingerprint("Widget", URL, None, "s") != compute_fingerprint(
            "Widget", URL, b"", "s"
        )

    @pytest.mark.unit
    def test_boundaries_are_unambiguous(self) -> None:
        """Test that shifting text between fields cannot collide."""
        assert compute_fingerprint("ab", "c", None, "s") != compute_fingerprint(
            "a", "bc", None, "s"
        )
        assert compute_fingerprint('a","b', "c", None, "s") != compute_fingerprint(
            "a", 'b","c', None, "s"
        )
