"""Unit tests for friendly names and URL building."""

import pytest

from src.request import build_url, friendly_name


class TestFriendlyName:
    """Tests for friendly_name."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("integrations.WidgetLookup_v2", "Widget Lookup v"),
            ("CreditApplication", "Credit Application"),
            ("vehicle_history_report", "vehicle history report"),
            ("", "Anonymous Request"),
            ("integrations.42", "Anonymous Request"),
        ],
    )
    def test_names(self, name: str, expected: str) -> None:
        """Test word splitting of type names."""
        assert friendly_name(name) == expected


class TestBuildUrl:
    """Tests for build_url."""

    @pytest.mark.unit
    def test_path_replaces_base_path(self) -> None:
        """Test that the path is taken from the argument."""
        assert build_url("https://api.example.com/ignored", "/v1/widgets") == (
            "https://api.example.com/v1/widgets"
        )

    @pytest.mark.unit
    def test_query_params(self) -> None:
        """Test that query parameters are encoded in order."""
        assert build_url(
            "https://api.example.com", "/search", {"q": "ford f-150", "page": 2}
        ) == "https://api.example.com/search?q=ford+f-150&page=2"

    @pytest.mark.unit
    def test_stable(self) -> None:
        """Test that equal arguments give equal URLs."""
        params = {"b": "2", "a": "1"}
        assert build_url("https://x.test", "/p", params) == build_url("https://x.test", "/p", dict(params))
