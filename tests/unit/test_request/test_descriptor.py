"""Unit tests for request types and request descriptors."""

import pytest

from src.codecs import JsonDecoder, JsonEncoder
from src.request import ApiRequest, CachePolicy, RequestType, build_url
from src.transport import HttpMethod


def vehicle_url(request: ApiRequest) -> str:
    """Derive the vehicle URL from request arguments."""
    return build_url(
        "https://api.example.com",
        f"/dealers/{request.arguments['dealer_id']}/vehicles",
        {"vin": request.arguments.get("vin")} if request.arguments.get("vin") else None,
    )


VEHICLES = RequestType(
    name="integrations.VehicleSearch",
    url=vehicle_url,
    encoder=JsonEncoder(),
    decoder=JsonDecoder(),
    cache_tags=("vehicles",),
)


class TestRequestType:
    """Tests for RequestType defaults."""

    @pytest.mark.unit
    def test_request_inherits_defaults(self) -> None:
        """Test that a new request starts from the type's defaults."""
        request = VEHICLES.request(arguments={"dealer_id": 5})

        assert request.method == HttpMethod.POST
        assert request.cache_tags == ("vehicles",)
        assert request.cache_policy == CachePolicy()
        assert request.friendly_name == "Vehicle Search"

    @pytest.mark.unit
    def test_request_overrides(self) -> None:
        """Test per-call overrides of method, tags and policy."""
        request = VEHICLES.request(
            arguments={"dealer_id": 5},
            method=HttpMethod.GET,
            cache_tags=["dealer-5"],
            cache_policy=CachePolicy(read=False),
        )

        assert request.method == HttpMethod.GET
        assert request.cache_tags == ("dealer-5",)
        assert request.cache_policy.read is False
        assert request.cache_policy.write is True


class TestApiRequest:
    """Tests for ApiRequest."""

    @pytest.mark.unit
    def test_url_follows_state(self) -> None:
        """Test that the URL is derived, never stored."""
        request = VEHICLES.request(arguments={"dealer_id": 5})
        assert request.url == "https://api.example.com/dealers/5/vehicles"

        request.arguments["vin"] = "1FTFW1ET4DFC10312"

        assert request.url == "https://api.example.com/dealers/5/vehicles?vin=1FTFW1ET4DFC10312"

    @pytest.mark.unit
    def test_fluent_policy_setters(self) -> None:
        """Test that the switches are independent and chainable."""
        request = VEHICLES.request(arguments={"dealer_id": 5})

        result = request.set_read_cache(False).set_log(False)

        assert result is request
        assert request.cache_policy == CachePolicy(read=False, write=True, log=False)
        assert VEHICLES.cache_policy == CachePolicy()

    @pytest.mark.unit
    def test_set_body_kv_creates_nesting(self) -> None:
        """Test dotted-path body assignment."""
        request = VEHICLES.request(arguments={"dealer_id": 5})

        request.set_body_kv("customer.address.zip", "60601")
        request.set_body_kv("customer.name", "Ada")

        assert request.body == {"customer": {"address": {"zip": "60601"}, "name": "Ada"}}

    @pytest.mark.unit
    def test_set_body_if_not_empty(self) -> None:
        """Test that empty values are skipped."""
        request = VEHICLES.request(arguments={"dealer_id": 5}, body={})

        request.set_body_if_not_empty("trim", "")
        request.set_body_if_not_empty("color", None)
        request.set_body_if_not_empty("make", "Kia")

        assert request.body == {"make": "Kia"}

    @pytest.mark.unit
    def test_prepare(self) -> None:
        """Test the wire snapshot of a request."""
        request = VEHICLES.request(
            arguments={"dealer_id": 5},
            body={"make": "Kia"},
            headers={"Authorization": "Bearer t", "Content-Type": "text/plain"},
        )

        prepared = request.prepare()

        assert prepared.method == HttpMethod.POST
        assert prepared.url == "https://api.example.com/dealers/5/vehicles"
        assert prepared.body == b'{"make":"Kia"}'
        assert prepared.headers == {
            "Authorization": "Bearer t",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @pytest.mark.unit
    def test_prepare_replaces_codec_headers_in_any_case(self) -> None:
        """Test that lowercase caller headers do not survive next to codec headers."""
        request = VEHICLES.request(
            arguments={"dealer_id": 5},
            headers={"content-type": "text/plain", "ACCEPT": "text/html", "x-trace": "t-1"},
        )

        assert request.prepare().headers == {
            "x-trace": "t-1",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @pytest.mark.unit
    def test_instances_do_not_share_state(self) -> None:
        """Test that mutable state is per instance."""
        first = VEHICLES.request(arguments={"dealer_id": 5})
        second = VEHICLES.request(arguments={"dealer_id": 5})

        first.arguments["vin"] = "X"
        first.context["token"] = "abc"

        assert "vin" not in second.arguments
        assert second.context == {}
        assert second.sent_logs == []
