import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from infraction_reporter.core.settings import settings
from infraction_reporter.services.geocoding import (
    AddressShape,
    NominatimProvider,
    USIGProvider,
    get_geocoding_provider,
    parse_address_payload,
    reverse_geocode_async,
)

USIG_GET = "infraction_reporter.services.geocoding.usig_provider.requests.get"
NOMINATIM_GET = "infraction_reporter.services.geocoding.nominatim_provider.requests.get"


def _response(status_code=200, payload=None, json_error=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class TestParseAddressPayload:

    def test_direccion_shape(self):
        assert parse_address_payload({"direccion": "Av. Callao 123"}) == (AddressShape.DIRECCION, "Av. Callao 123")

    def test_direccion_normalizada_shape(self):
        shape, address = parse_address_payload({"direccionNormalizada": "CALLAO AV. 123"})
        assert shape is AddressShape.DIRECCION_NORMALIZADA
        assert address == "CALLAO AV. 123"

    def test_calle_altura_shape(self):
        assert parse_address_payload({"calle": "Callao", "altura": "123"}) == (AddressShape.CALLE_ALTURA, "Callao 123")

    def test_calle_without_altura_is_trimmed(self):
        assert parse_address_payload({"calle": "Callao"}) == (AddressShape.CALLE_ALTURA, "Callao")

    def test_direccion_wins_over_other_shapes(self):
        shape, _ = parse_address_payload({"direccion": "A 1", "calle": "B", "altura": 2})
        assert shape is AddressShape.DIRECCION

    @pytest.mark.parametrize("payload", [{}, {"direccion": ""}, {"altura": 5}, [], None, "Callao 123"])
    def test_unrecognized_shapes(self, payload):
        assert parse_address_payload(payload) == (AddressShape.UNRECOGNIZED, None)


class TestUSIGProvider:

    def test_returns_direccion(self):
        with patch(USIG_GET, return_value=_response(payload={"direccion": "Av. Callao 123"})) as get:
            result = USIGProvider().reverse_geocode(-34.6037, -58.3816)

        assert result.to_dict() == {"direccion": "Av. Callao 123"}
        params = get.call_args.kwargs["params"]
        assert params["lat"] == -34.6037
        assert params["lng"] == -58.3816
        assert params["tipoResultado"] == "calle_altura_calle_y_calle"
        assert get.call_args.kwargs["timeout"] == 3.0

    def test_calle_altura_is_joined(self):
        with patch(USIG_GET, return_value=_response(payload={"calle": "Callao", "altura": "123"})):
            result = USIGProvider().reverse_geocode(-34.6, -58.4)
        assert result.to_dict() == {"direccion": "Callao 123"}

    def test_server_error_becomes_error_field(self):
        with patch(USIG_GET, return_value=_response(status_code=500)):
            result = USIGProvider().reverse_geocode(-34.6, -58.4)
        assert set(result.to_dict()) == {"error"}
        assert not result.ok

    def test_unparseable_body_becomes_error_field(self):
        with patch(USIG_GET, return_value=_response(json_error=ValueError("bad json"))):
            result = USIGProvider().reverse_geocode(-34.6, -58.4)
        assert result.error

    def test_network_fault_becomes_error_field(self):
        with patch(USIG_GET, side_effect=requests.ConnectionError("unreachable")):
            result = USIGProvider().reverse_geocode(-34.6, -58.4)
        assert result.error

    def test_unrecognized_shape_becomes_error_field(self):
        with patch(USIG_GET, return_value=_response(payload={"status": "ok"})):
            result = USIGProvider().reverse_geocode(-34.6, -58.4)
        assert result.to_dict() == {"error": "Could not determine the address"}


class TestNominatimProvider:

    def test_road_and_house_number(self):
        payload = {"display_name": "123, Callao, Buenos Aires", "address": {"road": "Callao", "house_number": "123"}}
        with patch(NOMINATIM_GET, return_value=_response(payload=payload)) as get:
            result = NominatimProvider().reverse_geocode(-34.6, -58.4)

        assert result.direccion == "Callao 123"
        assert "User-Agent" in get.call_args.kwargs["headers"]

    def test_falls_back_to_display_name(self):
        with patch(NOMINATIM_GET, return_value=_response(payload={"display_name": "Somewhere"})):
            assert NominatimProvider().reverse_geocode(0, 0).direccion == "Somewhere"

    def test_error_payload(self):
        with patch(NOMINATIM_GET, return_value=_response(payload={"error": "Unable to geocode"})):
            assert NominatimProvider().reverse_geocode(0, 0).error

    def test_timeout(self):
        with patch(NOMINATIM_GET, side_effect=requests.Timeout()):
            assert NominatimProvider().reverse_geocode(0, 0).error


class TestResolver:

    def test_default_is_usig(self):
        provider = get_geocoding_provider()
        assert isinstance(provider, USIGProvider)
        assert provider is get_geocoding_provider()

    def test_nominatim_by_setting(self, monkeypatch):
        monkeypatch.setattr(settings, "GEOCODING_PROVIDER", "nominatim")
        assert isinstance(get_geocoding_provider(), NominatimProvider)

    def test_unknown_provider_falls_back(self, monkeypatch):
        monkeypatch.setattr(settings, "GEOCODING_PROVIDER", "carrier-pigeon")
        assert isinstance(get_geocoding_provider(), USIGProvider)

    def test_async_lookup(self, fake_geocoder):
        result = asyncio.run(reverse_geocode_async(1.5, 2.5, fake_geocoder))
        assert result.direccion == "Av. Callao 123"
        assert fake_geocoder.calls == [(1.5, 2.5)]
