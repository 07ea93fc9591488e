from unittest.mock import MagicMock

import pytest
import requests

from greenquote.core.errors import GeocodingError
from greenquote.services.geocoding import GEOCODE_URL, GoogleGeocoder

from .helpers import GOOGLE_RESULT


def _session(payload=None, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        response = MagicMock()
        response.json.return_value = payload
        session.get.return_value = response
    return session


def test_resolve_returns_first_match():
    session = _session({"status": "OK", "results": [GOOGLE_RESULT]})
    place = GoogleGeocoder(api_key="k", timeout_s=3, session=session).resolve(" 12 N Main St ")

    assert place.center.lat == pytest.approx(39.8017)
    assert place.postal_code == "62701"
    assert place.route_name == "North Main Street"
    assert place.is_full_address
    assert place.zoom_hint == 20
    assert place.viewport.north == pytest.approx(39.803)

    session.get.assert_called_once_with(
        GEOCODE_URL, params={"address": "12 N Main St", "key": "k"}, timeout=3
    )


def test_zero_results_is_not_found():
    session = _session({"status": "ZERO_RESULTS", "results": []})
    assert GoogleGeocoder(api_key="k", session=session).resolve("nowhere") is None


def test_blank_query_skips_the_request():
    session = _session({"status": "OK", "results": [GOOGLE_RESULT]})
    assert GoogleGeocoder(api_key="k", session=session).resolve("   ") is None
    session.get.assert_not_called()


def test_denied_request_raises():
    session = _session({"status": "REQUEST_DENIED", "error_message": "bad key"})
    with pytest.raises(GeocodingError) as exc:
        GoogleGeocoder(api_key="k", session=session).resolve("12 N Main St")
    assert exc.value.to_detail()["status"] == "REQUEST_DENIED"
    assert exc.value.to_detail()["error"] == "geocoding_failed"


def test_transport_error_raises():
    session = _session(exc=requests.ConnectionError("down"))
    with pytest.raises(GeocodingError):
        GoogleGeocoder(api_key="k", session=session).resolve("12 N Main St")


def test_missing_key_raises():
    geocoder = GoogleGeocoder(api_key=None, session=_session({}))
    geocoder.api_key = None
    assert not geocoder.enabled
    with pytest.raises(GeocodingError):
        geocoder.resolve("12 N Main St")
