from __future__ import annotations

from functools import lru_cache

from greenquote.engine.geo import AddressResolver
from greenquote.services.geocoding import GoogleGeocoder


@lru_cache(maxsize=1)
def _geocoder() -> GoogleGeocoder:
    return GoogleGeocoder()


def get_address_resolver() -> AddressResolver:
    """Override in tests with app.dependency_overrides."""
    return _geocoder()
