from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from greenquote.core.errors import GeocodingError
from greenquote.core.logging_config import logger
from greenquote.core.settings import settings
from greenquote.engine.geo import Place

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleGeocoder:
    """Resolves free-text addresses through the Google Geocoding API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key or settings.GOOGLE_MAPS_API_KEY
        self.timeout_s = timeout_s or settings.GEOCODER_TIMEOUT_S
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.get(GEOCODE_URL, params=params, timeout=self.timeout_s)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error("geocoder_request_failed", error=str(e))
            raise GeocodingError(f"Geocoder request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError("Geocoder returned invalid JSON") from e

    def resolve(self, text: str) -> Optional[Place]:
        """
        First match for the address, or None when nothing matches.
        Quota/key problems raise GeocodingError; they are not "not found".
        """
        if not self.enabled:
            raise GeocodingError("GOOGLE_MAPS_API_KEY is not configured")

        query = (text or "").strip()
        if not query:
            return None

        payload = self._request({"address": query, "key": self.api_key})
        status = payload.get("status")

        if status == "ZERO_RESULTS":
            logger.info("geocoder_no_results", query=query)
            return None
        if status != "OK":
            raise GeocodingError(
                f"Geocoder status {status}",
                {"status": status, "detail": payload.get("error_message")},
            )

        results = payload.get("results") or []
        if not results:
            return None
        return Place.from_google_result(results[0])
