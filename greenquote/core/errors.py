from __future__ import annotations

from typing import Any, Dict, Optional


class GreenQuoteError(Exception):
    """
    Base class for domain errors.
    Carries a stable machine code so routers can map it to an HTTP response.
    """

    code: str = "greenquote_error"

    def __init__(self, message: str, meta: Optional[Dict[str, Any]] = None):
        self.message = str(message)
        self.meta = meta or {}
        super().__init__(f"{self.code}: {self.message}")

    def to_detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.meta}


class PolygonNotFound(GreenQuoteError, KeyError):
    code = "polygon_not_found"

    def __init__(self, polygon_id: str):
        super().__init__(f"Unknown polygon: {polygon_id}", {"polygon_id": polygon_id})


class GeocodingError(GreenQuoteError):
    code = "geocoding_failed"


class InvalidPricingConfig(GreenQuoteError):
    code = "invalid_pricing_config"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors), {"errors": self.errors})


class QuoteNotFound(GreenQuoteError):
    code = "quote_not_found"

    def __init__(self, quote_id: str):
        super().__init__(f"Quote {quote_id} not found", {"quote_id": quote_id})
