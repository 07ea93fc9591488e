# greenquote/schemas/quote.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .pricing import PricingTierModel

Coordinate = Dict[str, float]  # {"lat": ..., "lng": ...}


class QuoteRecordCreate(BaseModel):
    """What gets persisted when a quote is saved; pricing is snapshotted."""

    model_config = ConfigDict(extra="forbid")

    account_id: str
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    property_address: Optional[str] = None
    property_type: Literal["residential", "commercial"] = "residential"

    area_sq_ft: float = Field(0, ge=0)
    area_source: Literal["measured", "estimated", "none"] = "none"
    polygons: List[List[Coordinate]] = Field(default_factory=list)

    pricing_mode: Literal["tiered", "flat"] = "tiered"
    pricing_tiers_snapshot: Optional[List[PricingTierModel]] = None
    flat_rate_snapshot: Optional[float] = None

    service: Optional[str] = None
    add_ons: List[Dict[str, Any]] = Field(default_factory=list)
    frequency: Optional[str] = None
    base_price_per_visit: float = 0.0
    total_price_per_visit: float = 0.0
    monthly_estimate: float = 0.0


class QuoteRecordOut(QuoteRecordCreate):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: str
    created_at: datetime


# -----------------------------
# API payloads
# -----------------------------


class SelectionIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    service: str = "mowing"
    add_on_ids: List[str] = Field(default_factory=list)
    frequency: str = "bi_weekly"


class PriceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    account_id: Optional[str] = None
    area_sqft: float = Field(..., ge=0)
    selection: SelectionIn = Field(default_factory=SelectionIn)


class PriceLineOut(BaseModel):
    label: str
    amount: float
    note: str = ""


class QuotePriceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    area_sqft: float
    pricing_mode: Literal["tiered", "flat"]
    area_subtotal: float
    base_price: float
    min_price_applied: bool
    add_ons_total: float
    multiplier: float
    visits_per_month: int
    per_visit: float
    monthly: float
    breakdown: List[PriceLineOut] = Field(default_factory=list)
    add_ons: List[Dict[str, Any]] = Field(default_factory=list)
    tiers_snapshot: Optional[List[Dict[str, Any]]] = None
    flat_rate_snapshot: Optional[float] = None


class EstimateRequest(BaseModel):
    """Either a resolved place (places-autocomplete JSON) or free address text."""

    model_config = ConfigDict(extra="forbid")

    account_id: Optional[str] = None
    place: Optional[Dict[str, Any]] = None
    address: Optional[str] = None
    property_type: Literal["residential", "commercial"] = "residential"
    selection: SelectionIn = Field(default_factory=SelectionIn)


class EstimateOut(BaseModel):
    state: str
    area_source: Literal["measured", "estimated", "none"]
    total_sqft: int
    polygon_count: int
    polygons: List[List[Coordinate]]
    road_direction: Optional[float] = None
    layout: Optional[str] = None
    zoom_hint: Optional[int] = None
    formatted_address: str = ""
    price: QuotePriceOut
