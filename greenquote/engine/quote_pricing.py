from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Any, Dict, List, Optional, Sequence

from greenquote.schemas.pricing import PricingConfig

from .pricing import TieredPrice, price_area, price_area_flat

D = Decimal


class PricingMode(StrEnum):
    TIERED = "tiered"
    FLAT = "flat"


@dataclass(frozen=True)
class QuoteSelection:
    service: str = "mowing"
    add_on_ids: Sequence[str] = ()
    frequency: str = "bi_weekly"


@dataclass(frozen=True)
class PriceLine:
    label: str
    amount: float
    note: str = ""


@dataclass(frozen=True)
class QuotePrice:
    area_sqft: float
    pricing_mode: PricingMode
    area_subtotal: float
    base_price: float
    min_price_applied: bool
    add_ons_total: float
    multiplier: float
    visits_per_month: int
    per_visit: float
    monthly: float
    breakdown: List[PriceLine] = field(default_factory=list)
    add_ons: List[Dict[str, Any]] = field(default_factory=list)
    tiers_snapshot: Optional[List[Dict[str, Any]]] = None
    flat_rate_snapshot: Optional[float] = None


def _whole_units(value: float) -> float:
    return float(D(str(value)).quantize(D("1"), rounding=ROUND_HALF_UP))


def area_subtotal(area_sqft: float, config: PricingConfig) -> tuple[PricingMode, TieredPrice]:
    """Both pricing modes hand back the same shape."""
    if config.use_tiered_pricing and config.tiers:
        return PricingMode.TIERED, price_area(area_sqft, config.tier_dicts())
    return PricingMode.FLAT, price_area_flat(area_sqft, config.flat_rate_per_sqft)


def price_quote(area_sqft: float, config: PricingConfig, selection: QuoteSelection) -> QuotePrice:
    """
    Area subtotal -> minimum floor -> add-ons -> frequency multiplier -> monthly.
    """
    mode, area_price = area_subtotal(area_sqft, config)
    breakdown: List[PriceLine] = []

    if mode == PricingMode.TIERED:
        for tier in area_price.breakdown:
            breakdown.append(
                PriceLine(
                    label=f"{tier.sqft_in_tier:,.0f} sq ft @ ${tier.rate:.4f}/sqft",
                    amount=tier.price,
                )
            )
    else:
        breakdown.append(
            PriceLine(
                label=f"Base service ({area_sqft:,.0f} sq ft x ${config.flat_rate_per_sqft:.4f})",
                amount=area_price.total_price,
            )
        )

    subtotal = area_price.total_price
    min_price = config.min_price_per_visit
    base_price = max(subtotal, min_price)
    min_applied = subtotal < min_price
    if min_applied:
        breakdown.append(
            PriceLine(
                label="Minimum price applied",
                amount=round(min_price - subtotal, 2),
                note=f"(min ${min_price:g})",
            )
        )

    add_ons_by_id = {a.id: a for a in config.add_ons}
    selected: List[Dict[str, Any]] = []
    add_ons_total = 0.0
    for add_on_id in selection.add_on_ids:
        add_on = add_ons_by_id.get(add_on_id)
        if add_on is None:
            continue
        add_ons_total += add_on.price_per_visit
        selected.append({"id": add_on.id, "name": add_on.name, "price": add_on.price_per_visit})
        breakdown.append(PriceLine(label=add_on.name, amount=add_on.price_per_visit))

    freq = config.frequencies.get(selection.frequency)
    multiplier = freq.multiplier if freq else 1.0
    visits = freq.visits_per_month if freq else 1

    per_visit = _whole_units((base_price + add_ons_total) * multiplier)
    monthly = per_visit * visits

    return QuotePrice(
        area_sqft=area_sqft,
        pricing_mode=mode,
        area_subtotal=subtotal,
        base_price=_whole_units(base_price),
        min_price_applied=min_applied,
        add_ons_total=_whole_units(add_ons_total),
        multiplier=multiplier,
        visits_per_month=visits,
        per_visit=per_visit,
        monthly=monthly,
        breakdown=breakdown,
        add_ons=selected,
        tiers_snapshot=config.tier_dicts() if mode == PricingMode.TIERED else None,
        flat_rate_snapshot=config.flat_rate_per_sqft if mode == PricingMode.FLAT else None,
    )
