"""
Tiered (banded) square-footage pricing.

Each tier covers the range from the previous tier's ceiling to its own
ceiling, and the price accumulates as sqft_in_tier x rate, like tax brackets:

    25,000 sq ft with the default tiers
      first  5,000 x 0.012 =  60.00
      next  15,000 x 0.008 = 120.00
      final  5,000 x 0.005 =  25.00
                             ------
                             205.00

Everything in this module is a pure function: no I/O, no shared state.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union


@dataclass(frozen=True)
class PricingTier:
    up_to_sqft: Optional[int]  # None = unbounded top tier
    rate_per_sqft: float

    @classmethod
    def coerce(cls, raw: Union["PricingTier", Mapping[str, Any]]) -> "PricingTier":
        if isinstance(raw, PricingTier):
            return raw
        if hasattr(raw, "up_to_sqft") and hasattr(raw, "rate_per_sqft"):
            return cls(raw.up_to_sqft, float(raw.rate_per_sqft))
        up_to = raw.get("up_to_sqft")
        return cls(
            up_to_sqft=None if up_to is None else int(up_to),
            rate_per_sqft=float(raw.get("rate_per_sqft", 0) or 0),
        )

    def as_dict(self) -> dict:
        return {"up_to_sqft": self.up_to_sqft, "rate_per_sqft": self.rate_per_sqft}


TierLike = Union[PricingTier, Mapping[str, Any]]

D = Decimal


def _half_up(value: float, step: str = "0.01") -> float:
    """Currency rounding: half-cents go up, as on a printed quote."""
    if not math.isfinite(value):
        return value
    return float(D(str(value)).quantize(D(step), rounding=ROUND_HALF_UP))

DEFAULT_PRICING_TIERS: List[PricingTier] = [
    PricingTier(5000, 0.012),
    PricingTier(20000, 0.008),
    PricingTier(None, 0.005),
]


@dataclass(frozen=True)
class TierBreakdown:
    range_start: float
    range_end: Optional[float]
    sqft_in_tier: float
    rate: float
    price: float  # unrounded, for transparency

    @property
    def label(self) -> str:
        if self.range_end is None:
            return f"{self.range_start:,.0f}+ sq ft"
        return f"{self.range_start:,.0f}-{self.range_end:,.0f} sq ft"


@dataclass(frozen=True)
class TieredPrice:
    total_price: float
    breakdown: List[TierBreakdown] = field(default_factory=list)


def _ceiling(tier: PricingTier) -> float:
    return math.inf if tier.up_to_sqft is None else float(tier.up_to_sqft)


def sort_tiers(tiers: Iterable[TierLike]) -> List[PricingTier]:
    """Ascending by ceiling; the unbounded tier always sorts last."""
    return sorted((PricingTier.coerce(t) for t in tiers), key=_ceiling)


def price_area(total_sqft: float, tiers: Iterable[TierLike]) -> TieredPrice:
    """
    Blended price for an area. Callers need not pre-sort the schedule.
    Area beyond the last bounded tier of a schedule without an unbounded
    tier is never reached by the walk and contributes nothing.
    """
    if not total_sqft or total_sqft <= 0:
        return TieredPrice(0.0, [])

    remaining = float(total_sqft)
    previous_max = 0.0
    total = 0.0
    breakdown: List[TierBreakdown] = []

    for tier in sort_tiers(tiers):
        ceiling = _ceiling(tier)
        capacity = ceiling - previous_max
        sqft_in_tier = min(remaining, capacity)

        if sqft_in_tier > 0:
            tier_price = sqft_in_tier * tier.rate_per_sqft
            total += tier_price
            breakdown.append(
                TierBreakdown(
                    range_start=previous_max,
                    range_end=None if tier.up_to_sqft is None else ceiling,
                    sqft_in_tier=sqft_in_tier,
                    rate=tier.rate_per_sqft,
                    price=tier_price,
                )
            )
            remaining -= sqft_in_tier

        previous_max = max(previous_max, ceiling)
        if remaining <= 0:
            break

    return TieredPrice(_half_up(total), breakdown)


def price_flat(total_sqft: float, rate_per_sqft: float) -> float:
    if not total_sqft or total_sqft <= 0 or not rate_per_sqft:
        return 0.0
    return _half_up(total_sqft * rate_per_sqft)


def price_area_flat(total_sqft: float, rate_per_sqft: float) -> TieredPrice:
    """Flat-rate mode in the same shape as price_area."""
    total = price_flat(total_sqft, rate_per_sqft)
    if total <= 0:
        return TieredPrice(0.0, [])
    line = TierBreakdown(
        range_start=0.0,
        range_end=None,
        sqft_in_tier=float(total_sqft),
        rate=float(rate_per_sqft),
        price=total_sqft * rate_per_sqft,
    )
    return TieredPrice(total, [line])


def effective_rate(total_price: float, total_sqft: float) -> float:
    if not total_sqft or total_sqft <= 0:
        return 0.0
    return total_price / total_sqft


# -------------------------
# Configuration checks (settings UI / account API, never the price walk)
# -------------------------


@dataclass(frozen=True)
class TierValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_pricing_tiers(tiers: Optional[Sequence[Any]]) -> TierValidation:
    errors: List[str] = []

    if not tiers:
        return TierValidation(False, ["At least one pricing tier is required"])

    raw = list(tiers)
    parsed: List[PricingTier] = []
    for i, t in enumerate(raw, start=1):
        try:
            parsed.append(PricingTier.coerce(t))
        except (TypeError, ValueError, OverflowError, AttributeError):
            errors.append(f"Tier {i}: not a valid tier")
    if errors:
        return TierValidation(False, errors)

    previous_max = 0
    unbounded = 0
    for i, tier in enumerate(sort_tiers(parsed), start=1):
        if not (tier.rate_per_sqft > 0 and math.isfinite(tier.rate_per_sqft)):
            errors.append(f"Tier {i}: Rate must be a positive number")

        if tier.up_to_sqft is None:
            unbounded += 1
            continue

        if tier.up_to_sqft <= 0:
            errors.append(f'Tier {i}: Upper limit must be a positive number or "No limit"')
        elif tier.up_to_sqft <= previous_max:
            errors.append(
                f"Tier {i}: Upper limit must be greater than previous tier ({previous_max})"
            )
        previous_max = max(previous_max, tier.up_to_sqft)

    if unbounded == 0:
        errors.append('Last tier should have "No limit" for upper bound to cover all lawn sizes')
    elif unbounded > 1:
        errors.append('Only one tier may have "No limit" as upper bound')

    return TierValidation(not errors, errors)


@dataclass(frozen=True)
class PricingComparison:
    tiered_price: float
    flat_price: float
    savings: float
    savings_percent: float


def compare_pricing(total_sqft: float, tiers: Iterable[TierLike], flat_rate: float) -> PricingComparison:
    tiered = price_area(total_sqft, tiers).total_price
    flat = price_flat(total_sqft, flat_rate)
    savings = flat - tiered
    pct = (savings / flat) * 100 if flat > 0 else 0.0
    return PricingComparison(
        tiered_price=tiered,
        flat_price=flat,
        savings=_half_up(savings),
        savings_percent=_half_up(pct, "0.1"),
    )
