# greenquote/schemas/pricing.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat

from greenquote.engine.pricing import DEFAULT_PRICING_TIERS


class PricingTierModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    up_to_sqft: Optional[int] = Field(None, description="Tier ceiling; null = no limit")
    rate_per_sqft: PositiveFloat


class AddOn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str = ""
    price_per_visit: float = Field(0.0, ge=0)


class FrequencyOption(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str
    multiplier: PositiveFloat = 1.0
    visits_per_month: int = Field(1, ge=1)


DEFAULT_FREQUENCIES: Dict[str, FrequencyOption] = {
    "one_time": FrequencyOption(label="One-Time", multiplier=1.2, visits_per_month=1),
    "weekly": FrequencyOption(label="Weekly", multiplier=0.85, visits_per_month=4),
    "bi_weekly": FrequencyOption(label="Bi-Weekly", multiplier=1.0, visits_per_month=2),
    "monthly": FrequencyOption(label="Monthly", multiplier=1.1, visits_per_month=1),
}


class DefaultAreaEstimates(BaseModel):
    model_config = ConfigDict(extra="forbid")

    residential: int = Field(8000, gt=0)
    commercial: int = Field(15000, gt=0)
    zip_overrides: Dict[str, int] = Field(default_factory=dict)


class PricingConfig(BaseModel):
    """Account pricing configuration as loaded from persistence."""

    model_config = ConfigDict(extra="forbid")

    use_tiered_pricing: bool = True
    tiers: List[PricingTierModel] = Field(
        default_factory=lambda: [PricingTierModel(**t.as_dict()) for t in DEFAULT_PRICING_TIERS]
    )
    flat_rate_per_sqft: float = Field(0.01, ge=0)
    min_price_per_visit: float = Field(50.0, ge=0)
    add_ons: List[AddOn] = Field(default_factory=list)
    frequencies: Dict[str, FrequencyOption] = Field(
        default_factory=lambda: {k: v.model_copy() for k, v in DEFAULT_FREQUENCIES.items()}
    )
    default_areas: DefaultAreaEstimates = Field(default_factory=DefaultAreaEstimates)

    def tier_dicts(self) -> List[dict]:
        return [t.model_dump() for t in self.tiers]
