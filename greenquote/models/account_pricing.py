from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from greenquote.db import Base


class AccountPricingORM(Base):
    __tablename__ = "account_pricing"

    account_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    use_tiered_pricing: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # ordered ascending by up_to_sqft; last tier has up_to_sqft = null
    sqft_pricing_tiers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    price_per_sq_ft: Mapped[float] = mapped_column(Numeric(10, 6, asdecimal=False), default=0.01)
    min_price_per_visit: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=50)

    add_ons: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    frequencies: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    default_areas: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
