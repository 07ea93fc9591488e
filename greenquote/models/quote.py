from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from greenquote.db import Base


class QuoteORM(Base):
    __tablename__ = "quotes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid4().hex)
    account_id: Mapped[str] = mapped_column(String(64), index=True)

    customer_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    property_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_type: Mapped[str] = mapped_column(String(20), default="residential")

    area_sq_ft: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    area_source: Mapped[str] = mapped_column(String(20), default="none")  # measured | estimated | none
    polygons: Mapped[list[Any]] = mapped_column(JSON, default=list)

    # pricing history survives later configuration changes
    pricing_mode: Mapped[str] = mapped_column(String(20), default="tiered")  # tiered | flat
    pricing_tiers_snapshot: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    flat_rate_snapshot: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 6, asdecimal=False), nullable=True
    )

    service: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    add_ons: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    frequency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    base_price_per_visit: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)
    total_price_per_visit: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)
    monthly_estimate: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
