# greenquote/routers/widget.py
from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from greenquote.core.errors import GeocodingError, InvalidPricingConfig
from greenquote.core.logging_config import logger
from greenquote.db import get_db
from greenquote.dependencies import get_address_resolver
from greenquote.engine.geo import AddressResolver, Place
from greenquote.engine.orchestrator import QuoteSession
from greenquote.engine.quote_pricing import QuotePrice, QuoteSelection, price_quote
from greenquote.engine.rules_loader import load_lawn_rules
from greenquote.repositories.pricing import get_pricing_config, upsert_pricing_config
from greenquote.schemas.pricing import PricingConfig
from greenquote.schemas.quote import (
    EstimateOut,
    EstimateRequest,
    PriceRequest,
    QuotePriceOut,
    SelectionIn,
)

router = APIRouter(prefix="/api/lawn", tags=["lawn"])


# ----------------------------
# Helpers
# ----------------------------
def price_out(price: QuotePrice) -> QuotePriceOut:
    data = asdict(price)
    data["pricing_mode"] = str(price.pricing_mode)
    return QuotePriceOut.model_validate(data)


def _selection(s: SelectionIn) -> QuoteSelection:
    return QuoteSelection(service=s.service, add_on_ids=tuple(s.add_on_ids), frequency=s.frequency)


# ----------------------------
# Account pricing config
# ----------------------------
@router.get("/config/{account_id}", response_model=PricingConfig)
def get_config(account_id: str, db: Session = Depends(get_db)) -> PricingConfig:
    return get_pricing_config(db, account_id)


@router.put("/config/{account_id}", response_model=PricingConfig)
def put_config(account_id: str, config: PricingConfig, db: Session = Depends(get_db)) -> PricingConfig:
    try:
        return upsert_pricing_config(db, account_id, config)
    except InvalidPricingConfig as e:
        raise HTTPException(status_code=422, detail=e.to_detail())


# ----------------------------
# Price
# ----------------------------
@router.post("/price", response_model=QuotePriceOut)
def price(payload: PriceRequest, db: Session = Depends(get_db)) -> QuotePriceOut:
    config = get_pricing_config(db, payload.account_id)
    result = price_quote(payload.area_sqft, config, _selection(payload.selection))
    logger.info(
        "quote_priced",
        account_id=payload.account_id,
        area_sqft=payload.area_sqft,
        pricing_mode=str(result.pricing_mode),
        per_visit=result.per_visit,
    )
    return price_out(result)


# ----------------------------
# Auto-estimate
# ----------------------------
@router.post("/estimate", response_model=EstimateOut)
def estimate(
    payload: EstimateRequest,
    db: Session = Depends(get_db),
    resolver: AddressResolver = Depends(get_address_resolver),
) -> EstimateOut:
    t0 = time.time()

    if payload.place is None and not payload.address:
        raise HTTPException(status_code=422, detail={"error": "place_or_address_required"})

    session = QuoteSession(
        get_pricing_config(db, payload.account_id),
        estimator_settings=load_lawn_rules().estimator,
        property_type=payload.property_type,
    )
    session.update_selection(
        service=payload.selection.service,
        add_on_ids=payload.selection.add_on_ids,
        frequency=payload.selection.frequency,
    )

    if payload.place is not None:
        place: Place | None = Place.from_google_result(payload.place)
        session.select_address(place)
    else:
        session.resolver = resolver
        try:
            place = session.resolve_address(payload.address or "")
        except GeocodingError as e:
            raise HTTPException(status_code=502, detail=e.to_detail())

    if place is None:
        raise HTTPException(
            status_code=404,
            detail={"error": "address_not_found", "address": payload.address},
        )

    est = session.last_estimate
    out: Dict[str, Any] = dict(
        state=str(session.state),
        area_source=str(session.area_source),
        total_sqft=session.area_sqft,
        polygon_count=session.polygon_count,
        polygons=session.area.snapshot_coordinates(),
        road_direction=est.road_direction if est else None,
        layout=str(est.layout) if est else None,
        zoom_hint=place.zoom_hint,
        formatted_address=place.formatted_address,
        price=price_out(session.get_current_price()),
    )

    logger.info(
        "estimate_served",
        account_id=payload.account_id,
        property_type=payload.property_type,
        total_sqft=out["total_sqft"],
        polygons=out["polygon_count"],
        duration_ms=round((time.time() - t0) * 1000, 2),
    )
    return EstimateOut(**out)
