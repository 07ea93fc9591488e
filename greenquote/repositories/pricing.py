from __future__ import annotations

from sqlalchemy.orm import Session

from greenquote.core.errors import InvalidPricingConfig
from greenquote.core.logging_config import logger
from greenquote.engine.pricing import validate_pricing_tiers
from greenquote.engine.rules_loader import load_lawn_rules
from greenquote.models import AccountPricingORM
from greenquote.schemas.pricing import PricingConfig


def _to_config(row: AccountPricingORM, defaults: PricingConfig) -> PricingConfig:
    data = defaults.model_dump()
    data.update(
        use_tiered_pricing=row.use_tiered_pricing,
        tiers=row.sqft_pricing_tiers or data["tiers"],
        flat_rate_per_sqft=row.price_per_sq_ft if row.price_per_sq_ft is not None else data["flat_rate_per_sqft"],
        min_price_per_visit=row.min_price_per_visit if row.min_price_per_visit is not None else data["min_price_per_visit"],
        add_ons=row.add_ons or [],
    )
    if row.frequencies:
        data["frequencies"] = row.frequencies
    if row.default_areas:
        data["default_areas"] = row.default_areas
    return PricingConfig.model_validate(data)


def get_pricing_config(db: Session, account_id: str | None) -> PricingConfig:
    """Account configuration, or the rules-file defaults for unknown accounts."""
    defaults = load_lawn_rules().pricing
    if not account_id:
        return defaults
    row = db.get(AccountPricingORM, account_id)
    if row is None:
        return defaults
    return _to_config(row, defaults)


def upsert_pricing_config(db: Session, account_id: str, config: PricingConfig) -> PricingConfig:
    check = validate_pricing_tiers(config.tier_dicts())
    if not check.valid:
        logger.warning("pricing_config_rejected", account_id=account_id, errors=check.errors)
        raise InvalidPricingConfig(check.errors)

    row = db.get(AccountPricingORM, account_id)
    if row is None:
        row = AccountPricingORM(account_id=account_id)
        db.add(row)

    row.use_tiered_pricing = config.use_tiered_pricing
    row.sqft_pricing_tiers = config.tier_dicts()
    row.price_per_sq_ft = config.flat_rate_per_sqft
    row.min_price_per_visit = config.min_price_per_visit
    row.add_ons = [a.model_dump() for a in config.add_ons]
    row.frequencies = {k: v.model_dump() for k, v in config.frequencies.items()}
    row.default_areas = config.default_areas.model_dump()

    db.commit()
    db.refresh(row)
    logger.info("pricing_config_saved", account_id=account_id, tiered=config.use_tiered_pricing)
    return _to_config(row, load_lawn_rules().pricing)
