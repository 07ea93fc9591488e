from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from greenquote.core.errors import QuoteNotFound
from greenquote.core.logging_config import logger
from greenquote.models import QuoteORM
from greenquote.schemas.quote import QuoteRecordCreate


def save_quote(db: Session, record: QuoteRecordCreate) -> QuoteORM:
    quote = QuoteORM(**record.model_dump())
    db.add(quote)
    db.commit()
    db.refresh(quote)
    logger.info(
        "quote_saved",
        quote_id=quote.id,
        account_id=quote.account_id,
        area_sq_ft=quote.area_sq_ft,
        area_source=quote.area_source,
        pricing_mode=quote.pricing_mode,
    )
    return quote


def get_quote(db: Session, quote_id: str) -> QuoteORM:
    quote = db.get(QuoteORM, quote_id)
    if quote is None:
        raise QuoteNotFound(quote_id)
    return quote


def list_quotes(db: Session, account_id: str, limit: int = 50) -> List[QuoteORM]:
    stmt = (
        select(QuoteORM)
        .where(QuoteORM.account_id == account_id)
        .order_by(QuoteORM.created_at.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))
