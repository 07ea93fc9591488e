# greenquote/routers/quotes.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from greenquote.core.errors import QuoteNotFound
from greenquote.db import get_db
from greenquote.repositories.quotes import get_quote, list_quotes, save_quote
from greenquote.schemas.quote import QuoteRecordCreate, QuoteRecordOut

router = APIRouter(prefix="/api/lawn/quotes", tags=["lawn", "quotes"])


@router.post("", response_model=QuoteRecordOut, status_code=201)
def create_quote(payload: QuoteRecordCreate, db: Session = Depends(get_db)) -> QuoteRecordOut:
    return QuoteRecordOut.model_validate(save_quote(db, payload))


@router.get("", response_model=List[QuoteRecordOut])
def list_account_quotes(account_id: str, limit: int = 50, db: Session = Depends(get_db)):
    return [QuoteRecordOut.model_validate(q) for q in list_quotes(db, account_id, limit)]


@router.get("/{quote_id}", response_model=QuoteRecordOut)
def read_quote(quote_id: str, db: Session = Depends(get_db)) -> QuoteRecordOut:
    try:
        return QuoteRecordOut.model_validate(get_quote(db, quote_id))
    except QuoteNotFound as e:
        raise HTTPException(status_code=404, detail=e.to_detail())
