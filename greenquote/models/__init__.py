# SQLAlchemy models; importing this package registers the tables on Base

from .account_pricing import AccountPricingORM
from .quote import QuoteORM

__all__ = [
    "AccountPricingORM",
    "QuoteORM",
]
