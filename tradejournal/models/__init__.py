"""Database models."""

from tradejournal.models.trade import Trade
from tradejournal.models.user import User

__all__ = [
    "Trade",
    "User",
]
