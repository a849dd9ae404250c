"""Trade model — one journal entry per position taken."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    ticker: str
    direction: str  # "long" or "short"
    status: str = "open"  # "open" or "closed"
    entry_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    exit_date: datetime | None = None

    # Decimal values kept as text to avoid float rounding in storage
    entry_price: str
    exit_price: str | None = None
    position_size: str
    pnl: str | None = None
    commissions: str | None = "0"
    risk_amount: str | None = None
    reward_amount: str | None = None
    tick_size: str = "0.25"
    tick_value: str = "12.50"

    notes: str | None = None
    screenshot_url: str | None = None
