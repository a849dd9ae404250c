"""Pydantic schemas for Trade API."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

# Decimal columns; accepted as numbers or numeric strings, stored as canonical text
DECIMAL_FIELDS = (
    "entry_price",
    "exit_price",
    "position_size",
    "pnl",
    "commissions",
    "risk_amount",
    "reward_amount",
    "tick_size",
    "tick_value",
)

# Columns a partial update may change but never clear
NOT_NULL_FIELDS = (
    "ticker",
    "direction",
    "status",
    "entry_date",
    "entry_price",
    "position_size",
    "tick_size",
    "tick_value",
)

_camel_config = {"alias_generator": to_camel, "populate_by_name": True}


def normalize_decimal(value):
    """Return ``value`` as a decimal string, or None for empty input.

    Raises ValueError for anything that is not a finite number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError("must be a number")
    if not number.is_finite():
        raise ValueError("must be a finite number")
    # fixed-point text, never exponent notation such as "1E+3"
    return format(number, "f")


def to_utc(value: datetime | None) -> datetime | None:
    """Return an aware UTC datetime; naive input is taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TradeCreate(BaseModel):
    ticker: str = Field(min_length=1, max_length=32)
    direction: Literal["long", "short"]
    status: Literal["open", "closed"] = "open"
    entry_date: datetime | None = None
    exit_date: datetime | None = None
    entry_price: str
    exit_price: str | None = None
    position_size: str
    pnl: str | None = None
    commissions: str | None = "0"
    risk_amount: str | None = None
    reward_amount: str | None = None
    tick_size: str | None = "0.25"
    tick_value: str | None = "12.50"
    notes: str | None = None
    screenshot_url: str | None = None

    model_config = _camel_config

    @field_validator("ticker", mode="before")
    @classmethod
    def _normalize_ticker(cls, value):
        if not isinstance(value, str):
            return value
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator(*DECIMAL_FIELDS, mode="before")
    @classmethod
    def _coerce_decimal(cls, value):
        return normalize_decimal(value)

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _utc_dates(cls, value: datetime | None) -> datetime | None:
        return to_utc(value)

    @field_validator("position_size")
    @classmethod
    def _positive_size(cls, value: str) -> str:
        if Decimal(value) <= 0:
            raise ValueError("must be greater than 0")
        return value

    @field_validator("tick_size")
    @classmethod
    def _positive_tick_size(cls, value: str | None) -> str:
        if value is None:
            return "0.25"
        if Decimal(value) <= 0:
            raise ValueError("must be greater than 0")
        return value

    @field_validator("tick_value")
    @classmethod
    def _default_tick_value(cls, value: str | None) -> str:
        return "12.50" if value is None else value

    @field_validator("notes", "screenshot_url")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None


class TradeUpdate(BaseModel):
    ticker: str | None = Field(default=None, min_length=1, max_length=32)
    direction: Literal["long", "short"] | None = None
    status: Literal["open", "closed"] | None = None
    entry_date: datetime | None = None
    exit_date: datetime | None = None
    entry_price: str | None = None
    exit_price: str | None = None
    position_size: str | None = None
    pnl: str | None = None
    commissions: str | None = None
    risk_amount: str | None = None
    reward_amount: str | None = None
    tick_size: str | None = None
    tick_value: str | None = None
    notes: str | None = None
    screenshot_url: str | None = None

    model_config = _camel_config

    @field_validator("ticker", mode="before")
    @classmethod
    def _normalize_optional_ticker(cls, value):
        if not isinstance(value, str):
            return value
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator(*DECIMAL_FIELDS, mode="before")
    @classmethod
    def _coerce_optional_decimal(cls, value):
        return normalize_decimal(value)

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _optional_utc_dates(cls, value: datetime | None) -> datetime | None:
        return to_utc(value)

    @field_validator(*NOT_NULL_FIELDS)
    @classmethod
    def _no_null_for_required(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class TradeRead(BaseModel):
    id: int
    user_id: int
    ticker: str
    direction: str
    status: str
    entry_date: datetime
    exit_date: datetime | None
    entry_price: str
    exit_price: str | None
    position_size: str
    pnl: str | None
    commissions: str | None
    risk_amount: str | None
    reward_amount: str | None
    tick_size: str
    tick_value: str
    notes: str | None
    screenshot_url: str | None

    model_config = {**_camel_config, "from_attributes": True}
