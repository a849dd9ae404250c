"""Trade persistence helpers, scoped to the owning user."""

from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import Session, select

from tradejournal.models.trade import Trade


def list_trades(session: Session, owner_id: int, status: str | None = None) -> list[Trade]:
    """All trades belonging to one user, newest entry first."""
    stmt = select(Trade).where(Trade.user_id == owner_id).order_by(Trade.entry_date.desc())
    if status is not None:
        stmt = stmt.where(Trade.status == status)
    return list(session.exec(stmt).all())


def get_trade(session: Session, trade_id: int, owner_id: int) -> Trade | None:
    """Fetch a trade only if it belongs to ``owner_id``."""
    trade = session.get(Trade, trade_id)
    if trade is None or trade.user_id != owner_id:
        return None
    return trade


def tick_pnl(
    direction: str,
    entry_price: str,
    exit_price: str,
    tick_size: str,
    tick_value: str,
    position_size: str,
) -> str | None:
    """P&L from the price move in ticks, as a 2-decimal string.

    Returns None when the tick size is zero.
    """
    size = Decimal(tick_size)
    if size == 0:
        return None
    entry = Decimal(entry_price)
    exit_ = Decimal(exit_price)
    diff = exit_ - entry if direction == "long" else entry - exit_
    pnl = diff / size * Decimal(tick_value) * Decimal(position_size)
    return str(pnl.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def apply_tick_pnl(data: dict) -> dict:
    """Fill in ``pnl`` from tick math when both prices are known and no P&L was given."""
    if data.get("pnl") is not None:
        return data
    if not data.get("entry_price") or not data.get("exit_price"):
        return data
    pnl = tick_pnl(
        direction=data["direction"],
        entry_price=data["entry_price"],
        exit_price=data["exit_price"],
        tick_size=data.get("tick_size") or "0.25",
        tick_value=data.get("tick_value") or "12.50",
        position_size=data["position_size"],
    )
    if pnl is not None:
        data["pnl"] = pnl
    return data
