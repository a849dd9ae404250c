"""Analytics aggregation — summary stats and cumulative P&L curve.

Turns a user's trade history into an ``AnalyticsResponse``:

1. Only closed trades count.
2. Trades are ordered by completion time (exit date, falling back to the
   entry date when a closed trade has none).
3. A single pass accumulates wins/losses, net P&L, the reward/risk ratio of
   winning trades with declared risk, and the running P&L curve.

Net P&L is ``pnl - commissions``; missing values count as zero. Decimal text
from the database is converted to float, and values that cannot be converted
are logged and treated as zero so the summary is always produced.
"""

import logging
import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from tradejournal.schemas.analytics import AnalyticsResponse, PerformancePoint

logger = logging.getLogger(__name__)


def to_float(value, field: str = "value", trade_id=None) -> float:
    """Coerce a stored decimal (str, Decimal, int, float or None) to float.

    Empty or missing values are 0.0. Non-numeric or non-finite values are
    also 0.0, with a warning.
    """
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning(f"Trade {trade_id}: non-numeric {field}={value!r}, treating as 0")
        return 0.0
    if math.isnan(number) or math.isinf(number):
        logger.warning(f"Trade {trade_id}: non-finite {field}={value!r}, treating as 0")
        return 0.0
    return number


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def net_pnl(trade) -> float:
    trade_id = getattr(trade, "id", None)
    pnl = to_float(trade.pnl, "pnl", trade_id)
    commissions = to_float(trade.commissions, "commissions", trade_id)
    return pnl - commissions


def completion_time(trade) -> datetime:
    """Exit date, or entry date when the trade has no exit; always UTC-aware."""
    when = trade.exit_date or trade.entry_date
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def compute_analytics(trades) -> AnalyticsResponse:
    """Aggregate a trade history (any order, any status) into summary stats."""
    closed = [t for t in trades if t.status == "closed"]
    # sorted() is stable: trades completed at the same instant keep input order
    ordered = sorted(closed, key=completion_time)

    wins = 0
    losses = 0
    total_pnl = 0.0
    cumulative = 0.0
    rr_sum = 0.0
    rr_count = 0
    curve: list[PerformancePoint] = []

    for trade in ordered:
        net = net_pnl(trade)

        if net > 0:
            wins += 1
        elif net < 0:
            losses += 1

        total_pnl += net
        cumulative += net
        curve.append(PerformancePoint(
            date=completion_time(trade).isoformat(),
            cumulative_pnl=cumulative,
        ))

        trade_id = getattr(trade, "id", None)
        risk = to_float(trade.risk_amount, "risk_amount", trade_id)
        # A missing reward target falls back to the realized result; a declared 0 stays 0
        if _is_blank(trade.reward_amount):
            reward = abs(net)
        else:
            reward = to_float(trade.reward_amount, "reward_amount", trade_id)
        if risk > 0 and net > 0:
            rr_sum += reward / risk
            rr_count += 1

    total = len(ordered)
    return AnalyticsResponse(
        total_trades=total,
        wins=wins,
        losses=losses,
        win_rate=wins / total * 100 if total else 0.0,
        total_pnl=total_pnl,
        average_risk_reward=rr_sum / rr_count if rr_count else 0.0,
        performance_curve=curve,
    )
