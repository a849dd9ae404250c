"""CRUD API for journal trades, scoped to the authenticated user."""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlmodel import Session

from tradejournal.database import get_session
from tradejournal.models.trade import Trade
from tradejournal.models.user import User
from tradejournal.schemas.trade import TradeCreate, TradeUpdate, TradeRead
from tradejournal.services.trades import (
    apply_tick_pnl,
    get_trade as get_user_trade,
    list_trades as list_user_trades,
)
from tradejournal.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])

TICK_PNL_INPUTS = {"direction", "entry_price", "exit_price", "position_size", "tick_size", "tick_value"}


@router.get("", response_model=list[TradeRead])
def list_trades(
    status: Literal["open", "closed"] | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return list_user_trades(session, user.id, status=status)


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = get_user_trade(session, trade_id, user.id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(
    data: TradeCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    payload = apply_tick_pnl(data.model_dump())
    if payload.get("entry_date") is None:
        payload.pop("entry_date", None)
    trade = Trade(**payload, user_id=user.id)
    session.add(trade)
    session.commit()
    session.refresh(trade)
    logger.info(f"[user_{user.id}] Created trade {trade.id} ({trade.ticker} {trade.direction})")
    return trade


@router.put("/{trade_id}", response_model=TradeRead)
def update_trade(
    trade_id: int,
    data: TradeUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = get_user_trade(session, trade_id, user.id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")

    update_data = data.model_dump(exclude_unset=True)

    # Validate full merged record so partial updates cannot leave an invalid trade.
    merged = {**trade.model_dump(), **update_data}
    try:
        TradeCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        )

    # Recompute P&L from ticks when any of its inputs changed and no explicit P&L was sent
    if "pnl" not in update_data and TICK_PNL_INPUTS & update_data.keys():
        merged["pnl"] = None
        recomputed = apply_tick_pnl(merged)
        if recomputed["pnl"] is not None:
            update_data["pnl"] = recomputed["pnl"]

    for key, value in update_data.items():
        setattr(trade, key, value)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    logger.info(f"[user_{user.id}] Updated trade {trade.id}: {sorted(update_data)}")
    return trade


@router.delete("/{trade_id}", status_code=204)
def delete_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = get_user_trade(session, trade_id, user.id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")

    session.delete(trade)
    session.commit()
    logger.info(f"[user_{user.id}] Deleted trade {trade_id}")
