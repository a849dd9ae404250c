"""Analytics API — performance summary for the authenticated user."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from tradejournal.database import get_session
from tradejournal.models.user import User
from tradejournal.schemas.analytics import AnalyticsResponse
from tradejournal.services.analytics import compute_analytics
from tradejournal.services.trades import list_trades
from tradejournal.api.deps import get_current_user

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsResponse)
def get_analytics(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Win rate, net P&L, average reward/risk and the cumulative P&L curve."""
    return compute_analytics(list_trades(session, user.id))
