"""Pydantic schemas for the analytics summary."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class PerformancePoint(BaseModel):
    date: str  # ISO-8601 completion time
    cumulative_pnl: float

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class AnalyticsResponse(BaseModel):
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_risk_reward: float = 0.0
    performance_curve: list[PerformancePoint] = []

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
