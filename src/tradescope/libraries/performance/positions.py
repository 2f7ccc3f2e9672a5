"""Position-management averages (size, risk, leverage, reward/risk, holding time)."""

import math
from typing import Sequence

from tradescope.libraries.performance.models import TradeRecord


def _finite_mean(values: Sequence[float]) -> float:
    """Mean of the finite values only; 0.0 if none are finite."""
    finite = [v for v in values if math.isfinite(v)]
    return sum(finite) / len(finite) if finite else 0.0


def trade_leverage(trade: TradeRecord) -> float:
    """
    Leverage for one trade.

    The exported leverage_ratio when it is set, else position size over the
    balance before the trade; math.inf when that balance is <= 0.
    """
    if trade.leverage_ratio:
        return trade.leverage_ratio
    if trade.balance_before <= 0:
        return math.inf
    return trade.position_size / trade.balance_before


def trade_risk_reward(trade: TradeRecord) -> float:
    """
    Planned reward over planned risk: |TP - entry| / |entry - SL|.

    math.nan when any of the three prices is missing; math.inf when the stop
    sits at the entry price.
    """
    if not (trade.entry_price and trade.stop_loss and trade.take_profit):
        return math.nan
    risk = abs(trade.entry_price - trade.stop_loss)
    if risk == 0:
        return math.inf
    return abs(trade.take_profit - trade.entry_price) / risk


def calculate_average_position_size(trades: Sequence[TradeRecord]) -> float:
    return _finite_mean([t.position_size for t in trades])


def calculate_average_leverage(trades: Sequence[TradeRecord]) -> float:
    """Mean leverage over trades with a finite leverage value."""
    return _finite_mean([trade_leverage(t) for t in trades])


def calculate_average_risk_reward(trades: Sequence[TradeRecord]) -> float:
    return _finite_mean([trade_risk_reward(t) for t in trades])


def calculate_average_duration(trades: Sequence[TradeRecord]) -> float:
    """Mean holding time in minutes over trades with a parsed, nonzero duration."""
    return _finite_mean([t.duration_minutes for t in trades if t.duration_minutes > 0])
