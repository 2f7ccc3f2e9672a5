"""Core performance metric functions.

Pure functions over the normalized trade list and the equity curve. Every
function computes its value independently from the same inputs.

Edge-case policy:
- A ratio whose denominator is exactly zero and would diverge returns
  math.inf (rendered as "∞" by format_metric), never NaN.
- Anything else with too little data returns 0.0 rather than raising.

The formulas are the tool's documented simplifications, not textbook ones:
Sharpe and Sortino annualize per-trade returns with sqrt(252) as if each
trade were a daily bar, and the Kelly-style metric is expressed in dollar
terms rather than odds.

Usage:
    >>> from tradescope.libraries.performance import metrics
    >>> metrics.calculate_win_rate(trades)
    66.66666666666667
    >>> metrics.calculate_profit_factor(trades_without_losses)
    inf
"""

import math
from typing import Sequence

from tradescope.libraries.performance.calculators import StreakCalculator
from tradescope.libraries.performance.models import EquityPoint, TradeRecord

ANNUALIZATION_FACTOR = 252


def calculate_win_rate(trades: Sequence[TradeRecord]) -> float:
    """
    Percentage of trades whose result is exactly "WIN".

    Returns:
        Win rate 0-100, 0.0 for no trades
    """
    if not trades:
        return 0.0
    wins = sum(1 for t in trades if t.is_win)
    return wins / len(trades) * 100


def calculate_loss_rate(trades: Sequence[TradeRecord]) -> float:
    """Percentage of trades whose result is exactly "LOSS"."""
    if not trades:
        return 0.0
    losses = sum(1 for t in trades if t.is_loss)
    return losses / len(trades) * 100


def _gross_win_pnl(trades: Sequence[TradeRecord]) -> float:
    return sum(t.pnl for t in trades if t.is_win)


def _gross_loss_pnl(trades: Sequence[TradeRecord]) -> float:
    return sum(t.pnl for t in trades if t.is_loss)


def calculate_profit_factor(trades: Sequence[TradeRecord]) -> float:
    """
    Gross winning PnL over gross losing PnL, absolute.

    Returns:
        Profit factor, or math.inf when the losing total is exactly 0

    Example:
        >>> calculate_profit_factor(trades)  # wins +300, losses -100
        3.0
    """
    loss_total = _gross_loss_pnl(trades)
    if loss_total == 0:
        return math.inf
    return abs(_gross_win_pnl(trades) / loss_total)


def calculate_average_win(trades: Sequence[TradeRecord]) -> float:
    """Mean PnL of "WIN" trades, 0.0 if there are none."""
    wins = [t.pnl for t in trades if t.is_win]
    return sum(wins) / len(wins) if wins else 0.0


def calculate_average_loss(trades: Sequence[TradeRecord]) -> float:
    """Mean PnL of "LOSS" trades (negative), 0.0 if there are none."""
    losses = [t.pnl for t in trades if t.is_loss]
    return sum(losses) / len(losses) if losses else 0.0


def calculate_expectancy(avg_win: float, avg_loss: float, win_rate: float) -> float:
    """
    Expected PnL per trade.

    Expectancy = AvgWin x WinRate + AvgLoss x (1 - WinRate)

    Args:
        avg_win: Average winning PnL
        avg_loss: Average losing PnL (negative)
        win_rate: Win rate as percentage (0-100)
    """
    rate = win_rate / 100
    return avg_win * rate + avg_loss * (1 - rate)


def calculate_trade_returns(trades: Sequence[TradeRecord]) -> list[float]:
    """
    Per-trade returns as fractions: pnl / balance_before.

    Trades with balance_before <= 0 contribute 0.0.
    """
    return [t.pnl / t.balance_before if t.balance_before > 0 else 0.0 for t in trades]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_sharpe_ratio(returns: Sequence[float], annualization_factor: int = ANNUALIZATION_FACTOR) -> float:
    """
    Sharpe ratio over per-trade returns.

    Sharpe = mean / sample_std x sqrt(annualization_factor)

    Returns:
        Sharpe ratio, 0.0 with fewer than 2 returns or zero deviation
    """
    if len(returns) < 2:
        return 0.0
    mean = _mean(returns)
    variance = sum((r - mean) ** 2 for r in returns) / (len(returns) - 1)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return 0.0
    return mean / std_dev * math.sqrt(annualization_factor)


def calculate_downside_deviation(returns: Sequence[float]) -> float:
    """Root mean square of the negative returns only (0.0 if there are none)."""
    negatives = [r for r in returns if r < 0]
    if not negatives:
        return 0.0
    return math.sqrt(sum(r**2 for r in negatives) / len(negatives))


def calculate_sortino_ratio(returns: Sequence[float], annualization_factor: int = ANNUALIZATION_FACTOR) -> float:
    """
    Sortino ratio over per-trade returns.

    Sortino = mean / downside_deviation x sqrt(annualization_factor)

    Returns:
        Sortino ratio, or math.inf when downside deviation is 0
    """
    downside = calculate_downside_deviation(returns)
    if downside == 0:
        return math.inf
    return _mean(returns) / downside * math.sqrt(annualization_factor)


def calculate_total_return(starting_balance: float, final_balance: float) -> float:
    """
    Total return percentage.

    Example:
        >>> calculate_total_return(10000.0, 10800.0)
        8.000000000000007
    """
    if starting_balance == 0:
        return 0.0
    return (final_balance / starting_balance - 1) * 100


def calculate_max_drawdown(equity_curve: Sequence[EquityPoint]) -> float:
    """Largest drawdown percentage on the curve (0.0 for an empty curve)."""
    return max((p.drawdown_pct for p in equity_curve), default=0.0)


def calculate_max_drawdown_value(equity_curve: Sequence[EquityPoint]) -> float:
    """Largest peak-minus-balance gap on the curve, in currency."""
    return max((p.peak_balance - p.balance for p in equity_curve), default=0.0)


def calculate_calmar_ratio(total_return_pct: float, max_drawdown_pct: float) -> float:
    """
    Total return over max drawdown (both percentages).

    Returns:
        Calmar ratio, or math.inf when max drawdown is 0
    """
    if max_drawdown_pct == 0:
        return math.inf
    return total_return_pct / max_drawdown_pct


def calculate_kelly_metric(win_rate: float, avg_win: float, avg_loss: float) -> float:
    """
    Kelly-style sizing metric.

    kelly = (WinRate / |AvgLoss|) - ((1 - WinRate) / AvgWin)

    Not the classical Kelly criterion: the inputs are dollar amounts, not
    odds. Only defined when win_rate > 0, avg_win > 0 and avg_loss < 0.

    Returns:
        Metric value (the report shows it x100 as a percentage), else 0.0
    """
    if win_rate > 0 and avg_win > 0 and avg_loss < 0:
        rate = win_rate / 100
        return rate / abs(avg_loss) - (1 - rate) / avg_win
    return 0.0


def calculate_recovery_factor(total_pnl: float, max_drawdown_value: float) -> float:
    """
    Net PnL over the largest dollar drawdown.

    Returns:
        Recovery factor, or math.inf when the dollar drawdown is 0
    """
    if max_drawdown_value == 0:
        return math.inf
    return total_pnl / max_drawdown_value


def calculate_streaks(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    """
    Longest win and loss streaks.

    Returns:
        (max_win_streak, max_loss_streak); non-"WIN" results count as losses
    """
    calc = StreakCalculator()
    for trade in trades:
        calc.update(trade)
    return calc.max_win_streak, calc.max_loss_streak


def calculate_average_risk(trades: Sequence[TradeRecord]) -> float:
    """Mean risk_percentage across all trades."""
    return _mean([t.risk_percentage for t in trades])


def calculate_best_trade(trades: Sequence[TradeRecord]) -> float:
    return max((t.pnl for t in trades), default=0.0)


def calculate_worst_trade(trades: Sequence[TradeRecord]) -> float:
    return min((t.pnl for t in trades), default=0.0)


def calculate_total_pnl(trades: Sequence[TradeRecord]) -> float:
    return sum(t.pnl for t in trades)
