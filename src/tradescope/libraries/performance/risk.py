"""Risk metric functions.

Tail-loss statistics, tracking-error style ratio, drawdown recovery timing
and the consecutive-loss stress test.
"""

import math
from typing import Sequence

from tradescope.libraries.performance.calculators import RecoveryTimeCalculator, StreakCalculator
from tradescope.libraries.performance.formatting import format_metric
from tradescope.libraries.performance.models import (
    EquityPoint,
    RecoveryAnalysis,
    StressVerdict,
    TradeRecord,
)

CONSECUTIVE_LOSS_THRESHOLD_PCT = 20.0


def calculate_var_cvar(returns_pct: Sequence[float], confidence: float = 0.95) -> tuple[float, float]:
    """
    Historical Value-at-Risk and Conditional VaR.

    Returns are sorted ascending; VaR is the value at index
    floor(n x (1 - confidence)) and CVaR is the mean of every return at or
    below that index.

    Args:
        returns_pct: Per-trade returns in percent
        confidence: Confidence level (0.95 for VaR-95)

    Returns:
        (var, cvar), both 0.0 for empty input

    Example:
        >>> calculate_var_cvar([-5.0, -1.0, 0.5, 2.0] * 10)
        (-5.0, -5.0)
    """
    if not returns_pct:
        return 0.0, 0.0
    ordered = sorted(returns_pct)
    index = math.floor(len(ordered) * (1 - confidence))
    index = min(index, len(ordered) - 1)
    tail = ordered[: index + 1]
    return ordered[index], sum(tail) / len(tail)


def calculate_information_ratio(returns: Sequence[float]) -> float:
    """
    Mean return over its population standard deviation.

    The benchmark is zero, so the deviation doubles as tracking error.

    Returns:
        Information ratio, 0.0 when tracking error is 0
    """
    if not returns:
        return 0.0
    mean = sum(returns) / len(returns)
    tracking_error = math.sqrt(sum((r - mean) ** 2 for r in returns) / len(returns))
    if tracking_error == 0:
        return 0.0
    return mean / tracking_error


def calculate_recovery_times(equity_curve: Sequence[EquityPoint], starting_balance: float) -> RecoveryAnalysis:
    """
    Drawdown recovery lengths in trade-count units.

    Args:
        equity_curve: Per-trade equity points in order
        starting_balance: Initial peak

    Returns:
        RecoveryAnalysis with completed-period count, average and longest
        recovery, and whether the curve ends underwater
    """
    calc = RecoveryTimeCalculator(starting_balance)
    for point in equity_curve:
        calc.update(point.balance)
    return calc.result()


def run_consecutive_loss_stress(
    trades: Sequence[TradeRecord],
    starting_balance: float,
    threshold_pct: float = CONSECUTIVE_LOSS_THRESHOLD_PCT,
) -> StressVerdict:
    """
    Cost of the longest losing streak relative to starting balance.

    Passes when the streak's cumulative dollar loss is at most
    threshold_pct of the starting balance.
    """
    calc = StreakCalculator()
    for trade in trades:
        calc.update(trade)

    streak_loss = abs(min(calc.max_loss_streak_pnl, 0.0))
    loss_pct = streak_loss / starting_balance * 100 if starting_balance > 0 else 0.0

    return StressVerdict(
        name="Consecutive Loss Stress",
        value=format_metric(loss_pct),
        threshold=f"<= {format_metric(threshold_pct)}%",
        passed=loss_pct <= threshold_pct,
        detail=f"{calc.max_loss_streak} losses in a row cost ${format_metric(streak_loss)}",
    )
