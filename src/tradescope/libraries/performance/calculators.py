"""Stateful performance calculators for incremental updates.

Calculators walk the trade sequence once, left to right, and expose the
running state as properties. They never look ahead and never reorder.

Usage:
    >>> from tradescope.libraries.performance.calculators import EquityCurveCalculator
    >>>
    >>> calc = EquityCurveCalculator(starting_balance=10000.0)
    >>> calc.update(trade)
    >>> calc.points[-1].drawdown_pct
    0.0
"""

from typing import Sequence

from tradescope.libraries.performance.models import EquityPoint, RecoveryAnalysis, TradeRecord

DEFAULT_STARTING_BALANCE = 10000.0


def resolve_starting_balance(
    trades: Sequence[TradeRecord], default: float = DEFAULT_STARTING_BALANCE
) -> float:
    """First trade's balance_before, or the default when absent or zero."""
    if trades and trades[0].balance_before != 0:
        return trades[0].balance_before
    return default


class EquityCurveCalculator:
    """
    Builds the per-trade equity curve.

    Peak starts at the starting balance; every trade's balance_after becomes
    the current balance and may raise the peak. Values stay unrounded.
    """

    def __init__(self, starting_balance: float = DEFAULT_STARTING_BALANCE):
        self._starting_balance = starting_balance
        self._peak = starting_balance
        self._points: list[EquityPoint] = []

    def update(self, trade: TradeRecord) -> EquityPoint:
        """
        Add the next trade to the curve.

        Args:
            trade: Next trade in input order

        Returns:
            The EquityPoint recorded for this trade
        """
        balance = trade.balance_after
        if balance > self._peak:
            self._peak = balance
        drawdown_pct = (self._peak - balance) / self._peak * 100 if self._peak > 0 else 0.0
        return_pct = (balance / self._starting_balance - 1) * 100 if self._starting_balance else 0.0

        point = EquityPoint(
            trade_index=len(self._points) + 1,
            date=_point_date(trade),
            balance=balance,
            peak_balance=self._peak,
            drawdown_pct=drawdown_pct,
            drawdown_value=self._peak - balance,
            pnl=trade.pnl,
            return_pct=return_pct,
        )
        self._points.append(point)
        return point

    @property
    def points(self) -> list[EquityPoint]:
        return self._points.copy()

    @property
    def starting_balance(self) -> float:
        return self._starting_balance

    @property
    def peak_balance(self) -> float:
        return self._peak

    @property
    def final_balance(self) -> float:
        """Last balance, or the starting balance for an empty curve."""
        if not self._points:
            return self._starting_balance
        return self._points[-1].balance

    def __len__(self) -> int:
        return len(self._points)


def _point_date(trade: TradeRecord) -> str:
    """Exit date (ISO) when parsable, else entry date, else the raw exit text."""
    for parsed in (trade.exit_datetime, trade.entry_datetime):
        if parsed is not None:
            return parsed.date().isoformat()
    return trade.exit_time or trade.entry_time


def build_equity_curve(trades: Sequence[TradeRecord], starting_balance: float) -> list[EquityPoint]:
    """Equity curve with one point per trade, in input order."""
    calc = EquityCurveCalculator(starting_balance)
    for trade in trades:
        calc.update(trade)
    return calc.points


class StreakCalculator:
    """
    Tracks win/loss streaks.

    Any result other than the exact "WIN" literal counts as a loss here.
    Also keeps the summed PnL of the longest loss streak for the
    consecutive-loss stress test.
    """

    def __init__(self) -> None:
        self._current_wins = 0
        self._current_losses = 0
        self._current_loss_pnl = 0.0
        self._max_wins = 0
        self._max_losses = 0
        self._max_loss_streak_pnl = 0.0

    def update(self, trade: TradeRecord) -> None:
        if trade.is_win:
            self._current_wins += 1
            self._current_losses = 0
            self._current_loss_pnl = 0.0
        else:
            self._current_losses += 1
            self._current_loss_pnl += trade.pnl
            self._current_wins = 0

        if self._current_wins > self._max_wins:
            self._max_wins = self._current_wins
        # Strict comparison: the first streak of the maximal length wins ties
        if self._current_losses > self._max_losses:
            self._max_losses = self._current_losses
            self._max_loss_streak_pnl = self._current_loss_pnl

    @property
    def max_win_streak(self) -> int:
        return self._max_wins

    @property
    def max_loss_streak(self) -> int:
        return self._max_losses

    @property
    def max_loss_streak_pnl(self) -> float:
        """Summed PnL of the longest loss streak (negative for real losses)."""
        return self._max_loss_streak_pnl


class RecoveryTimeCalculator:
    """
    Measures how many trades it takes to climb out of each drawdown.

    A trade whose balance sits below the running peak is "in drawdown". A
    period closes when the balance reaches a new peak (>= previous peak);
    its length is the number of trades spent below the peak.
    """

    def __init__(self, starting_balance: float):
        self._peak = starting_balance
        self._in_drawdown = False
        self._current_length = 0
        self._periods: list[int] = []

    def update(self, balance: float) -> None:
        if balance >= self._peak:
            if self._in_drawdown:
                self._periods.append(self._current_length)
                self._in_drawdown = False
                self._current_length = 0
            self._peak = balance
        else:
            self._in_drawdown = True
            self._current_length += 1

    @property
    def recovery_periods(self) -> list[int]:
        """Lengths of completed recoveries, in trades."""
        return self._periods.copy()

    def result(self) -> RecoveryAnalysis:
        periods = self._periods
        return RecoveryAnalysis(
            recovery_periods=len(periods),
            avg_recovery_trades=sum(periods) / len(periods) if periods else 0.0,
            max_recovery_trades=max(periods) if periods else 0,
            in_drawdown_at_end=self._in_drawdown,
            current_drawdown_trades=self._current_length,
        )
