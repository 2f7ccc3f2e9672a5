"""Temporal and categorical grouping of trades.

Temporal buckets (weekday, hour, month) sum PnL per bucket from entry_time;
trades with an unparsable entry_time are skipped. Pattern and signal-source
groups fold every trade into a per-key accumulator in one pass, then map
and sort the accumulators. The per-source cumulative PnL series replays
trades in entry-time order.
"""

import calendar
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from tradescope.libraries.performance.formatting import format_metric
from tradescope.libraries.performance.models import (
    GroupStats,
    RegimeAnalysis,
    RegimeStats,
    SourcePnlPoint,
    TemporalBreakdown,
    TimeBucket,
    TradeRecord,
)

REGIME_PIPS_THRESHOLD = 300.0
TOP_PATTERNS_LIMIT = 5

WEEKDAYS = list(calendar.day_name)  # Monday..Sunday


def _bucket_pnl(
    trades: Sequence[TradeRecord], key: Callable[[datetime], tuple]
) -> dict[tuple, tuple[float, int]]:
    """Sum PnL and count trades per key of the parsed entry time."""
    totals: dict[tuple, list] = defaultdict(lambda: [0.0, 0])
    for trade in trades:
        entered = trade.entry_datetime
        if entered is None:
            continue
        bucket = totals[key(entered)]
        bucket[0] += trade.pnl
        bucket[1] += 1
    return {k: (v[0], v[1]) for k, v in totals.items()}


def group_by_weekday(trades: Sequence[TradeRecord]) -> list[TimeBucket]:
    """PnL per weekday name, Monday first; only weekdays that traded."""
    totals = _bucket_pnl(trades, lambda dt: (dt.weekday(),))
    return [
        TimeBucket(label=WEEKDAYS[day], pnl=pnl, trades=count)
        for (day,), (pnl, count) in sorted(totals.items())
    ]


def group_by_hour(trades: Sequence[TradeRecord]) -> list[TimeBucket]:
    """PnL per entry hour (0-23), ascending."""
    totals = _bucket_pnl(trades, lambda dt: (dt.hour,))
    return [
        TimeBucket(label=f"{hour:02d}:00", pnl=pnl, trades=count)
        for (hour,), (pnl, count) in sorted(totals.items())
    ]


def group_by_month(trades: Sequence[TradeRecord]) -> list[TimeBucket]:
    """PnL per calendar month ("Jan 2024"), chronological."""
    totals = _bucket_pnl(trades, lambda dt: (dt.year, dt.month))
    return [
        TimeBucket(label=f"{calendar.month_abbr[month]} {year}", pnl=pnl, trades=count)
        for (year, month), (pnl, count) in sorted(totals.items())
    ]


def build_temporal_breakdown(trades: Sequence[TradeRecord]) -> TemporalBreakdown:
    return TemporalBreakdown(
        by_weekday=group_by_weekday(trades),
        by_hour=group_by_hour(trades),
        by_month=group_by_month(trades),
    )


@dataclass
class _GroupAccumulator:
    """Running totals for one group key."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    win_pnl: float = 0.0
    loss_pnl: float = 0.0
    confidence_sum: float = 0.0

    def add(self, trade: TradeRecord) -> None:
        self.trades += 1
        self.total_pnl += trade.pnl
        self.confidence_sum += trade.confidence
        if trade.is_win:
            self.wins += 1
            self.win_pnl += trade.pnl
        elif trade.is_loss:
            self.losses += 1
            self.loss_pnl += trade.pnl

    def to_stats(self, name: str) -> GroupStats:
        profit_factor = abs(self.win_pnl / self.loss_pnl) if self.loss_pnl != 0 else math.inf
        return GroupStats(
            name=name,
            trades=self.trades,
            wins=self.wins,
            losses=self.losses,
            total_pnl=self.total_pnl,
            win_rate=self.wins / self.trades * 100,
            avg_confidence=self.confidence_sum / self.trades,
            avg_pnl=self.total_pnl / self.trades,
            profit_factor=format_metric(profit_factor),
        )


def fold_groups(
    trades: Sequence[TradeRecord], key: Callable[[TradeRecord], str]
) -> dict[str, _GroupAccumulator]:
    """Single pass: group key -> accumulator, in first-seen key order."""
    groups: dict[str, _GroupAccumulator] = {}
    for trade in trades:
        groups.setdefault(key(trade), _GroupAccumulator()).add(trade)
    return groups


def _ranked(groups: dict[str, _GroupAccumulator]) -> list[GroupStats]:
    stats = [acc.to_stats(name) for name, acc in groups.items()]
    # sorted() is stable: equal totals keep first-seen order
    return sorted(stats, key=lambda s: s.total_pnl, reverse=True)


def group_by_pattern(trades: Sequence[TradeRecord], limit: int = TOP_PATTERNS_LIMIT) -> list[GroupStats]:
    """Pattern groups by total PnL descending, capped at `limit` entries."""
    return _ranked(fold_groups(trades, lambda t: t.pattern or "Unknown"))[:limit]


def group_by_signal_source(trades: Sequence[TradeRecord]) -> list[GroupStats]:
    """Signal-source groups by total PnL descending, uncapped."""
    return _ranked(fold_groups(trades, lambda t: t.signal_source or "Unknown"))


def chronological(trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Trades by entry time; unparsable entry times go last, in input order."""
    return sorted(trades, key=lambda t: (t.entry_datetime is None, t.entry_datetime or datetime.min))


def build_source_cumulative_pnl(trades: Sequence[TradeRecord]) -> list[SourcePnlPoint]:
    """
    Running PnL and trade count per signal source, one point per trade.

    Trades are replayed in entry-time order. Every point carries a total for
    each source in the report (first-seen order), including sources that have
    not traded yet.

    Example:
        >>> points = build_source_cumulative_pnl(trades)
        >>> points[-1].cumulative_pnl
        {'LSTM': 200.0, 'XGBoost': 600.0}
    """
    sources = list(dict.fromkeys(t.signal_source or "Unknown" for t in trades))
    cumulative = dict.fromkeys(sources, 0.0)
    counts = dict.fromkeys(sources, 0)

    points: list[SourcePnlPoint] = []
    for number, trade in enumerate(chronological(trades), start=1):
        source = trade.signal_source or "Unknown"
        cumulative[source] += trade.pnl
        counts[source] += 1
        entered = trade.entry_datetime
        points.append(
            SourcePnlPoint(
                trade_number=number,
                date=entered.date().isoformat() if entered else "",
                source=source,
                pnl=round(trade.pnl, 2),
                cumulative_pnl={name: round(total, 2) for name, total in cumulative.items()},
                trade_counts=dict(counts),
            )
        )
    return points


def _regime_stats(regime: str, trades: Sequence[TradeRecord]) -> RegimeStats:
    count = len(trades)
    total = sum(t.pnl for t in trades)
    wins = sum(1 for t in trades if t.is_win)
    return RegimeStats(
        regime=regime,
        trades=count,
        win_rate=wins / count * 100 if count else 0.0,
        total_pnl=total,
        avg_pnl=total / count if count else 0.0,
    )


def analyze_regimes(trades: Sequence[TradeRecord], threshold: float = REGIME_PIPS_THRESHOLD) -> RegimeAnalysis:
    """
    Split trades into volatility regimes on absolute pips.

    normal: |pips| <= threshold; high: |pips| > threshold.
    """
    normal = [t for t in trades if abs(t.pips) <= threshold]
    high = [t for t in trades if abs(t.pips) > threshold]
    return RegimeAnalysis(
        threshold_pips=threshold,
        normal=_regime_stats("normal", normal),
        high=_regime_stats("high", high),
    )
