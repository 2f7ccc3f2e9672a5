"""Adaptive-learning detection and composite scoring.

Learning detection compares the first and last thirds of the trade list in
chronological order. Composite scores blend performance, risk and
AI-effectiveness sub-scores into an overall 0-100 score and letter grade.

Confidence values arrive on the 0-100 scale (see the normalizer), so the
confidence thresholds here are the fraction-scale ones x100: a gain above
0.5 points counts toward learning, and the trend is "stable" within +/-1.0.
"""

import math
from datetime import datetime
from typing import Sequence

from tradescope.libraries.performance.models import (
    CompositeScores,
    LearningAnalysis,
    SourceScore,
    TradeRecord,
)

LEARNING_WIN_RATE_GAIN = 3.0  # percentage points
LEARNING_PNL_GAIN = 5.0  # currency per trade
LEARNING_CONFIDENCE_GAIN = 0.5  # 0-100 scale
LEARNING_ADJUSTMENT_WITH_CONFIDENCE = 0.05
LEARNING_ADJUSTMENT_ALONE = 0.1
CONFIDENCE_TREND_BAND = 1.0  # 0-100 scale

PERFORMANCE_WEIGHT = 0.4
RISK_WEIGHT = 0.3
AI_WEIGHT = 0.3

RECENCY_HALF_WINDOW_DAYS = 30.0

GRADE_CUTOFFS = (
    (90.0, "A+"),
    (85.0, "A"),
    (80.0, "A-"),
    (75.0, "B+"),
    (70.0, "B"),
    (65.0, "B-"),
    (60.0, "C+"),
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def sort_chronologically(trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Stable sort by entry time; unparsable entry times keep input order after the rest."""
    return sorted(trades, key=lambda t: (t.entry_datetime is None, t.entry_datetime or datetime.min))


def _segment_stats(segment: Sequence[TradeRecord]) -> tuple[float, float, float]:
    """(win_rate, avg_pnl, avg_effective_confidence) for a segment."""
    if not segment:
        return 0.0, 0.0, 0.0
    count = len(segment)
    win_rate = sum(1 for t in segment if t.is_win) / count * 100
    avg_pnl = sum(t.pnl for t in segment) / count
    avg_confidence = sum(t.effective_confidence for t in segment) / count
    return win_rate, avg_pnl, avg_confidence


def detect_learning(trades: Sequence[TradeRecord]) -> LearningAnalysis:
    """
    Compare early and late performance to flag adaptive learning.

    Learning requires Bayesian confidence data on at least one trade, and
    then any of:
        - win rate gain >= 3 points
        - average PnL gain >= $5
        - confidence gain > 0.5 and cumulative |adjustment| > 0.05
        - cumulative |adjustment| > 0.1

    Fewer than 3 trades leaves both segments empty and all deltas 0.
    """
    ordered = sort_chronologically(trades)
    size = len(ordered) // 3
    early = ordered[:size]
    late = ordered[len(ordered) - size :] if size else []

    early_wr, early_pnl, early_conf = _segment_stats(early)
    late_wr, late_pnl, late_conf = _segment_stats(late)

    win_rate_gain = late_wr - early_wr
    pnl_gain = late_pnl - early_pnl
    confidence_gain = late_conf - early_conf

    total_adjustment = sum(
        abs(t.combined_bayesian_adjustment) for t in trades if t.combined_bayesian_adjustment is not None
    )
    has_bayesian = any(t.bayesian_confidence is not None for t in trades)

    improved = (
        win_rate_gain >= LEARNING_WIN_RATE_GAIN
        or pnl_gain >= LEARNING_PNL_GAIN
        or (confidence_gain > LEARNING_CONFIDENCE_GAIN and total_adjustment > LEARNING_ADJUSTMENT_WITH_CONFIDENCE)
        or total_adjustment > LEARNING_ADJUSTMENT_ALONE
    )

    if confidence_gain > CONFIDENCE_TREND_BAND:
        trend = "increasing"
    elif confidence_gain < -CONFIDENCE_TREND_BAND:
        trend = "decreasing"
    else:
        trend = "stable"

    return LearningAnalysis(
        segment_size=size,
        early_win_rate=early_wr,
        late_win_rate=late_wr,
        win_rate_improvement=win_rate_gain,
        early_avg_pnl=early_pnl,
        late_avg_pnl=late_pnl,
        pnl_improvement=pnl_gain,
        early_avg_confidence=early_conf,
        late_avg_confidence=late_conf,
        confidence_improvement=confidence_gain,
        total_bayesian_adjustment=total_adjustment,
        has_bayesian_data=has_bayesian,
        learning_detected=has_bayesian and improved,
        confidence_trend=trend,
    )


def calculate_performance_score(sharpe_ratio: float, total_return_pct: float, win_rate: float) -> float:
    """
    Performance sub-score, 0-100.

    clamp(Sharpe x 20, 0, 40) + clamp(TotalReturn / 2, 0, 30) + clamp(WinRate / 2, 0, 30)
    """
    score = (
        _clamp(sharpe_ratio * 20, 0, 40)
        + _clamp(total_return_pct / 2, 0, 30)
        + _clamp(win_rate / 2, 0, 30)
    )
    return min(score, 100.0)


def calculate_risk_score(max_drawdown_pct: float, var_95: float) -> float:
    """
    Risk sub-score, 0-100 (higher is safer).

    100 - clamp(|MaxDD| x 3, 0, 50) - clamp(|VaR95| x 10, 0, 30)
    """
    score = 100.0 - _clamp(abs(max_drawdown_pct) * 3, 0, 50) - _clamp(abs(var_95) * 10, 0, 30)
    return max(score, 0.0)


def _log_scaled(value: float, cap: float, saturation: float) -> float:
    """Log-scaled score reaching `cap` when value reaches `saturation`."""
    if value <= 0:
        return 0.0
    return min(cap, cap * math.log1p(value) / math.log1p(saturation))


def _max_cumulative_drawdown(trades: Sequence[TradeRecord]) -> float:
    """Largest peak-to-trough drop of the cumulative PnL of `trades`."""
    cumulative = peak = max_drawdown = 0.0
    for trade in trades:
        cumulative += trade.pnl
        peak = max(peak, cumulative)
        max_drawdown = max(max_drawdown, peak - cumulative)
    return max_drawdown


def _score_source(
    source: str, trades: Sequence[TradeRecord], total_trades: int, reference: datetime | None
) -> SourceScore:
    count = len(trades)
    wins = [t.pnl for t in trades if t.is_win]
    win_pnl = sum(wins)
    loss_pnl = sum(t.pnl for t in trades if t.is_loss)

    win_rate = len(wins) / count * 100
    win_rate_score = _clamp(win_rate / 100 * 35, 0, 35)

    avg_confidence = sum(t.confidence for t in trades) / count
    confidence_score = _clamp(avg_confidence / 100 * 25, 0, 25)

    # Average win against the worst run-down of this source's own PnL
    avg_win = win_pnl / len(wins) if wins else 0.0
    source_drawdown = _max_cumulative_drawdown(trades)
    if avg_win <= 0:
        risk_adjusted_score = 0.0
    elif source_drawdown == 0:
        risk_adjusted_score = 15.0
    else:
        risk_adjusted_score = _log_scaled(avg_win / source_drawdown, 15.0, 3.0)

    entries = [t.entry_datetime for t in trades if t.entry_datetime is not None]
    if entries and reference is not None:
        span_days = (max(entries) - min(entries)).total_seconds() / 86400
        duration_factor = min(1.0, math.log1p(span_days) / math.log1p(RECENCY_HALF_WINDOW_DAYS))
        idle_days = max(0.0, (reference - max(entries)).total_seconds() / 86400)
        recency = math.exp(-idle_days / RECENCY_HALF_WINDOW_DAYS)
    else:
        duration_factor = 0.0
        recency = 1.0
    activity_score = _clamp(10 * (0.5 * duration_factor + 0.5 * recency), 0, 10)

    if loss_pnl == 0:
        consistency_score = 15.0 if win_pnl > 0 else 0.0
    else:
        consistency_score = _log_scaled(abs(win_pnl / loss_pnl), 15.0, 3.0)

    total = win_rate_score + confidence_score + risk_adjusted_score + activity_score + consistency_score
    return SourceScore(
        source=source,
        trades=count,
        weight=count / total_trades,
        win_rate_score=win_rate_score,
        confidence_score=confidence_score,
        risk_adjusted_score=risk_adjusted_score,
        activity_score=activity_score,
        consistency_score=consistency_score,
        total_score=total,
    )


def calculate_source_scores(trades: Sequence[TradeRecord]) -> list[SourceScore]:
    """
    Per-signal-source AI-effectiveness breakdown.

    Recency is measured against the latest parsable entry time in the whole
    trade set, never the wall clock, so the score is reproducible.
    """
    if not trades:
        return []
    ordered = sort_chronologically(trades)
    by_source: dict[str, list[TradeRecord]] = {}
    for trade in ordered:
        by_source.setdefault(trade.signal_source or "Unknown", []).append(trade)

    entries = [t.entry_datetime for t in ordered if t.entry_datetime is not None]
    reference = max(entries) if entries else None

    return [_score_source(source, group, len(trades), reference) for source, group in by_source.items()]


def calculate_ai_effectiveness_score(source_scores: Sequence[SourceScore]) -> float:
    """Trade-count-weighted sum of per-source scores, clamped to [0, 100]."""
    weighted = sum(s.total_score * s.weight for s in source_scores)
    return _clamp(weighted, 0, 100)


def grade_for(score: float) -> str:
    """Letter grade for an overall score."""
    for cutoff, grade in GRADE_CUTOFFS:
        if score >= cutoff:
            return grade
    return "C"


def calculate_composite_scores(
    sharpe_ratio: float,
    total_return_pct: float,
    win_rate: float,
    max_drawdown_pct: float,
    var_95: float,
    trades: Sequence[TradeRecord],
) -> CompositeScores:
    """Blend the three sub-scores: 0.4 x performance + 0.3 x risk + 0.3 x AI."""
    performance = calculate_performance_score(sharpe_ratio, total_return_pct, win_rate)
    risk = calculate_risk_score(max_drawdown_pct, var_95)
    source_scores = calculate_source_scores(trades)
    ai = calculate_ai_effectiveness_score(source_scores)
    overall = performance * PERFORMANCE_WEIGHT + risk * RISK_WEIGHT + ai * AI_WEIGHT
    return CompositeScores(
        performance_score=performance,
        risk_score=risk,
        ai_effectiveness_score=ai,
        overall_score=overall,
        grade=grade_for(overall),
        source_scores=source_scores,
    )
