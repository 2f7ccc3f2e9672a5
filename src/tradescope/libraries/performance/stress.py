"""Stress tests and institutional certification.

Each stress test is a deterministic function of the trade set that returns
a StressVerdict. Certification evaluates seven independent checks; no check
reads another's outcome.

Thresholds:
    PATTERN_DECAY_FACTOR          0.8    simulated 20% edge degradation
    PATTERN_DECAY_MIN_PF          1.0
    BAYESIAN_LAG_FLOOR_MS         37     synthetic floor, not a measured latency
    BAYESIAN_LAG_MAX_MS           100
    VIX_SPIKE_PIPS_THRESHOLD      500    distinct from the 300-pip regime split
    HIGH_VOL_MIN_WIN_RATE         55%
"""

from typing import Sequence

from tradescope.libraries.performance.formatting import format_metric
from tradescope.libraries.performance.models import (
    Certification,
    CertificationCheck,
    StressVerdict,
    TradeRecord,
)

PATTERN_DECAY_FACTOR = 0.8
PATTERN_DECAY_MIN_PF = 1.0
BAYESIAN_LAG_SCALE = 1000.0
BAYESIAN_LAG_FLOOR_MS = 37.0
BAYESIAN_LAG_MAX_MS = 100.0
VIX_SPIKE_PIPS_THRESHOLD = 500.0
HIGH_VOL_MIN_WIN_RATE = 55.0

CERT_MIN_PROFIT_FACTOR = 1.15
CERT_MAX_DRAWDOWN_PCT = 30.0
CERT_MIN_RECOVERY_FACTOR = 1.0

# Constant placeholders: not derived from trade data.
CRISIS_ALPHA_PLACEHOLDER_PASS = True
SLIPPAGE_CONTROL_PLACEHOLDER_PASS = True


def run_pattern_decay(profit_factor: float) -> StressVerdict:
    """Profit factor after a simulated 20% decay must stay >= 1.0."""
    decayed = profit_factor * PATTERN_DECAY_FACTOR
    return StressVerdict(
        name="Pattern Decay",
        value=format_metric(decayed),
        threshold=f">= {format_metric(PATTERN_DECAY_MIN_PF)}",
        passed=decayed >= PATTERN_DECAY_MIN_PF,
        detail=f"profit factor {format_metric(profit_factor)} x {PATTERN_DECAY_FACTOR}",
    )


def calculate_bayesian_lag_ms(trades: Sequence[TradeRecord]) -> float:
    """
    Synthetic adaptation lag.

    Average |combined_bayesian_adjustment| over trades that carry the
    field, x1000, floored at 37 ms.
    """
    adjustments = [
        abs(t.combined_bayesian_adjustment) for t in trades if t.combined_bayesian_adjustment is not None
    ]
    average = sum(adjustments) / len(adjustments) if adjustments else 0.0
    return max(average * BAYESIAN_LAG_SCALE, BAYESIAN_LAG_FLOOR_MS)


def run_bayesian_lag(trades: Sequence[TradeRecord]) -> StressVerdict:
    """Synthetic Bayesian adaptation lag must be <= 100 ms."""
    lag = calculate_bayesian_lag_ms(trades)
    return StressVerdict(
        name="Bayesian Lag",
        value=format_metric(lag),
        threshold=f"<= {format_metric(BAYESIAN_LAG_MAX_MS)} ms",
        passed=lag <= BAYESIAN_LAG_MAX_MS,
        detail="proxy from average |combined_bayesian_adjustment|",
    )


def calculate_high_volatility_win_rate(
    trades: Sequence[TradeRecord], threshold: float = VIX_SPIKE_PIPS_THRESHOLD
) -> tuple[float, int]:
    """
    Win rate over trades with |pips| > threshold.

    Returns:
        (win_rate, trade_count); win rate is 0.0 when no trade qualifies
    """
    spiked = [t for t in trades if abs(t.pips) > threshold]
    if not spiked:
        return 0.0, 0
    wins = sum(1 for t in spiked if t.is_win)
    return wins / len(spiked) * 100, len(spiked)


def run_high_volatility_win_rate(trades: Sequence[TradeRecord]) -> StressVerdict:
    """VIX-spike proxy: win rate on |pips| > 500 trades must be >= 55%."""
    win_rate, count = calculate_high_volatility_win_rate(trades)
    return StressVerdict(
        name="High Volatility Win Rate",
        value=format_metric(win_rate),
        threshold=f">= {format_metric(HIGH_VOL_MIN_WIN_RATE)}%",
        passed=win_rate >= HIGH_VOL_MIN_WIN_RATE,
        detail=f"{count} trades with |pips| > {VIX_SPIKE_PIPS_THRESHOLD:g}",
    )


def build_certification(
    profit_factor: float,
    high_vol_win_rate: float,
    max_drawdown_pct: float,
    recovery_factor: float,
    bayesian_lag: StressVerdict,
) -> Certification:
    """
    Evaluate the seven certification checks independently.

    Crisis alpha and slippage control are constant placeholders
    (derived=False); they always pass and say nothing about the strategy.
    """
    checks = [
        CertificationCheck(
            name="Profit Factor",
            value=format_metric(profit_factor),
            threshold=f">= {format_metric(CERT_MIN_PROFIT_FACTOR)}",
            passed=profit_factor >= CERT_MIN_PROFIT_FACTOR,
        ),
        CertificationCheck(
            name="High Volatility Win Rate",
            value=format_metric(high_vol_win_rate),
            threshold=f">= {format_metric(HIGH_VOL_MIN_WIN_RATE)}%",
            passed=high_vol_win_rate >= HIGH_VOL_MIN_WIN_RATE,
        ),
        CertificationCheck(
            name="Max Drawdown",
            value=format_metric(max_drawdown_pct),
            threshold=f"<= {format_metric(CERT_MAX_DRAWDOWN_PCT)}%",
            passed=max_drawdown_pct <= CERT_MAX_DRAWDOWN_PCT,
        ),
        CertificationCheck(
            name="Recovery Factor",
            value=format_metric(recovery_factor),
            threshold=f">= {format_metric(CERT_MIN_RECOVERY_FACTOR)}",
            passed=recovery_factor >= CERT_MIN_RECOVERY_FACTOR,
        ),
        CertificationCheck(
            name="Bayesian Lag",
            value=bayesian_lag.value,
            threshold=bayesian_lag.threshold,
            passed=bayesian_lag.passed,
        ),
        CertificationCheck(
            name="Crisis Alpha",
            value="placeholder",
            threshold="n/a",
            passed=CRISIS_ALPHA_PLACEHOLDER_PASS,
            derived=False,
        ),
        CertificationCheck(
            name="Slippage Control",
            value="placeholder",
            threshold="n/a",
            passed=SLIPPAGE_CONTROL_PLACEHOLDER_PASS,
            derived=False,
        ),
    ]
    return Certification(
        checks=checks,
        passed_count=sum(1 for c in checks if c.passed),
        total_count=len(checks),
    )
