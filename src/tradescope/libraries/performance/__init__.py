"""Performance analytics library for trade exports.

1. **Models** (`models.py`): Frozen pydantic data structures
   - TradeRecord: One normalized CSV row
   - EquityPoint: Per-trade equity / drawdown point
   - GroupStats, RegimeAnalysis, StressVerdict, Certification, ...
   - AnalyticsReport: Complete report

2. **Metrics** (`metrics.py`, `risk.py`, `positions.py`): Pure functions
   - Trade stats: win rate, profit factor, expectancy, streaks
   - Risk-adjusted: Sharpe, Sortino, Calmar, recovery factor, Kelly-style metric
   - Risk: VaR/CVaR, information ratio, recovery times, loss-streak stress

3. **Analysis** (`grouping.py`, `stress.py`, `scoring.py`)
   - Weekday/hour/month buckets, pattern and signal-source groups, regimes
   - Per-source cumulative PnL series
   - Stress tests and certification checks
   - Learning detection and composite scores

4. **Calculators** (`calculators.py`): Single forward pass state machines
   - EquityCurveCalculator, StreakCalculator, RecoveryTimeCalculator

5. **Formatting** (`formatting.py`): format_metric, the one display formatter

Usage:
    >>> from tradescope.libraries.performance import build_equity_curve, calculate_sharpe_ratio
    >>> curve = build_equity_curve(trades, starting_balance=10000.0)
    >>> sharpe = calculate_sharpe_ratio(calculate_trade_returns(trades))
"""

from tradescope.libraries.performance.calculators import (
    EquityCurveCalculator,
    RecoveryTimeCalculator,
    StreakCalculator,
    build_equity_curve,
    resolve_starting_balance,
)
from tradescope.libraries.performance.formatting import format_metric
from tradescope.libraries.performance.metrics import (
    calculate_calmar_ratio,
    calculate_expectancy,
    calculate_kelly_metric,
    calculate_max_drawdown,
    calculate_profit_factor,
    calculate_recovery_factor,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_streaks,
    calculate_total_return,
    calculate_trade_returns,
    calculate_win_rate,
)
from tradescope.libraries.performance.models import (
    AnalyticsReport,
    EquityPoint,
    GroupStats,
    StressVerdict,
    TradeRecord,
)
from tradescope.libraries.performance.risk import (
    calculate_information_ratio,
    calculate_recovery_times,
    calculate_var_cvar,
    run_consecutive_loss_stress,
)

__all__ = [
    # Models
    "TradeRecord",
    "EquityPoint",
    "GroupStats",
    "StressVerdict",
    "AnalyticsReport",
    # Calculators
    "EquityCurveCalculator",
    "StreakCalculator",
    "RecoveryTimeCalculator",
    "build_equity_curve",
    "resolve_starting_balance",
    # Metrics
    "calculate_win_rate",
    "calculate_profit_factor",
    "calculate_expectancy",
    "calculate_trade_returns",
    "calculate_sharpe_ratio",
    "calculate_sortino_ratio",
    "calculate_total_return",
    "calculate_max_drawdown",
    "calculate_calmar_ratio",
    "calculate_kelly_metric",
    "calculate_recovery_factor",
    "calculate_streaks",
    # Risk
    "calculate_var_cvar",
    "calculate_information_ratio",
    "calculate_recovery_times",
    "run_consecutive_loss_stress",
    # Formatting
    "format_metric",
]
