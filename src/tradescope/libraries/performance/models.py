"""Performance analytics data models.

Pydantic models for normalized trades, the equity curve, every metric group,
and the AnalyticsReport that aggregates them. All models are frozen: a
report is computed once and handed to the store and the renderer unchanged.

Values that can diverge (profit factor, Sortino, Calmar, recovery factor)
appear in the report only as display strings from
`tradescope.libraries.performance.formatting.format_metric`, so a report
survives a JSON round trip without loss.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tradescope.libraries.performance.timeutils import parse_timestamp

WIN = "WIN"
LOSS = "LOSS"


class TradeRecord(BaseModel):
    """
    One normalized row of a trade export.

    Confidence values are on a 0-100 scale: the normalizer converts
    fractional (0-1) inputs once at ingestion.
    """

    model_config = ConfigDict(frozen=True)

    trade_id: str
    entry_time: str = ""
    exit_time: str = ""
    duration: str = ""
    duration_minutes: float = 0.0
    direction: str = ""
    entry_price: float = 0.0
    exit_price: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    result: str = ""
    pnl: float = 0.0
    pips: float = 0.0
    position_size: float = 0.0
    risk_percentage: float = 0.0
    balance_before: float = 0.0
    balance_after: float = 0.0
    leverage_ratio: float = 0.0
    confidence: float = 0.0
    bayesian_confidence: float | None = None
    combined_bayesian_adjustment: float | None = None
    pattern: str = "Unknown"
    signal_source: str = "Unknown"
    symbol: str = ""
    strategy: str = ""
    extra: dict[str, str] = Field(default_factory=dict)

    @property
    def is_win(self) -> bool:
        """Only the exact literal "WIN" is a win."""
        return self.result == WIN

    @property
    def is_loss(self) -> bool:
        """Exact "LOSS" literal (used for loss PnL totals)."""
        return self.result == LOSS

    @property
    def effective_confidence(self) -> float:
        """Bayesian confidence when present, else plain confidence."""
        if self.bayesian_confidence is not None:
            return self.bayesian_confidence
        return self.confidence

    @property
    def entry_datetime(self) -> datetime | None:
        return parse_timestamp(self.entry_time)

    @property
    def exit_datetime(self) -> datetime | None:
        return parse_timestamp(self.exit_time)


class EquityPoint(BaseModel):
    """
    Single point on the per-trade equity curve.

    Index-aligned with the trade sequence. Stored unrounded; use rounded()
    for the display copy that goes into the report.
    """

    model_config = ConfigDict(frozen=True)

    trade_index: int  # 1-based
    date: str
    balance: float
    peak_balance: float
    drawdown_pct: float
    drawdown_value: float  # peak - balance, in currency
    pnl: float
    return_pct: float  # relative to starting balance

    def rounded(self) -> "EquityPoint":
        """Display copy with currency and percentages rounded to 2 dp."""
        return self.model_copy(
            update={
                "balance": round(self.balance, 2),
                "peak_balance": round(self.peak_balance, 2),
                "drawdown_pct": round(self.drawdown_pct, 2),
                "drawdown_value": round(self.drawdown_value, 2),
                "pnl": round(self.pnl, 2),
                "return_pct": round(self.return_pct, 2),
            }
        )


class TimeBucket(BaseModel):
    """PnL aggregated over one weekday, hour, or month."""

    model_config = ConfigDict(frozen=True)

    label: str
    pnl: float
    trades: int


class TemporalBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    by_weekday: list[TimeBucket] = Field(default_factory=list)
    by_hour: list[TimeBucket] = Field(default_factory=list)
    by_month: list[TimeBucket] = Field(default_factory=list)


class GroupStats(BaseModel):
    """Aggregate statistics for one pattern tag or signal source."""

    model_config = ConfigDict(frozen=True)

    name: str
    trades: int
    wins: int
    losses: int
    total_pnl: float
    win_rate: float
    avg_confidence: float
    avg_pnl: float
    profit_factor: str  # display string, "∞" when there are no losing trades


class SourcePnlPoint(BaseModel):
    """
    One trade on the per-source cumulative PnL series.

    cumulative_pnl and trade_counts hold every source seen in the report,
    so each point is a full snapshot of all running totals after this trade.
    """

    model_config = ConfigDict(frozen=True)

    trade_number: int  # 1-based, chronological
    date: str  # entry date (ISO), "" when unparsable
    source: str
    pnl: float
    cumulative_pnl: dict[str, float]
    trade_counts: dict[str, int]


class RegimeStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    regime: str
    trades: int
    win_rate: float
    total_pnl: float
    avg_pnl: float


class RegimeAnalysis(BaseModel):
    """Normal vs high volatility split on absolute pips."""

    model_config = ConfigDict(frozen=True)

    threshold_pips: float
    normal: RegimeStats
    high: RegimeStats


class RecoveryAnalysis(BaseModel):
    """Drawdown recovery lengths, measured in trades."""

    model_config = ConfigDict(frozen=True)

    recovery_periods: int
    avg_recovery_trades: float
    max_recovery_trades: int
    in_drawdown_at_end: bool
    current_drawdown_trades: int


class StressVerdict(BaseModel):
    """Outcome of one deterministic stress test."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    threshold: str
    passed: bool
    detail: str = ""


class CertificationCheck(BaseModel):
    """
    One institutional certification criterion.

    derived=False marks a constant placeholder that is not computed from
    trade data and carries no information about the strategy.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    threshold: str
    passed: bool
    derived: bool = True


class Certification(BaseModel):
    model_config = ConfigDict(frozen=True)

    checks: list[CertificationCheck]
    passed_count: int
    total_count: int

    @property
    def certified(self) -> bool:
        return self.passed_count == self.total_count


class LearningAnalysis(BaseModel):
    """Early-vs-late comparison used to detect adaptive learning."""

    model_config = ConfigDict(frozen=True)

    segment_size: int
    early_win_rate: float
    late_win_rate: float
    win_rate_improvement: float
    early_avg_pnl: float
    late_avg_pnl: float
    pnl_improvement: float
    early_avg_confidence: float
    late_avg_confidence: float
    confidence_improvement: float
    total_bayesian_adjustment: float
    has_bayesian_data: bool
    learning_detected: bool
    confidence_trend: str  # "increasing" | "decreasing" | "stable"


class SourceScore(BaseModel):
    """AI-effectiveness breakdown for one signal source."""

    model_config = ConfigDict(frozen=True)

    source: str
    trades: int
    weight: float
    win_rate_score: float
    confidence_score: float
    risk_adjusted_score: float
    activity_score: float
    consistency_score: float
    total_score: float


class CompositeScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    performance_score: float
    risk_score: float
    ai_effectiveness_score: float
    overall_score: float
    grade: str
    source_scores: list[SourceScore] = Field(default_factory=list)


class PerformanceMetrics(BaseModel):
    """Core performance group (display strings, as rendered)."""

    model_config = ConfigDict(frozen=True)

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: str
    loss_rate: str
    profit_factor: str
    avg_win: str
    avg_loss: str
    expectancy: str
    sharpe_ratio: str
    sortino_ratio: str
    calmar_ratio: str
    recovery_factor: str
    kelly_percentage: str
    max_win_streak: int
    max_loss_streak: int
    avg_risk: str
    best_trade: str
    worst_trade: str
    total_pnl: str


class RiskMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    var_95: str
    cvar_95: str
    information_ratio: str
    max_drawdown: str
    max_drawdown_value: str
    recovery: RecoveryAnalysis
    consecutive_loss_stress: StressVerdict


class PositionManagement(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_position_size: str
    avg_risk_pct: str
    avg_leverage: str
    avg_risk_reward: str
    avg_duration_minutes: str


class StressTests(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern_decay: StressVerdict
    bayesian_lag: StressVerdict
    high_volatility_win_rate: StressVerdict


class InstitutionalMetrics(BaseModel):
    """Extended metric groups: everything beyond the headline summary."""

    model_config = ConfigDict(frozen=True)

    performance: PerformanceMetrics
    risk: RiskMetrics
    position_management: PositionManagement
    top_patterns: list[GroupStats]
    signal_sources: list[GroupStats]
    source_cumulative_pnl: list[SourcePnlPoint]
    regimes: RegimeAnalysis
    stress_tests: StressTests
    certification: Certification
    learning: LearningAnalysis
    scores: CompositeScores


class SummaryMetrics(BaseModel):
    """Headline numbers shown at the top of a report."""

    model_config = ConfigDict(frozen=True)

    starting_balance: float
    final_balance: float
    total_return: str
    max_drawdown: str
    total_trades: int


class ReportHeader(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset: str
    strategy: str
    start_date: str | None
    end_date: str | None
    total_trades: int


class AnalyticsReport(BaseModel):
    """
    Complete analytics report for one CSV submission.

    Produced once by ReportingService.generate_report(), stored as an opaque
    JSON document, and rendered unchanged.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: str = "report.v1"
    file_name: str
    header: ReportHeader
    chart_data: list[EquityPoint]
    temporal: TemporalBreakdown
    metrics: SummaryMetrics
    institutional_metrics: InstitutionalMetrics
    trades: list[TradeRecord]
