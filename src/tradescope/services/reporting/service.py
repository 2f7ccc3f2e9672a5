"""Reporting service.

Runs the full pipeline for one CSV submission:

    CSV text -> normalizer -> equity curve -> metric groups -> AnalyticsReport

and optionally hands the finished report to a ReportStore. The service holds
no per-report state; every call is independent.
"""

from typing import Optional, Sequence

from tradescope.libraries.performance.calculators import build_equity_curve, resolve_starting_balance
from tradescope.libraries.performance.formatting import format_metric
from tradescope.libraries.performance.grouping import (
    analyze_regimes,
    build_source_cumulative_pnl,
    build_temporal_breakdown,
    group_by_pattern,
    group_by_signal_source,
)
from tradescope.libraries.performance.metrics import (
    calculate_average_loss,
    calculate_average_risk,
    calculate_average_win,
    calculate_best_trade,
    calculate_calmar_ratio,
    calculate_expectancy,
    calculate_kelly_metric,
    calculate_loss_rate,
    calculate_max_drawdown,
    calculate_max_drawdown_value,
    calculate_profit_factor,
    calculate_recovery_factor,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_streaks,
    calculate_total_pnl,
    calculate_total_return,
    calculate_trade_returns,
    calculate_win_rate,
    calculate_worst_trade,
)
from tradescope.libraries.performance.models import (
    AnalyticsReport,
    EquityPoint,
    InstitutionalMetrics,
    PerformanceMetrics,
    PositionManagement,
    ReportHeader,
    RiskMetrics,
    StressTests,
    SummaryMetrics,
    TradeRecord,
)
from tradescope.libraries.performance.positions import (
    calculate_average_duration,
    calculate_average_leverage,
    calculate_average_position_size,
    calculate_average_risk_reward,
)
from tradescope.libraries.performance.risk import (
    calculate_information_ratio,
    calculate_recovery_times,
    calculate_var_cvar,
    run_consecutive_loss_stress,
)
from tradescope.libraries.performance.scoring import calculate_composite_scores, detect_learning
from tradescope.libraries.performance.stress import (
    build_certification,
    calculate_high_volatility_win_rate,
    run_bayesian_lag,
    run_high_volatility_win_rate,
    run_pattern_decay,
)
from tradescope.services.ingest.normalizer import normalize_csv
from tradescope.services.reporting.store import ReportStore
from tradescope.system import LoggerFactory
from tradescope.system.config import AnalyticsConfig

logger = LoggerFactory.get_logger()

UNKNOWN_LABEL = "Unknown"


def _first_label(values: Sequence[str]) -> str:
    """First non-empty value, or "Unknown"."""
    return next((v for v in values if v), UNKNOWN_LABEL)


def build_header(trades: Sequence[TradeRecord]) -> ReportHeader:
    """
    Report header from trade metadata.

    The date range spans the earliest parsable entry time to the latest
    parsable exit (or entry) time; both are None when nothing parses.
    """
    starts = [t.entry_datetime for t in trades if t.entry_datetime is not None]
    ends = [t.exit_datetime or t.entry_datetime for t in trades]
    ends = [e for e in ends if e is not None]
    return ReportHeader(
        asset=_first_label([t.symbol for t in trades]),
        strategy=_first_label([t.strategy for t in trades]),
        start_date=min(starts).date().isoformat() if starts else None,
        end_date=max(ends).date().isoformat() if ends else None,
        total_trades=len(trades),
    )


class ReportingService:
    """Computes analytics reports and submits them to a store.

    Attributes:
        store: Optional report store used by submit()
        config: Engine defaults (starting balance, display name, caps)

    Example:
        >>> service = ReportingService(store=MemoryReportStore())
        >>> report = service.generate_report(csv_text, file_name="eurusd.csv")
        >>> report.metrics.total_return
        '8.00'
        >>> report_id = service.submit(csv_text)
    """

    def __init__(self, store: Optional[ReportStore] = None, config: Optional[AnalyticsConfig] = None) -> None:
        self.store = store
        self.config = config or AnalyticsConfig()

    def generate_report(self, csv_text: Optional[str], file_name: Optional[str] = None) -> AnalyticsReport:
        """
        Compute the complete report for one CSV export.

        Args:
            csv_text: Raw CSV content (header + rows)
            file_name: Display name; defaults to config.default_file_name

        Returns:
            Frozen AnalyticsReport

        Raises:
            InvalidInputError: If the CSV is missing or has no data rows
        """
        trades = normalize_csv(csv_text)
        report = self.build_report(trades, file_name or self.config.default_file_name)
        logger.info(
            "reporting.report_generated",
            file_name=report.file_name,
            trades=len(trades),
            total_return=report.metrics.total_return,
            grade=report.institutional_metrics.scores.grade,
        )
        return report

    def submit(self, csv_text: Optional[str], file_name: Optional[str] = None) -> str:
        """
        Compute a report and insert it into the store.

        Returns:
            Opaque report id issued by the store

        Raises:
            InvalidInputError: If the CSV is missing or has no data rows
            ReportStoreError: If the store rejects the report
            RuntimeError: If the service was created without a store
        """
        if self.store is None:
            raise RuntimeError("ReportingService has no store configured")
        report = self.generate_report(csv_text, file_name)
        report_id = self.store.insert(report)
        logger.info("reporting.report_submitted", report_id=report_id, file_name=report.file_name)
        return report_id

    def build_report(self, trades: Sequence[TradeRecord], file_name: str) -> AnalyticsReport:
        """Assemble every metric group from an already-normalized trade list."""
        starting_balance = resolve_starting_balance(trades, self.config.default_starting_balance)
        curve = build_equity_curve(trades, starting_balance)
        final_balance = curve[-1].balance if curve else starting_balance

        total_return = calculate_total_return(starting_balance, final_balance)
        max_drawdown = calculate_max_drawdown(curve)

        return AnalyticsReport(
            file_name=file_name,
            header=build_header(trades),
            chart_data=[point.rounded() for point in curve],
            temporal=build_temporal_breakdown(trades),
            metrics=SummaryMetrics(
                starting_balance=round(starting_balance, 2),
                final_balance=round(final_balance, 2),
                total_return=format_metric(total_return),
                max_drawdown=format_metric(max_drawdown),
                total_trades=len(trades),
            ),
            institutional_metrics=self._institutional_metrics(trades, curve, starting_balance, total_return),
            trades=list(trades),
        )

    def _institutional_metrics(
        self,
        trades: Sequence[TradeRecord],
        curve: Sequence[EquityPoint],
        starting_balance: float,
        total_return: float,
    ) -> InstitutionalMetrics:
        returns = calculate_trade_returns(trades)
        returns_pct = [r * 100 for r in returns]

        win_rate = calculate_win_rate(trades)
        avg_win = calculate_average_win(trades)
        avg_loss = calculate_average_loss(trades)
        profit_factor = calculate_profit_factor(trades)
        sharpe = calculate_sharpe_ratio(returns)
        max_drawdown = calculate_max_drawdown(curve)
        max_drawdown_value = calculate_max_drawdown_value(curve)
        total_pnl = calculate_total_pnl(trades)
        recovery_factor = calculate_recovery_factor(total_pnl, max_drawdown_value)
        win_streak, loss_streak = calculate_streaks(trades)
        var_95, cvar_95 = calculate_var_cvar(returns_pct)
        high_vol_win_rate, _ = calculate_high_volatility_win_rate(trades)
        bayesian_lag = run_bayesian_lag(trades)

        performance = PerformanceMetrics(
            total_trades=len(trades),
            winning_trades=sum(1 for t in trades if t.is_win),
            losing_trades=sum(1 for t in trades if t.is_loss),
            win_rate=format_metric(win_rate),
            loss_rate=format_metric(calculate_loss_rate(trades)),
            profit_factor=format_metric(profit_factor),
            avg_win=format_metric(avg_win),
            avg_loss=format_metric(avg_loss),
            expectancy=format_metric(calculate_expectancy(avg_win, avg_loss, win_rate)),
            sharpe_ratio=format_metric(sharpe),
            sortino_ratio=format_metric(calculate_sortino_ratio(returns)),
            calmar_ratio=format_metric(calculate_calmar_ratio(total_return, max_drawdown)),
            recovery_factor=format_metric(recovery_factor),
            kelly_percentage=format_metric(calculate_kelly_metric(win_rate, avg_win, avg_loss) * 100),
            max_win_streak=win_streak,
            max_loss_streak=loss_streak,
            avg_risk=format_metric(calculate_average_risk(trades)),
            best_trade=format_metric(calculate_best_trade(trades)),
            worst_trade=format_metric(calculate_worst_trade(trades)),
            total_pnl=format_metric(total_pnl),
        )

        risk = RiskMetrics(
            var_95=format_metric(var_95),
            cvar_95=format_metric(cvar_95),
            information_ratio=format_metric(calculate_information_ratio(returns_pct)),
            max_drawdown=format_metric(max_drawdown),
            max_drawdown_value=format_metric(max_drawdown_value),
            recovery=calculate_recovery_times(curve, starting_balance),
            consecutive_loss_stress=run_consecutive_loss_stress(trades, starting_balance),
        )

        position_management = PositionManagement(
            avg_position_size=format_metric(calculate_average_position_size(trades)),
            avg_risk_pct=format_metric(calculate_average_risk(trades)),
            avg_leverage=format_metric(calculate_average_leverage(trades)),
            avg_risk_reward=format_metric(calculate_average_risk_reward(trades)),
            avg_duration_minutes=format_metric(calculate_average_duration(trades)),
        )

        stress_tests = StressTests(
            pattern_decay=run_pattern_decay(profit_factor),
            bayesian_lag=bayesian_lag,
            high_volatility_win_rate=run_high_volatility_win_rate(trades),
        )

        return InstitutionalMetrics(
            performance=performance,
            risk=risk,
            position_management=position_management,
            top_patterns=group_by_pattern(trades, limit=self.config.top_patterns_limit),
            signal_sources=group_by_signal_source(trades),
            source_cumulative_pnl=build_source_cumulative_pnl(trades),
            regimes=analyze_regimes(trades),
            stress_tests=stress_tests,
            certification=build_certification(
                profit_factor=profit_factor,
                high_vol_win_rate=high_vol_win_rate,
                max_drawdown_pct=max_drawdown,
                recovery_factor=recovery_factor,
                bayesian_lag=bayesian_lag,
            ),
            learning=detect_learning(trades),
            scores=calculate_composite_scores(
                sharpe_ratio=sharpe,
                total_return_pct=total_return,
                win_rate=win_rate,
                max_drawdown_pct=max_drawdown,
                var_95=var_95,
                trades=trades,
            ),
        )
