"""Rich console formatters for analytics reports.

Renders a stored or freshly computed AnalyticsReport as terminal tables.
Report values are already display strings; this module only lays them out
and colors them.
"""

from typing import Literal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tradescope.libraries.performance.formatting import INFINITY_SYMBOL
from tradescope.libraries.performance.models import (
    AnalyticsReport,
    Certification,
    GroupStats,
    StressVerdict,
    TimeBucket,
)


def _to_float(value: str) -> float | None:
    if value == INFINITY_SYMBOL:
        return float("inf")
    try:
        return float(value)
    except ValueError:
        return None


def _get_color(value: str | float) -> str:
    """Get color based on positive/negative value."""
    number = _to_float(value) if isinstance(value, str) else value
    if number is None:
        return "white"
    if number > 0:
        return "green"
    elif number < 0:
        return "red"
    return "white"


def _colored(value: str, suffix: str = "", prefix: str = "") -> str:
    color = _get_color(value)
    return f"[{color}]{prefix}{value}{suffix}[/{color}]"


def _threshold_color(value: str, good: float, ok: float) -> str:
    """green above `good`, yellow above `ok`, red otherwise."""
    number = _to_float(value)
    if number is None:
        return "white"
    return "green" if number > good else "yellow" if number > ok else "red"


def _format_currency(value: float) -> str:
    return f"${value:,.2f}"


def _status(passed: bool) -> str:
    return "[green]PASS[/green]" if passed else "[red]FAIL[/red]"


def _create_summary_table(report: AnalyticsReport) -> Table:
    """Create headline summary table."""
    table = Table(title="📊 Report Summary", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    header = report.header
    table.add_row("File", report.file_name)
    table.add_row("Asset", header.asset)
    table.add_row("Strategy", header.strategy)
    if header.start_date and header.end_date:
        table.add_row("Period", f"{header.start_date} to {header.end_date}")
    table.add_row("", "")  # Spacer

    metrics = report.metrics
    table.add_row("Starting Balance", _format_currency(metrics.starting_balance))
    table.add_row("Final Balance", _format_currency(metrics.final_balance))
    table.add_row("Total Return", _colored(metrics.total_return, "%"))
    table.add_row("Max Drawdown", f"[red]{metrics.max_drawdown}%[/red]")
    table.add_row("Total Trades", f"{metrics.total_trades:,}")

    return table


def _create_performance_table(report: AnalyticsReport) -> Table:
    """Create core performance table."""
    perf = report.institutional_metrics.performance
    table = Table(title="💼 Trade Statistics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Winning Trades", f"[green]{perf.winning_trades:,}[/green]")
    table.add_row("Losing Trades", f"[red]{perf.losing_trades:,}[/red]")

    win_rate_color = _threshold_color(perf.win_rate, 50, 40)
    table.add_row("Win Rate", f"[{win_rate_color}]{perf.win_rate}%[/{win_rate_color}]")

    pf_color = _threshold_color(perf.profit_factor, 2.0, 1.0)
    table.add_row("Profit Factor", f"[{pf_color}]{perf.profit_factor}[/{pf_color}]")
    table.add_row("Expectancy", _colored(perf.expectancy, prefix="$"))
    table.add_row("", "")  # Spacer
    table.add_row("Avg Win", f"[green]${perf.avg_win}[/green]")
    table.add_row("Avg Loss", f"[red]${perf.avg_loss}[/red]")
    table.add_row("Best Trade", f"[green]${perf.best_trade}[/green]")
    table.add_row("Worst Trade", f"[red]${perf.worst_trade}[/red]")
    table.add_row("Total PnL", _colored(perf.total_pnl, prefix="$"))
    table.add_row("", "")  # Spacer
    table.add_row("Max Consecutive Wins", str(perf.max_win_streak))
    table.add_row("Max Consecutive Losses", str(perf.max_loss_streak))
    table.add_row("Kelly %", perf.kelly_percentage)
    table.add_row("Avg Risk %", perf.avg_risk)

    return table


def _create_risk_adjusted_table(report: AnalyticsReport) -> Table:
    """Create risk-adjusted returns table."""
    perf = report.institutional_metrics.performance
    risk = report.institutional_metrics.risk
    table = Table(title=" 📈 Risk-Adjusted Returns ", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in (
        ("Sharpe Ratio", perf.sharpe_ratio),
        ("Sortino Ratio", perf.sortino_ratio),
        ("Calmar Ratio", perf.calmar_ratio),
        ("Recovery Factor", perf.recovery_factor),
    ):
        color = _threshold_color(value, 1.0, 0.0)
        table.add_row(label, f"[{color}]{value}[/{color}]")

    table.add_row("Information Ratio", risk.information_ratio)
    return table


def _create_risk_table(report: AnalyticsReport) -> Table:
    """Create risk metrics table."""
    risk = report.institutional_metrics.risk
    table = Table(title="⚠️  Risk Metrics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("VaR 95%", f"[red]{risk.var_95}%[/red]")
    table.add_row("CVaR 95%", f"[red]{risk.cvar_95}%[/red]")
    table.add_row("Max Drawdown", f"[red]{risk.max_drawdown}%[/red]")
    table.add_row("Max Drawdown ($)", f"[red]${risk.max_drawdown_value}[/red]")

    recovery = risk.recovery
    table.add_row("Recovered Drawdowns", str(recovery.recovery_periods))
    table.add_row("Avg Recovery", f"{recovery.avg_recovery_trades:.1f} trades")
    table.add_row("Longest Recovery", f"{recovery.max_recovery_trades} trades")
    if recovery.in_drawdown_at_end:
        table.add_row("Current Drawdown", f"[yellow]{recovery.current_drawdown_trades} trades[/yellow]")

    return table


def _create_position_table(report: AnalyticsReport) -> Table:
    """Create position management table."""
    pm = report.institutional_metrics.position_management
    table = Table(title="📐 Position Management", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Avg Position Size", pm.avg_position_size)
    table.add_row("Avg Risk %", f"{pm.avg_risk_pct}%")
    table.add_row("Avg Leverage", f"{pm.avg_leverage}x")
    table.add_row("Avg Reward/Risk", pm.avg_risk_reward)
    table.add_row("Avg Duration", f"{pm.avg_duration_minutes} min")

    return table


def _create_group_table(groups: list[GroupStats], title: str, label: str) -> Table | None:
    """Create pattern / signal source table."""
    if not groups:
        return None

    table = Table(title=title, box=None, padding=(0, 1))

    table.add_column(label, style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Total PnL", justify="right")
    table.add_column("Avg PnL", justify="right")
    table.add_column("PF", justify="right")
    table.add_column("Avg Conf", justify="right")

    for group in groups:
        pnl_color = _get_color(group.total_pnl)
        table.add_row(
            group.name,
            f"{group.trades:,}",
            f"{group.win_rate:.2f}%",
            f"[{pnl_color}]{_format_currency(group.total_pnl)}[/{pnl_color}]",
            _format_currency(group.avg_pnl),
            group.profit_factor,
            f"{group.avg_confidence:.1f}",
        )

    return table


def _create_bucket_table(buckets: list[TimeBucket], title: str) -> Table | None:
    """Create weekday / hour / month PnL table."""
    if not buckets:
        return None

    table = Table(title=title, box=None, padding=(0, 1))

    table.add_column("Period", style="cyan")
    table.add_column("PnL", justify="right")
    table.add_column("Trades", justify="right")

    for bucket in buckets:
        color = _get_color(bucket.pnl)
        table.add_row(bucket.label, f"[{color}]{_format_currency(bucket.pnl)}[/{color}]", f"{bucket.trades:,}")

    return table


def _create_stress_table(verdicts: list[StressVerdict]) -> Table:
    """Create stress test table."""
    table = Table(title="🧪 Stress Tests", box=None, padding=(0, 1))

    table.add_column("Test", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Threshold", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Detail", style="dim")

    for verdict in verdicts:
        table.add_row(verdict.name, verdict.value, verdict.threshold, _status(verdict.passed), verdict.detail)

    return table


def _create_certification_table(certification: Certification) -> Table:
    """Create certification checks table."""
    verdict = "[green]CERTIFIED[/green]" if certification.certified else "[yellow]NOT CERTIFIED[/yellow]"
    table = Table(
        title=f"🏅 Certification ({certification.passed_count}/{certification.total_count}) {verdict}",
        box=None,
        padding=(0, 1),
    )

    table.add_column("Check", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Threshold", justify="right")
    table.add_column("Status", justify="center")

    for check in certification.checks:
        name = check.name if check.derived else f"{check.name} [dim](placeholder)[/dim]"
        table.add_row(name, check.value, check.threshold, _status(check.passed))

    return table


def _create_scores_table(report: AnalyticsReport) -> Table:
    """Create learning and composite score table."""
    im = report.institutional_metrics
    table = Table(title="🤖 Learning & Scores", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    learning = im.learning
    detected = "[green]yes[/green]" if learning.learning_detected else "[dim]no[/dim]"
    table.add_row("Learning Detected", detected)
    table.add_row("Win Rate Change", _colored(f"{learning.win_rate_improvement:.2f}", " pts"))
    table.add_row("Avg PnL Change", _colored(f"{learning.pnl_improvement:.2f}", prefix="$"))
    table.add_row("Confidence Trend", learning.confidence_trend)
    table.add_row("", "")  # Spacer

    scores = im.scores
    table.add_row("Performance Score", f"{scores.performance_score:.1f}")
    table.add_row("Risk Score", f"{scores.risk_score:.1f}")
    table.add_row("AI Effectiveness", f"{scores.ai_effectiveness_score:.1f}")
    table.add_row("Overall", f"[bold]{scores.overall_score:.1f} ({scores.grade})[/bold]")

    return table


def _print(console: Console, renderable: Table | None) -> None:
    if renderable is not None:
        console.print(renderable)
        console.print()


def display_report(
    report: AnalyticsReport,
    detail_level: Literal["summary", "standard", "full"] = "standard",
    console: Console | None = None,
) -> None:
    """
    Display an analytics report in Rich-formatted console output.

    Args:
        report: Complete analytics report
        detail_level: Level of detail to display:
            - "summary": Headline numbers only
            - "standard": Summary + trade stats + risk + stress/certification
            - "full": Everything including groups, regimes and time buckets
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    console.print()  # Blank line
    _print(console, _create_summary_table(report))

    im = report.institutional_metrics
    if detail_level in ["standard", "full"]:
        _print(console, _create_performance_table(report))
        _print(console, _create_risk_adjusted_table(report))
        _print(console, _create_risk_table(report))
        _print(console, _create_position_table(report))
        _print(
            console,
            _create_stress_table(
                [
                    im.risk.consecutive_loss_stress,
                    im.stress_tests.pattern_decay,
                    im.stress_tests.bayesian_lag,
                    im.stress_tests.high_volatility_win_rate,
                ]
            ),
        )
        _print(console, _create_certification_table(im.certification))
        _print(console, _create_scores_table(report))

    if detail_level == "full":
        _print(console, _create_group_table(im.top_patterns, "🧩 Top Patterns", "Pattern"))
        _print(console, _create_group_table(im.signal_sources, "📡 Signal Sources", "Source"))

        regimes = im.regimes
        regime_table = Table(title=f"🌪️  Regimes (|pips| > {regimes.threshold_pips:g})", box=None, padding=(0, 1))
        regime_table.add_column("Regime", style="cyan")
        regime_table.add_column("Trades", justify="right")
        regime_table.add_column("Win Rate", justify="right")
        regime_table.add_column("Total PnL", justify="right")
        for regime in (regimes.normal, regimes.high):
            regime_table.add_row(
                regime.regime, f"{regime.trades:,}", f"{regime.win_rate:.2f}%", _format_currency(regime.total_pnl)
            )
        _print(console, regime_table)

        _print(console, _create_bucket_table(report.temporal.by_weekday, "📅 PnL by Weekday"))
        _print(console, _create_bucket_table(report.temporal.by_hour, "🕐 PnL by Hour"))
        _print(console, _create_bucket_table(report.temporal.by_month, "📅 PnL by Month"))

    # Final summary panel
    metrics = report.metrics
    summary_text = Text()
    summary_text.append("🏁 Report Complete: ", style="bold")
    summary_text.append(
        f"{_format_currency(metrics.starting_balance)} → {_format_currency(metrics.final_balance)}", style="bold cyan"
    )
    summary_text.append(f" ({metrics.total_return}%)", style=f"bold {_get_color(metrics.total_return)}")
    summary_text.append(f"  Grade {im.scores.grade}", style="bold")

    console.print(Panel(summary_text, border_style="green" if _get_color(metrics.total_return) == "green" else "red"))
    console.print()
