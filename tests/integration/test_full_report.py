"""
Integration test: CSV export → ReportingService → FileReportStore → CLI.

Runs the sample trade export through the complete pipeline:
1. Normalize the CSV into trades
2. Compute every metric group into an AnalyticsReport
3. Persist the report as JSON and fetch it back by id
4. Validate the stored document against the report.v1 contract
5. Drive the same flow through `tradescope report` and `tradescope show`
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from jsonschema import validate

from tradescope.cli.main import main
from tradescope.services.reporting import FileReportStore, ReportingService

SCHEMA_PATH = Path(__file__).parent.parent.parent / "src" / "tradescope" / "contracts" / "schemas" / "report.v1.json"

pytestmark = pytest.mark.integration


@pytest.fixture
def store(tmp_path):
    """File store under a temporary directory."""
    return FileReportStore(tmp_path / "reports")


@pytest.fixture
def report(sample_csv_path):
    """Report for the ten-trade sample export."""
    return ReportingService().generate_report(sample_csv_path.read_text(), file_name="sample_trades.csv")


class TestSampleReport:
    """Test computed values for the sample export."""

    def test_summary(self, report):
        """Test headline numbers for 10000 -> 11400."""
        assert report.metrics.starting_balance == 10000.0
        assert report.metrics.final_balance == 11400.0
        assert report.metrics.total_return == "14.00"
        assert report.metrics.max_drawdown == "2.28"
        assert report.metrics.total_trades == 10

    def test_header(self, report):
        """Test metadata taken from the trades."""
        header = report.header

        assert header.asset == "EURUSD"
        assert header.strategy == "AI Hybrid"
        assert header.start_date == "2024-03-04"
        assert header.end_date == "2024-04-02"

    def test_trade_statistics(self, report):
        """Test win/loss counts with one BREAKEVEN trade."""
        performance = report.institutional_metrics.performance

        assert performance.winning_trades == 6
        assert performance.losing_trades == 3
        assert performance.win_rate == "60.00"
        assert performance.loss_rate == "30.00"
        assert performance.profit_factor == "3.33"
        assert performance.total_pnl == "1400.00"
        assert performance.max_win_streak == 2
        assert performance.max_loss_streak == 1

    def test_groups(self, report):
        """Test pattern and signal source ranking."""
        im = report.institutional_metrics

        assert [p.name for p in im.top_patterns] == ["Breakout", "Reversal", "Range", "Momentum"]
        assert [s.name for s in im.signal_sources] == ["XGBoost", "LSTM", "Unknown"]
        assert im.regimes.high.trades == 3
        assert im.regimes.normal.trades == 7

    def test_high_volatility_stress(self, report):
        """Test two of three spike trades won."""
        verdict = report.institutional_metrics.stress_tests.high_volatility_win_rate

        assert verdict.value == "66.67"
        assert verdict.passed

    def test_temporal(self, report):
        """Test month buckets cover every trade."""
        by_month = report.temporal.by_month

        assert [(b.label, b.trades) for b in by_month] == [("Mar 2024", 8), ("Apr 2024", 2)]


class TestReportInvariants:
    """Test structural invariants of a computed report."""

    def test_equity_curve_aligned_with_trades(self, report):
        """Test one chart point per trade ending at the final balance."""
        assert len(report.chart_data) == len(report.trades)
        assert report.chart_data[-1].balance == report.metrics.final_balance

    def test_peak_never_below_balance(self, report):
        """Test running peak and non-negative drawdown."""
        peaks = [p.peak_balance for p in report.chart_data]

        assert peaks == sorted(peaks)
        for point in report.chart_data:
            assert point.peak_balance >= point.balance
            assert point.drawdown_pct >= 0.0

    def test_source_series_ends_at_group_totals(self, report):
        """Test the cumulative series closes on each signal source's total PnL."""
        im = report.institutional_metrics
        last = im.source_cumulative_pnl[-1]

        assert len(im.source_cumulative_pnl) == len(report.trades)
        for group in im.signal_sources:
            assert last.cumulative_pnl[group.name] == pytest.approx(group.total_pnl)
            assert last.trade_counts[group.name] == group.trades

    def test_scores_bounded(self, report):
        """Test every score stays within 0-100."""
        scores = report.institutional_metrics.scores

        for value in (scores.performance_score, scores.risk_score, scores.ai_effectiveness_score, scores.overall_score):
            assert 0.0 <= value <= 100.0
        assert sum(s.weight for s in scores.source_scores) == pytest.approx(1.0)

    def test_certification_counts(self, report):
        """Test passed_count matches the checks."""
        certification = report.institutional_metrics.certification

        assert certification.total_count == len(certification.checks) == 7
        assert certification.passed_count == sum(1 for c in certification.checks if c.passed)


class TestStoreRoundTrip:
    """Test persisting and reloading reports."""

    def test_fetch_equals_inserted(self, store, report):
        """Test the stored report is returned unchanged."""
        report_id = store.insert(report)

        assert store.fetch(report_id) == report

    def test_stored_document_matches_contract(self, store, report):
        """Test the file on disk validates against report.v1."""
        report_id = store.insert(report)
        document = json.loads((store.root / f"{report_id}.json").read_text(encoding="utf-8"))

        validate(instance=document, schema=json.loads(SCHEMA_PATH.read_text(encoding="utf-8")))

    def test_submit_through_service(self, store, sample_csv_path):
        """Test ReportingService.submit() against the file store."""
        service = ReportingService(store=store)

        report_id = service.submit(sample_csv_path.read_text(), file_name="sample_trades.csv")

        assert store.list_ids() == [report_id]
        assert store.fetch(report_id).file_name == "sample_trades.csv"


class TestCliFlow:
    """Test `tradescope report` followed by `tradescope show`."""

    def test_report_then_show(self, tmp_path, sample_csv_path, fixtures_dir):
        """Test a stored report can be displayed again by id."""
        runner = CliRunner()
        store_dir = tmp_path / "reports"
        config = str(fixtures_dir / "config" / "system.yaml")

        result = runner.invoke(main, ["report", str(sample_csv_path), "--store-dir", str(store_dir), "-c", config])
        assert result.exit_code == 0, result.output

        (report_file,) = store_dir.glob("*.json")
        report_id = report_file.stem

        shown = runner.invoke(main, ["show", report_id, "--store-dir", str(store_dir), "--json", "-c", config])
        assert shown.exit_code == 0, shown.output
        assert json.loads(shown.stdout)["metrics"]["final_balance"] == 11400.0
