"""Tests for the reporting service."""

import pytest

from tradescope.services.ingest import InvalidInputError
from tradescope.services.reporting import MemoryReportStore, ReportingService
from tradescope.services.reporting.service import build_header
from tradescope.system.config import AnalyticsConfig


@pytest.fixture
def service():
    """Service backed by an in-memory store."""
    return ReportingService(store=MemoryReportStore())


class TestGenerateReport:
    """Test report generation."""

    def test_scenario_summary(self, service, scenario_csv):
        """Test headline values for 10000 -> 10500 -> 10200 -> 10800."""
        report = service.generate_report(scenario_csv)

        assert report.file_name == "uploaded_data.csv"
        assert report.metrics.starting_balance == 10000.0
        assert report.metrics.final_balance == 10800.0
        assert report.metrics.total_return == "8.00"
        assert report.metrics.max_drawdown == "2.86"
        assert report.metrics.total_trades == 3

    def test_scenario_performance(self, service, scenario_csv):
        """Test core performance metrics for the scenario."""
        performance = service.generate_report(scenario_csv).institutional_metrics.performance

        assert performance.win_rate == "66.67"
        assert performance.loss_rate == "33.33"
        assert performance.profit_factor == "3.67"
        assert performance.avg_win == "550.00"
        assert performance.avg_loss == "-300.00"
        assert performance.total_pnl == "800.00"
        assert performance.max_win_streak == 1
        assert performance.max_loss_streak == 1

    def test_chart_data(self, service, scenario_csv):
        """Test one rounded equity point per trade."""
        chart = service.generate_report(scenario_csv).chart_data

        assert [p.balance for p in chart] == [10500.0, 10200.0, 10800.0]
        assert [p.trade_index for p in chart] == [1, 2, 3]
        assert chart[1].drawdown_pct == 2.86

    def test_file_name_override(self, service, scenario_csv):
        """Test an explicit display name is kept."""
        assert service.generate_report(scenario_csv, file_name="eurusd.csv").file_name == "eurusd.csv"

    def test_configured_default_file_name(self, scenario_csv):
        """Test the default name comes from configuration."""
        service = ReportingService(config=AnalyticsConfig(default_file_name="export.csv"))
        assert service.generate_report(scenario_csv).file_name == "export.csv"

    def test_trades_preserved_in_order(self, service, sample_csv_path):
        """Test the report carries the normalized trades unchanged."""
        report = service.generate_report(sample_csv_path.read_text())

        assert [t.trade_id for t in report.trades] == [f"T{i:03d}" for i in range(1, 11)]
        assert report.metrics.final_balance == 11400.0

    def test_missing_signal_source_column(self, service, scenario_csv):
        """Test that all-Unknown sources still yield a complete score block."""
        scores = service.generate_report(scenario_csv).institutional_metrics.scores

        assert [s.source for s in scores.source_scores] == ["Unknown"]
        assert 0.0 <= scores.overall_score <= 100.0

    def test_zero_starting_balance_uses_default(self, service):
        """Test balance_before = 0 on the first trade falls back to 10000."""
        csv_text = "trade_id,result,pnl,balance_before,balance_after\nT1,WIN,100,0,10100\n"

        report = service.generate_report(csv_text)

        assert report.metrics.starting_balance == 10000.0
        assert report.institutional_metrics.performance.sharpe_ratio == "0.00"

    def test_no_valid_rows(self, service):
        """Test a file whose rows all lack trade_id produces an empty report."""
        report = service.generate_report("trade_id,pnl\n,5\n,6\n")

        assert report.metrics.total_trades == 0
        assert report.metrics.final_balance == 10000.0
        assert report.metrics.total_return == "0.00"
        assert report.chart_data == []

    @pytest.mark.parametrize("text", [None, "", "trade_id,pnl"])
    def test_invalid_input(self, service, text):
        """Test missing or header-only CSV is rejected."""
        with pytest.raises(InvalidInputError):
            service.generate_report(text)

    def test_top_patterns_limit(self, scenario_csv):
        """Test the configured cap on top patterns."""
        service = ReportingService(config=AnalyticsConfig(top_patterns_limit=1))

        patterns = service.generate_report(scenario_csv).institutional_metrics.top_patterns

        assert [p.name for p in patterns] == ["Breakout"]


class TestBuildHeader:
    """Test header metadata."""

    def test_defaults_to_unknown(self, make_trade):
        """Test missing symbol and strategy."""
        header = build_header([make_trade(1), make_trade(2)])

        assert header.asset == "Unknown"
        assert header.strategy == "Unknown"
        assert header.total_trades == 2

    def test_first_non_empty_label(self, make_trade):
        """Test the first non-empty symbol and strategy win."""
        header = build_header([make_trade(1), make_trade(2, symbol="GBPUSD", strategy="Momentum")])

        assert header.asset == "GBPUSD"
        assert header.strategy == "Momentum"

    def test_date_range(self, make_trade):
        """Test earliest entry to latest exit."""
        trades = [
            make_trade(5, exit_time="2024-01-07 10:00:00"),
            make_trade(2),
            make_trade(3, exit_time=""),
        ]

        header = build_header(trades)

        assert header.start_date == "2024-01-02"
        assert header.end_date == "2024-01-07"

    def test_unparsable_dates(self, make_trade):
        """Test None when nothing parses."""
        header = build_header([make_trade(1, entry_time="?", exit_time="?")])

        assert header.start_date is None
        assert header.end_date is None


class TestSubmit:
    """Test submitting reports to a store."""

    def test_round_trip(self, service, scenario_csv):
        """Test the stored report equals the generated one."""
        report_id = service.submit(scenario_csv, file_name="scenario.csv")

        stored = service.store.fetch(report_id)

        assert stored == service.generate_report(scenario_csv, file_name="scenario.csv")
        assert len(service.store) == 1

    def test_invalid_input_not_stored(self, service):
        """Test nothing is stored when the CSV is rejected."""
        with pytest.raises(InvalidInputError):
            service.submit("")

        assert len(service.store) == 0

    def test_without_store(self, scenario_csv):
        """Test submit requires a store."""
        with pytest.raises(RuntimeError, match="no store"):
            ReportingService().submit(scenario_csv)

    def test_overflowing_cells_round_trip(self, service):
        """Test a report built from out-of-range numbers can be read back."""
        csv_text = (
            "trade_id,entry_time,result,pnl,pips,balance_before,balance_after\n"
            "T1,2024-03-04 09:30:00,WIN,1e400,1e400,10000,10100\n"
            "T2,2024-03-05 09:30:00,LOSS,-50,-20,10100,10050\n"
        )

        report_id = service.submit(csv_text)
        stored = service.store.fetch(report_id)

        assert stored.trades[0].pnl == 0.0
        assert stored.trades[0].pips == 0.0
        assert stored == service.generate_report(csv_text)
