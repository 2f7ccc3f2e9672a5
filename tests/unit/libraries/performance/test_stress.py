"""Tests for stress tests and certification."""

import math

import pytest

from tradescope.libraries.performance.stress import (
    build_certification,
    calculate_bayesian_lag_ms,
    calculate_high_volatility_win_rate,
    run_bayesian_lag,
    run_high_volatility_win_rate,
    run_pattern_decay,
)


class TestPatternDecay:
    """Test pattern decay stress test."""

    def test_pass(self):
        """Test 1.5 x 0.8 = 1.2 passes."""
        verdict = run_pattern_decay(1.5)

        assert verdict.value == "1.20"
        assert verdict.passed

    def test_fail(self):
        """Test 1.2 x 0.8 = 0.96 fails."""
        assert not run_pattern_decay(1.2).passed

    def test_infinite_profit_factor(self):
        """Test that an infinite profit factor passes and renders as "∞"."""
        verdict = run_pattern_decay(math.inf)

        assert verdict.value == "∞"
        assert verdict.passed


class TestBayesianLag:
    """Test Bayesian lag proxy."""

    def test_floor_without_data(self, make_trade):
        """Test the 37 ms floor when no trade carries an adjustment."""
        assert calculate_bayesian_lag_ms([make_trade(1)]) == 37.0
        assert run_bayesian_lag([make_trade(1)]).passed

    def test_scaled_average(self, make_trade):
        """Test average |adjustment| x 1000."""
        trades = [
            make_trade(1, combined_bayesian_adjustment=0.05),
            make_trade(2, combined_bayesian_adjustment=-0.07),
            make_trade(3),
        ]

        assert calculate_bayesian_lag_ms(trades) == pytest.approx(60.0)

    def test_fail_above_100ms(self, make_trade):
        """Test a large adjustment fails the 100 ms threshold."""
        verdict = run_bayesian_lag([make_trade(1, combined_bayesian_adjustment=0.25)])

        assert verdict.value == "250.00"
        assert not verdict.passed


class TestHighVolatilityWinRate:
    """Test the VIX-spike proxy."""

    def test_only_spike_trades_counted(self, make_trade):
        """Test that only |pips| > 500 trades are counted."""
        trades = [
            make_trade(1, pips=600.0, result="WIN"),
            make_trade(2, pips=-700.0, result="LOSS"),
            make_trade(3, pips=500.0, result="LOSS"),
        ]

        assert calculate_high_volatility_win_rate(trades) == (50.0, 2)
        assert not run_high_volatility_win_rate(trades).passed

    def test_no_qualifying_trades(self, make_trade):
        """Test 0% (fail) when no trade is above the threshold."""
        win_rate, count = calculate_high_volatility_win_rate([make_trade(1, pips=10.0)])

        assert (win_rate, count) == (0.0, 0)
        assert not run_high_volatility_win_rate([make_trade(1, pips=10.0)]).passed


class TestCertification:
    """Test certification checks."""

    def _certify(self, make_trade, **overrides):
        values = {
            "profit_factor": 2.0,
            "high_vol_win_rate": 60.0,
            "max_drawdown_pct": 10.0,
            "recovery_factor": 3.0,
            "bayesian_lag": run_bayesian_lag([make_trade(1)]),
        }
        values.update(overrides)
        return build_certification(**values)

    def test_all_pass(self, make_trade):
        """Test a strong strategy passes all seven checks."""
        certification = self._certify(make_trade)

        assert certification.total_count == 7
        assert certification.passed_count == 7
        assert certification.certified

    def test_checks_are_independent(self, make_trade):
        """Test that failing one criterion fails only that check."""
        certification = self._certify(make_trade, max_drawdown_pct=35.0)

        failed = [c.name for c in certification.checks if not c.passed]
        assert failed == ["Max Drawdown"]
        assert certification.passed_count == 6

    def test_placeholders_are_labeled(self, make_trade):
        """Test that crisis alpha and slippage control are non-derived."""
        certification = self._certify(make_trade)

        placeholders = {c.name for c in certification.checks if not c.derived}
        assert placeholders == {"Crisis Alpha", "Slippage Control"}

    @pytest.mark.parametrize(
        "field,value,name",
        [
            ("profit_factor", 1.14, "Profit Factor"),
            ("high_vol_win_rate", 54.9, "High Volatility Win Rate"),
            ("recovery_factor", 0.99, "Recovery Factor"),
        ],
    )
    def test_thresholds(self, make_trade, field, value, name):
        """Test each derived threshold boundary."""
        certification = self._certify(make_trade, **{field: value})

        check = next(c for c in certification.checks if c.name == name)
        assert not check.passed
