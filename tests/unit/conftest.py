"""Shared trade factories for unit tests."""

import pytest

from tradescope.libraries.performance.models import TradeRecord


def build_trade(index: int = 1, **overrides) -> TradeRecord:
    """TradeRecord with sane defaults; any field can be overridden."""
    fields = {
        "trade_id": f"T{index:03d}",
        "entry_time": f"2024-01-{index:02d} 09:00:00",
        "exit_time": f"2024-01-{index:02d} 11:00:00",
        "result": "WIN",
        "pnl": 100.0,
        "balance_before": 10000.0,
        "balance_after": 10100.0,
        "confidence": 70.0,
    }
    fields.update(overrides)
    return TradeRecord(**fields)


def build_sequence(results: list[tuple[str, float]], starting_balance: float = 10000.0) -> list[TradeRecord]:
    """Chained trades from (result, pnl) pairs; balances follow the PnL."""
    trades = []
    balance = starting_balance
    for i, (result, pnl) in enumerate(results, start=1):
        trades.append(build_trade(i, result=result, pnl=pnl, balance_before=balance, balance_after=balance + pnl))
        balance += pnl
    return trades


@pytest.fixture
def make_trade():
    """Factory fixture: make_trade(index, **overrides) -> TradeRecord."""
    return build_trade


@pytest.fixture
def make_sequence():
    """Factory fixture: make_sequence([(result, pnl), ...]) -> chained trades."""
    return build_sequence


@pytest.fixture
def scenario_trades():
    """10000 -> 10500 -> 10200 -> 10800 (WIN, LOSS, WIN)."""
    return build_sequence([("WIN", 500.0), ("LOSS", -300.0), ("WIN", 600.0)])
