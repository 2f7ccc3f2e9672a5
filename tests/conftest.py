"""Root conftest for all tests - setup sys.path and shared trade fixtures."""

import sys
from pathlib import Path

import pytest

# Add src/ to sys.path so tests run without an editable install
project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to tests/fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def sample_csv_path() -> Path:
    """Ten-trade export with mixed patterns, sources and Bayesian columns."""
    return FIXTURES_DIR / "trades" / "sample_trades.csv"


@pytest.fixture
def scenario_csv() -> str:
    """
    Three-trade scenario: 10000 -> 10500 -> 10200 -> 10800.

    WIN, LOSS, WIN with no signal_source column at all.
    """
    return (
        "trade_id,entry_time,exit_time,result,pnl,balance_before,balance_after,confidence,pattern\n"
        "1,2024-01-08 09:00:00,2024-01-08 11:00:00,WIN,500,10000,10500,0.72,Breakout\n"
        "2,2024-01-09 14:00:00,2024-01-09 16:00:00,LOSS,-300,10500,10200,0.65,Reversal\n"
        "3,2024-01-10 09:00:00,2024-01-10 11:00:00,WIN,600,10200,10800,0.80,Breakout\n"
    )
