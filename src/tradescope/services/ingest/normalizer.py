"""Trade export normalizer.

Turns raw CSV text into typed TradeRecord objects, preserving row order.

Column handling:
  - NUMERIC_FIELDS      parsed with parse_float (0.0 on failure or overflow, never raises)
  - OPTIONAL_FIELDS     parsed to float, or None when empty, unparsable or overflowing
  - TEXT_FIELDS         copied as-is; pattern and signal_source default to "Unknown"
  - anything else       kept verbatim in TradeRecord.extra

Confidence rule (applied here and nowhere else): a confidence or
bayesian_confidence value in [0, 1] is a fraction and is multiplied by 100;
any other value is already on the 0-100 scale.

Rows without a non-empty trade_id are dropped. Fewer than two lines of
input (header + one row) is fatal for the whole request.

Example:
    >>> trades = normalize_csv(open("trades.csv").read())
    >>> trades[0].confidence
    72.0
"""

import csv
import math
import re
from typing import Sequence

from tradescope.libraries.performance.models import TradeRecord
from tradescope.libraries.performance.timeutils import parse_duration_minutes
from tradescope.system import LoggerFactory

logger = LoggerFactory.get_logger()

TRADE_ID_FIELD = "trade_id"

NUMERIC_FIELDS = (
    "entry_price",
    "exit_price",
    "stop_loss",
    "take_profit",
    "pnl",
    "pips",
    "position_size",
    "risk_percentage",
    "balance_before",
    "balance_after",
    "leverage_ratio",
    "confidence",
)
OPTIONAL_FIELDS = ("bayesian_confidence", "combined_bayesian_adjustment")
TEXT_FIELDS = ("entry_time", "exit_time", "duration", "direction", "result", "symbol", "strategy")
TAG_FIELDS = ("pattern", "signal_source")
CONFIDENCE_FIELDS = ("confidence", "bayesian_confidence")

KNOWN_FIELDS = frozenset((TRADE_ID_FIELD, *NUMERIC_FIELDS, *OPTIONAL_FIELDS, *TEXT_FIELDS, *TAG_FIELDS))

# Leading numeric prefix, as lenient as a spreadsheet export needs ("12.5%" -> 12.5)
_NUMBER_PREFIX = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


class InvalidInputError(ValueError):
    """Raised when the CSV body is missing or has no data rows."""


def parse_float(value: str | None) -> float:
    """
    Parse the leading number of a cell.

    Returns:
        Parsed float, 0.0 when the cell has no numeric prefix

    Example:
        >>> parse_float("12.5%")
        12.5
        >>> parse_float("n/a")
        0.0
    """
    parsed = parse_optional_float(value)
    return 0.0 if parsed is None else parsed


def parse_optional_float(value: str | None) -> float | None:
    """Like parse_float, but None when the cell has no numeric prefix.

    Values that overflow a float ("1e400") are treated as unparsable.
    """
    if not value:
        return None
    match = _NUMBER_PREFIX.match(value)
    if match is None:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def normalize_confidence(value: float) -> float:
    """Fractions in [0, 1] become percentages; other values pass through."""
    if 0.0 <= value <= 1.0:
        return value * 100
    return value


def _clean_cell(cell: str) -> str:
    return cell.strip().replace('"', "")


def split_csv(text: str | None) -> tuple[list[str], list[list[str]]]:
    """
    Split CSV text into a header row and data rows.

    Raises:
        InvalidInputError: If the text is empty or has fewer than 2 lines
    """
    if text is None or not text.strip():
        raise InvalidInputError("CSV content is missing")

    lines = text.strip().splitlines()
    if len(lines) < 2:
        raise InvalidInputError("CSV file is empty or invalid.")

    reader = csv.reader(lines)
    headers = [_clean_cell(h) for h in next(reader)]
    rows = [[_clean_cell(cell) for cell in row] for row in reader]
    return headers, rows


def normalize_row(headers: Sequence[str], row: Sequence[str]) -> TradeRecord | None:
    """
    Build a TradeRecord from one row.

    Returns:
        TradeRecord, or None when the row has no trade_id
    """
    values = {header: (row[i] if i < len(row) else "") for i, header in enumerate(headers)}

    trade_id = values.get(TRADE_ID_FIELD, "")
    if not trade_id:
        return None

    fields: dict = {"trade_id": trade_id}
    for name in NUMERIC_FIELDS:
        fields[name] = parse_float(values.get(name))
    for name in OPTIONAL_FIELDS:
        fields[name] = parse_optional_float(values.get(name))
    for name in TEXT_FIELDS:
        fields[name] = values.get(name, "")
    for name in TAG_FIELDS:
        fields[name] = values.get(name) or "Unknown"

    for name in CONFIDENCE_FIELDS:
        if fields[name] is not None:
            fields[name] = normalize_confidence(fields[name])

    fields["duration_minutes"] = parse_duration_minutes(fields["duration"])
    fields["extra"] = {k: v for k, v in values.items() if k not in KNOWN_FIELDS and k}

    return TradeRecord(**fields)


def normalize_rows(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[TradeRecord]:
    """Normalize every row, dropping rows without a trade_id."""
    trades: list[TradeRecord] = []
    dropped = 0
    for line_number, row in enumerate(rows, start=2):
        trade = normalize_row(headers, row)
        if trade is None:
            dropped += 1
            logger.debug("normalizer.row_dropped", line=line_number, reason="missing trade_id")
            continue
        trades.append(trade)

    if dropped:
        logger.info("normalizer.rows_dropped", dropped=dropped, kept=len(trades))
    if TRADE_ID_FIELD not in headers:
        logger.warning("normalizer.missing_trade_id_column", headers=list(headers))

    return trades


def normalize_csv(text: str | None) -> list[TradeRecord]:
    """
    Parse and normalize a CSV trade export.

    Raises:
        InvalidInputError: If the text is empty or has fewer than 2 lines
    """
    headers, rows = split_csv(text)
    trades = normalize_rows(headers, rows)
    logger.debug("normalizer.completed", columns=len(headers), rows=len(rows), trades=len(trades))
    return trades
