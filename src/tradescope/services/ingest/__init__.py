"""Ingestion of trade exports into normalized TradeRecord lists."""

from tradescope.services.ingest.normalizer import (
    InvalidInputError,
    normalize_csv,
    normalize_rows,
    parse_float,
    split_csv,
)

__all__ = [
    "InvalidInputError",
    "normalize_csv",
    "normalize_rows",
    "parse_float",
    "split_csv",
]
