"""Timestamp and duration parsing for trade exports.

Trade exports carry timestamps in whatever format the strategy host wrote
them. Parsing never raises: unparsable values come back as None (timestamps)
or 0 (durations) and callers skip or default them.
"""

import re
from datetime import datetime, timezone

# Tried in order after datetime.fromisoformat()
_FALLBACK_FORMATS = (
    "%Y.%m.%d %H:%M:%S",
    "%Y.%m.%d %H:%M",
    "%Y.%m.%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d-%m-%Y %H:%M:%S",
    "%Y%m%d %H:%M:%S",
)

# "2 days 03:15:00", "0 days 00:45:30.500000", "03:15:00", "1 day, 2:00:00"
_DURATION_PATTERN = re.compile(
    r"^\s*(?:(?P<days>-?\d+)\s+days?,?\s*)?(?P<hours>\d+):(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}(?:\.\d+)?))?\s*$"
)
_DAYS_ONLY_PATTERN = re.compile(r"^\s*(?P<days>-?\d+)\s+days?\s*$")


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a trade timestamp.

    Timezone-aware values are converted to naive UTC so every parsed
    timestamp is comparable with every other.

    Args:
        value: Raw timestamp text

    Returns:
        Naive datetime, or None if the value is empty or unparsable

    Example:
        >>> parse_timestamp("2024-03-04T09:30:00Z")
        datetime.datetime(2024, 3, 4, 9, 30)
        >>> parse_timestamp("not a date") is None
        True
    """
    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    parsed: datetime | None = None
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_duration_minutes(value: str | None) -> float:
    """
    Parse an "N days HH:MM:SS" duration into minutes.

    Args:
        value: Raw duration text (pandas Timedelta string form or HH:MM[:SS])

    Returns:
        Duration in minutes, 0.0 if empty or unparsable

    Example:
        >>> parse_duration_minutes("1 days 02:30:00")
        1590.0
    """
    if not value:
        return 0.0

    match = _DURATION_PATTERN.match(value)
    if match is None:
        days_only = _DAYS_ONLY_PATTERN.match(value)
        if days_only is None:
            return 0.0
        return int(days_only.group("days")) * 1440.0

    days = int(match.group("days") or 0)
    hours = int(match.group("hours"))
    minutes = int(match.group("minutes"))
    seconds = float(match.group("seconds") or 0)
    return days * 1440.0 + hours * 60.0 + minutes + seconds / 60.0
