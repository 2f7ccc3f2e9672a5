"""Display formatting for metric values."""

import math

INFINITY_SYMBOL = "∞"


def format_metric(value: float, precision: int = 2) -> str:
    """
    Format a metric for display.

    Non-finite values (the infinity sentinel used for ratios whose
    denominator is exactly zero) render as "∞"; everything else as a
    fixed-precision string.

    Example:
        >>> format_metric(1.23456)
        '1.23'
        >>> format_metric(math.inf)
        '∞'
    """
    if not math.isfinite(value):
        return INFINITY_SYMBOL
    text = f"{value:.{precision}f}"
    # "-0.00" reads as a loss that never happened
    if float(text) == 0.0:
        text = f"{0.0:.{precision}f}"
    return text
