"""tradescope services package.

Services wrap the performance library: ingest turns CSV text into trade
records, reporting runs the metrics pipeline and persists the result.
"""

from tradescope.services.ingest import InvalidInputError, normalize_csv
from tradescope.services.reporting import ReportingService

__all__: list[str] = [
    "InvalidInputError",
    "ReportingService",
    "normalize_csv",
]
