"""Reporting service: report generation, persistence and console display."""

from tradescope.services.reporting.formatters import display_report
from tradescope.services.reporting.service import ReportingService
from tradescope.services.reporting.store import (
    FileReportStore,
    MemoryReportStore,
    ReportNotFoundError,
    ReportStore,
    ReportStoreError,
    create_store,
)

__all__ = [
    "ReportingService",
    "ReportStore",
    "MemoryReportStore",
    "FileReportStore",
    "ReportStoreError",
    "ReportNotFoundError",
    "create_store",
    "display_report",
]
