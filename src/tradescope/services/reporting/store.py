"""Report store: insert a finished report, get an opaque id back, fetch it later.

Backends:
    MemoryReportStore   process-local dict (tests, one-shot CLI runs)
    FileReportStore     one JSON document per report under a root directory

Reports are stored exactly as AnalyticsReport.model_dump_json() produces
them, so fetch() returns a report equal to the one inserted.
"""

import uuid
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from tradescope.libraries.performance.models import AnalyticsReport
from tradescope.system import LoggerFactory
from tradescope.system.config import StoreConfig

logger = LoggerFactory.get_logger()


class ReportStoreError(RuntimeError):
    """Raised when a report cannot be persisted or read back."""


class ReportNotFoundError(ReportStoreError, KeyError):
    """Raised when no report exists for the requested id."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class ReportStore(Protocol):
    """Persistence contract for finished reports.

    The store interprets nothing inside the report; the id it returns is
    the only thing flowing back to the caller.
    """

    def insert(self, report: AnalyticsReport) -> str:
        """Persist a report and return its id.

        Raises:
            ReportStoreError: If the report cannot be persisted
        """
        ...

    def fetch(self, report_id: str) -> AnalyticsReport:
        """Load a previously inserted report.

        Raises:
            ReportNotFoundError: If the id is unknown
            ReportStoreError: If the stored document cannot be read
        """
        ...


def _new_report_id() -> str:
    return uuid.uuid4().hex


class MemoryReportStore:
    """In-process report store.

    Keeps the serialized JSON rather than the object, so a fetch goes
    through the same round trip as the file backend.
    """

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}

    def insert(self, report: AnalyticsReport) -> str:
        report_id = _new_report_id()
        self._documents[report_id] = report.model_dump_json()
        logger.debug("store.report_inserted", backend="memory", report_id=report_id)
        return report_id

    def fetch(self, report_id: str) -> AnalyticsReport:
        document = self._documents.get(report_id)
        if document is None:
            raise ReportNotFoundError(f"Report not found: {report_id}")
        try:
            return AnalyticsReport.model_validate_json(document)
        except ValidationError as e:
            logger.error("store.document_invalid", backend="memory", report_id=report_id, errors=e.error_count())
            raise ReportStoreError(f"Stored report {report_id} is not a valid report document") from e

    def __len__(self) -> int:
        return len(self._documents)


class FileReportStore:
    """JSON-file report store.

    Layout:
        <root>/<report_id>.json

    Writes go to a sibling temp file that is then renamed over the target,
    so a failed write never leaves a partial document behind.

    Example:
        >>> store = FileReportStore("output/reports")
        >>> report_id = store.insert(report)
        >>> store.fetch(report_id) == report
        True
    """

    SUFFIX = ".json"

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def _path_for(self, report_id: str) -> Path:
        # Ids are generated hex strings; reject anything that could escape root
        if not report_id or not report_id.isalnum():
            raise ReportNotFoundError(f"Report not found: {report_id}")
        return self.root / f"{report_id}{self.SUFFIX}"

    def insert(self, report: AnalyticsReport) -> str:
        report_id = _new_report_id()
        target = self._path_for(report_id)
        temp = target.with_suffix(".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            temp.write_text(report.model_dump_json(), encoding="utf-8")
            temp.replace(target)
        except OSError as e:
            if temp.exists():
                temp.unlink()
            logger.error("store.insert_failed", backend="file", root=str(self.root), error=str(e))
            raise ReportStoreError(f"Failed to write report to {target}: {e}") from e

        logger.info("store.report_inserted", backend="file", report_id=report_id, path=str(target))
        return report_id

    def fetch(self, report_id: str) -> AnalyticsReport:
        path = self._path_for(report_id)
        if not path.exists():
            raise ReportNotFoundError(f"Report not found: {report_id}")
        try:
            document = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReportStoreError(f"Failed to read report {path}: {e}") from e
        try:
            return AnalyticsReport.model_validate_json(document)
        except ValidationError as e:
            logger.error("store.document_invalid", report_id=report_id, path=str(path), errors=e.error_count())
            raise ReportStoreError(f"Stored report {report_id} is not a valid report document") from e

    def list_ids(self) -> list[str]:
        """Ids of all stored reports, sorted."""
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob(f"*{self.SUFFIX}"))


def create_store(config: StoreConfig) -> ReportStore:
    """
    Build the store selected by the `store` section of system.yaml.

    Raises:
        ValueError: If the backend name is unknown
    """
    if config.backend == "memory":
        return MemoryReportStore()
    if config.backend == "file":
        return FileReportStore(config.root_path)
    raise ValueError(f"Unknown report store backend: {config.backend!r} (expected 'memory' or 'file')")
