"""Logging for tradescope.

structlog sits on top of the stdlib logging module so that tradescope events
and third-party records share the same handlers:

    console  stderr, human-readable line (or JSON), level from config
    file     optional JSON lines, rotated by size, its own level

stdout is left alone so `tradescope report --json` can be piped.

Event names are dotted, "<component>.<what_happened>", e.g.
"normalizer.rows_dropped" or "store.report_inserted". The console line uses
the component prefix as a label.
"""

import inspect
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LOG_FILE = Path("logs/tradescope.log")


class LoggingConfig(BaseModel):
    """Logging settings.

    What each level shows:

    INFO (default):
    - One line per generated / stored report
    - Summary of rows dropped by the normalizer

    DEBUG:
    - Every dropped row with its line number
    - Normalizer column / row counts

    WARNING:
    - CSV without a trade_id column

    ERROR:
    - Store write failures, invalid stored documents

    Timestamp formats:
    - "iso": 2024-03-04T09:30:07.288824+00:00
    - "compact": 240304-093007.28 (YYMMDD-HHMMSS.cs)
    - "time": 09:30:07.28
    - "short": 0304T093007
    """

    level: LogLevel = Field(default="INFO", description="Console log level")
    format: Literal["console", "json"] = Field(default="console", description="Console output format")
    timestamp_format: Literal["iso", "compact", "time", "short"] = Field(
        default="compact", description="Timestamp style on console lines"
    )
    enable_file: bool = Field(default=False, description="Also write JSON lines to file_path")
    file_path: Path | None = Field(default=None, description="Log file (logs/tradescope.log when unset)")
    file_level: LogLevel = Field(default="WARNING", description="File log level")
    file_rotation: bool = Field(default=True, description="Rotate the log file by size")
    max_file_size_mb: int = Field(default=10, description="Rotation size in MB")
    backup_count: int = Field(default=3, description="Rotated files to keep")


def _timestamper(fmt: str):
    """Processor adding `log_timestamp` (trade fields already own `entry_time` / `exit_time`)."""
    patterns = {"compact": "%y%m%d-%H%M%S.{cs:02d}", "time": "%H:%M:%S.{cs:02d}", "short": "%m%dT%H%M%S"}

    def add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        pattern = patterns.get(fmt)
        if pattern is None:
            event_dict["log_timestamp"] = now.isoformat()
        else:
            event_dict["log_timestamp"] = now.strftime(pattern.format(cs=now.microsecond // 10000))
        return event_dict

    return add_timestamp


class LoggerFactory:
    """
    Configures logging once and hands out structlog loggers.

    Example:
        # Application startup (the CLI does this from system.yaml)
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))

        # Module level
        logger = LoggerFactory.get_logger()
        logger.info("reporting.report_generated", trades=120, grade="B+")
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        (Re)configure handlers and structlog.

        Safe to call more than once; each call replaces the root handlers.
        """
        config = config or LoggingConfig()
        if config.enable_file and config.file_path is None:
            config.file_path = DEFAULT_LOG_FILE
        cls._config = config

        pre_chain = cls._shared_processors(config.timestamp_format)
        handlers: list[logging.Handler] = [cls._console_handler(config, pre_chain)]
        root_level = logging.getLevelName(config.level)
        if config.enable_file:
            handlers.append(cls._file_handler(config, pre_chain))
            root_level = min(root_level, logging.getLevelName(config.file_level))

        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        exception_processors: list[Any]
        if config.format == "console":
            exception_processors = [
                structlog.dev.set_exc_info,
                structlog.processors.ExceptionRenderer(structlog.dev.plain_traceback),  # type: ignore[arg-type]
            ]
        else:
            exception_processors = [structlog.processors.format_exc_info]

        structlog.configure(
            processors=[*pre_chain, *exception_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        cls._configured = True

    @staticmethod
    def _shared_processors(timestamp_format: str) -> list[Any]:
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _timestamper(timestamp_format),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.FILENAME, structlog.processors.CallsiteParameter.LINENO]
            ),
        ]

    @classmethod
    def _console_handler(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        renderer: Any = cls.console_renderer if config.format == "console" else structlog.processors.JSONRenderer()
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(config.level)
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
        return handler

    @staticmethod
    def _file_handler(config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        path = config.file_path or DEFAULT_LOG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler
        if config.file_rotation:
            handler = RotatingFileHandler(
                filename=str(path),
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(filename=str(path), encoding="utf-8")
        handler.setLevel(config.file_level)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer(), foreign_pre_chain=pre_chain)
        )
        return handler

    @staticmethod
    def console_renderer(logger: Any, name: str, event_dict: dict[str, Any]) -> str:
        """Render one console line: timestamp | component | message | context (file:line)."""
        timestamp = event_dict.pop("log_timestamp", "")
        level = str(event_dict.pop("level", "info")).upper()
        event = str(event_dict.pop("event", ""))
        filename = event_dict.pop("filename", "")
        lineno = event_dict.pop("lineno", "")
        logger_name = event_dict.pop("logger", "")

        line = format_console_line(event, event_dict, level, timestamp)
        if filename and lineno:
            location = f"{Path(filename).stem}:{lineno}"
            if logger_name and logger_name != "tradescope":
                location = f"{logger_name.rsplit('.', 1)[0]}.{location}"
            line = f"{line} {_GRAY}({location}){_RESET}"
        return line

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Logger for the calling module (or `name`), configuring defaults first if needed.

        Returns:
            structlog BoundLogger
        """
        if not cls._configured:
            cls.configure()
        if name is None:
            caller = inspect.currentframe()
            caller = caller.f_back if caller else None
            name = caller.f_globals.get("__name__", "tradescope") if caller else "tradescope"
        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Active configuration (defaults before configure())."""
        return cls._config or LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop all handlers and structlog configuration (tests)."""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()


_DIM = "\033[2m"
_GRAY = "\033[90m"
_BOLD = "\033[1m"
_CYAN = "\033[36m"
_RESET = "\033[0m"

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}

# Event prefix -> console label
COMPONENT_LABELS = {
    "normalizer": "Ingest",
    "reporting": "Report",
    "store": "Store",
    "cli": "CLI",
    "config": "Config",
}


def format_console_line(event: str, context: dict[str, Any], level: str, timestamp: str) -> str:
    """
    Format a console line from an event name and its context.
    """
    color = _LEVEL_COLORS.get(level, _RESET)
    prefix, _, rest = event.partition(".")
    label = COMPONENT_LABELS.get(prefix)

    parts = [f"{_DIM}{timestamp}{_RESET}"]
    if label is None:
        parts.append(f"{color}{event.replace('_', ' ').title()}{_RESET}")
    else:
        parts.append(f"{color}{label}{_RESET}")
        parts.append(f"{_BOLD}{rest.replace('.', ' ').replace('_', ' ').title()}{_RESET}")

    fields = [f"{key}={_CYAN}{value}{_RESET}" for key, value in sorted(context.items()) if not key.startswith("_")]
    if fields:
        parts.append(" ".join(fields))
    return " | ".join(parts)
