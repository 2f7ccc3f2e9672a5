"""
System configuration for tradescope.

One configuration for the entire system, loaded from YAML:

    analytics:   engine defaults (starting balance, display file name, caps)
    store:       report store backend and location
    logging:     logging system settings

Load order:
    1. Built-in defaults (the dataclass defaults below)
    2. Explicit path passed to load(), or $TRADESCOPE_CONFIG, or config/system.yaml
    3. ${VAR} placeholders in string values are substituted from the environment
"""

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from tradescope.system.log_system import LoggingConfig as LoggerConfig

DEFAULT_CONFIG_PATH = Path("config/system.yaml")
CONFIG_ENV_VAR = "TRADESCOPE_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass
class AnalyticsConfig:
    """Defaults applied by the metrics engine."""

    default_starting_balance: float = 10000.0
    default_file_name: str = "uploaded_data.csv"
    top_patterns_limit: int = 5


@dataclass
class StoreConfig:
    """Report store location."""

    backend: Literal["memory", "file"] = "file"
    root_path: str = "output/reports"


@dataclass
class LoggingConfig:
    """Logging section of system.yaml (converted to log_system.LoggingConfig)."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time", "short"] = "compact"
    enable_file: bool = False
    file_path: str = "logs/tradescope.log"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the LoggerFactory configuration model."""
        return LoggerConfig(
            level=self.level,
            format=self.format,
            timestamp_format=self.timestamp_format,
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration container."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load system configuration, merging the YAML file over built-in defaults.

        Args:
            path: Explicit config path. If None, uses $TRADESCOPE_CONFIG or
                  config/system.yaml. A missing file yields defaults.

        Returns:
            SystemConfig

        Raises:
            ValueError: If the YAML cannot be parsed or is not a mapping
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
        config_path = Path(path)

        raw: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse YAML from {config_path}: {e}")
            if loaded is not None and not isinstance(loaded, dict):
                raise ValueError(f"System config {config_path} must be a mapping, got {type(loaded).__name__}")
            raw = loaded or {}

        merged = _deep_merge(asdict(cls()), _substitute_env_vars(raw))
        return cls._from_dict(merged)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        return cls(
            analytics=AnalyticsConfig(**data.get("analytics", {})),
            store=StoreConfig(**data.get("store", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} placeholders with environment values (undefined vars are kept)."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """Get the cached system config (an explicit path always reloads)."""
    global _system_config
    if path is not None:
        _system_config = SystemConfig.load(path)
    elif _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system config singleton."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
