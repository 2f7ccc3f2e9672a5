"""
System layer: logging and YAML configuration shared by services and the CLI.

Exports:
    - SystemConfig: analytics / store / logging sections from config/system.yaml
    - get_system_config: Cached SystemConfig
    - reload_system_config: Re-read SystemConfig from disk
    - LoggerFactory: structlog setup and logger access
    - LoggingConfig: LoggerFactory settings
"""

from tradescope.system.config import SystemConfig, get_system_config, reload_system_config
from tradescope.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
