"""
Core Utilities Package.

Configuration, logging, paths, persistence, environment helpers and the
exception hierarchy shared by every session component.
"""

from .cli import parse_args
from .config import (
    AppConfig,
    AssistantConfig,
    RuntimeConfig,
    SessionConfig,
    TelemetryConfig,
)
from .environment import TimeTracker, make_rng, set_seed
from .exceptions import (
    ArchiveError,
    ArchiveReadError,
    AssistantError,
    AssistantRequestError,
    AssistantUnavailableError,
    EmptyDatasetError,
    GeomakerError,
    ImageReadError,
    InvalidConfigurationError,
    ResultsUnavailableError,
    TooManyClassesError,
)
from .io import load_config_from_yaml, save_config_as_yaml
from .logger import Logger, LogStyle, Reporter
from .paths import EXPORTS_ROOT, LOGGER_NAME, PROJECT_ROOT

__all__ = [
    "parse_args",
    "AppConfig",
    "AssistantConfig",
    "RuntimeConfig",
    "SessionConfig",
    "TelemetryConfig",
    "TimeTracker",
    "make_rng",
    "set_seed",
    "GeomakerError",
    "ArchiveError",
    "ArchiveReadError",
    "EmptyDatasetError",
    "TooManyClassesError",
    "ImageReadError",
    "InvalidConfigurationError",
    "ResultsUnavailableError",
    "AssistantError",
    "AssistantRequestError",
    "AssistantUnavailableError",
    "load_config_from_yaml",
    "save_config_as_yaml",
    "Logger",
    "LogStyle",
    "Reporter",
    "EXPORTS_ROOT",
    "LOGGER_NAME",
    "PROJECT_ROOT",
]
