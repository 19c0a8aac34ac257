"""
Telemetry and Reporting Package.

Available Components:
    - Logger: Console and rotating-file logging initialization.
    - Reporter: Formatted session lifecycle blocks.
    - LogStyle: Unified logging style constants.
"""

from .logger import Logger
from .reporter import Reporter, ReporterProtocol
from .styles import LogStyle

__all__ = [
    "Logger",
    "Reporter",
    "ReporterProtocol",
    "LogStyle",
]
