"""
Logging Management Module.

Console-first logging that can be upgraded in place to console plus a
rotating session log file once the output directory is known. Repeated
setup calls replace the handlers instead of stacking them.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Final, Optional

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..paths import LOGGER_NAME

_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(message)s"
_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


# LOGGER CLASS
class Logger:
    """
    Configures the shared ``geomaker`` logger.

    The first instantiation for a given name installs a stdout handler.
    Passing ``log_dir`` (typically via ``Logger.setup`` from the CLI runner)
    reconfigures the logger and adds a size-bounded rotating file handler.

    Class Attributes:
        _configured_names: Logger names that already carry handlers
        _active_log_file: Log file of the most recent file-backed setup

    Example:
        >>> log = Logger.setup(LOGGER_NAME, log_dir=Path("./logs"), level="DEBUG")
        >>> log.info("Session ready")
        >>> Logger.get_log_file()
        PosixPath('.../logs/geomaker_20260101_120000.log')
    """

    _configured_names: Final[Dict[str, bool]] = {}
    _active_log_file: Optional[Path] = None

    def __init__(
        self,
        name: str = LOGGER_NAME,
        log_dir: Optional[Path] = None,
        log_to_file: bool = True,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 5,
    ):
        self.name = name
        self.log_dir = log_dir
        self.log_to_file = log_to_file and (log_dir is not None)
        self.level = level
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self.logger = logging.getLogger(name)

        if name not in Logger._configured_names or log_dir is not None:
            self._install_handlers()
            Logger._configured_names[name] = True

    def _install_handlers(self) -> None:
        formatter = logging.Formatter(_FORMAT, _DATE_FORMAT)

        self.logger.setLevel(self.level)
        self.logger.propagate = False

        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        console_h = logging.StreamHandler(sys.stdout)
        console_h.setFormatter(formatter)
        self.logger.addHandler(console_h)

        if self.log_to_file and self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            filename = self.log_dir / f"{self.name}_{stamp}.log"

            file_h = RotatingFileHandler(
                filename,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
            file_h.setFormatter(formatter)
            self.logger.addHandler(file_h)

            Logger._active_log_file = filename

    def get_logger(self) -> logging.Logger:
        """Returns the underlying ``logging.Logger``."""
        return self.logger

    @classmethod
    def get_log_file(cls) -> Optional[Path]:
        """Returns the active log file path, or None in console-only mode."""
        return cls._active_log_file

    @classmethod
    def setup(
        cls, name: str, log_dir: Optional[Path] = None, level: str = "INFO", **kwargs
    ) -> logging.Logger:
        """
        Configure the named logger from a semantic level string.

        Args:
            name: Logger identifier (typically LOGGER_NAME)
            log_dir: Directory for the rotating log file (None = console only)
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL
            **kwargs: Forwarded to the Logger constructor

        Returns:
            Configured logging.Logger instance

        Environment Variables:
            DEBUG: "1" forces the DEBUG level regardless of ``level``
        """
        if os.getenv("DEBUG") == "1":
            numeric_level = logging.DEBUG
        else:
            numeric_level = getattr(logging, level.upper(), logging.INFO)

        return cls(name=name, log_dir=log_dir, level=numeric_level, **kwargs).get_logger()


# Bootstrap instance (console only) until setup() is called.
logger: Final[logging.Logger] = Logger().get_logger()
