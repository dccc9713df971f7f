"""
Logging setup for the DMS client core.

Importing the package only attaches a NullHandler to the `dms_core` logger;
the host application decides where records go by calling setup_logging().
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "dms_core"

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FILE_LOGGING = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Libraries whose request-level chatter drowns out ours
NOISY_LOGGERS = ("httpx", "httpcore")


def _file_handler(log_file: Union[str, Path, None]) -> logging.Handler:
    path = Path(log_file) if log_file else LOG_DIR / "dms.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    enable_file_logging: bool = DEFAULT_FILE_LOGGING
) -> None:
    """
    Send `dms_core` records to stdout, and optionally to a log file.

    Calling it again replaces the previous handlers. The root logger is
    never touched.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Log file path (defaults to logs/dms.log)
        enable_file_logging: Also write DEBUG and above to the log file
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    reset_handlers(package_logger)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    package_logger.addHandler(console)

    if enable_file_logging:
        package_logger.addHandler(_file_handler(log_file))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def reset_handlers(package_logger: Optional[logging.Logger] = None) -> None:
    """Close and detach every handler, leaving only the NullHandler."""
    package_logger = package_logger or logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


if not logging.getLogger(PACKAGE_LOGGER).handlers:
    logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
