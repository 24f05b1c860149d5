"""Logging setup for host applications embedding the extractor.

The extraction library only ever logs through ``logging.getLogger(__name__)``;
the host application calls ``configure_logging()`` (driven by
``LoggingSettings``) or ``setup_logging()`` once at startup to decide where
those records go:
    1. RotatingFileHandler -- JSON format, size-based rotation
    2. StreamHandler -- Text format, for developer console

OCR runs on worker threads, so both formats carry the thread name; a page's
records can be told apart from the orchestrator's.
"""

import logging
import logging.handlers
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from doctext.config.settings import LoggingSettings

LOG_FILE_NAME = "extraction.log"

# Third-party loggers that flood DEBUG output during page rendering
_QUIET_LOGGERS = ("PIL",)


def setup_logging(
    log_dir: str = "logs",
    log_level_file: int | str = logging.DEBUG,
    log_level_console: int | str = logging.INFO,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 5,
) -> Path:
    """Configure JSON file + text console logging on the root logger.

    Creates the log directory if it does not exist. Existing root handlers are
    removed and closed, so calling this again replaces the configuration
    instead of duplicating output.

    Args:
        log_dir: Directory for log files.
        log_level_file: Level (number or name) for the JSON file handler.
        log_level_console: Level (number or name) for the console handler.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated backup files to keep.

    Returns:
        Path of the JSON log file.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level_file)
    file_handler.setFormatter(
        JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(threadName)s %(message)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "component",
                "threadName": "thread",
            },
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level_console)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s (%(threadName)s): %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)

    return log_file


def configure_logging(settings: LoggingSettings | None = None) -> Path:
    """Set up logging from ``LoggingSettings`` (config/logging.yaml + env).

    Args:
        settings: Logging settings; loaded from config when omitted.

    Returns:
        Path of the JSON log file.
    """
    settings = settings or LoggingSettings()
    log_file = setup_logging(
        log_dir=settings.log_dir,
        log_level_file=settings.log_level_file,
        log_level_console=settings.log_level_console,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logging.getLogger(__name__).debug(
        "Logging configured: file=%s, file level=%s, console level=%s",
        log_file,
        settings.log_level_file,
        settings.log_level_console,
    )
    return log_file
