"""
Logging - logging configuration and daily log files.

Provides:
- Root logger configuration with console and optional file output
- Daily log file names: smwallet-YYYY-MM-DD.log
- Cleanup of old log files

Library modules only call logging.getLogger(__name__); handlers are set up
here, once, by the application embedding the wallet.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from .utils import get_logs_dir


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'
LOG_FILE_PREFIX = "smwallet-"


def configure_logging(level: int | str = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Configure Python logging for the application.

    Sets up a root logger with console output and, if log_file is given,
    a file handler appending to it.

    Args:
        level: Logging level or level name (default: INFO)
        log_file: Optional path of a log file (see get_log_file_path)
    """
    root_logger = logging.getLogger()

    # Only configure if not already configured
    if root_logger.handlers:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        # Files keep the date, the console only shows the time
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)


def get_log_file_path(date: Optional[datetime] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return get_logs_dir() / filename


def cleanup_old_logs(retention_days: int) -> int:
    """
    Delete log files older than retention_days.

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in get_logs_dir().glob(f"{LOG_FILE_PREFIX}*.log"):
        try:
            file_date = datetime.strptime(file_path.stem[len(LOG_FILE_PREFIX):], "%Y-%m-%d")
        except ValueError:
            # Not one of ours
            continue
        if file_date < cutoff_date:
            file_path.unlink()
            deleted_count += 1

    return deleted_count
