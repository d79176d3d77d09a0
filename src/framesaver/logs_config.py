"""
Logs configuration module for daydream-framesaver.

Provides centralized configuration for log file location with support for:
- Default location: ~/.daydream-framesaver/logs
- Environment variable override: FRAMESAVER_LOGS_DIR

Log files are named ``framesaver-logs-YYYY-MM-DD-HH-MM-SS.log`` and rotated
by size (``.log.1``, ``.log.2``, ...).
"""

import logging
import os
import time
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

logger = logging.getLogger(__name__)

# Default logs directory
DEFAULT_LOGS_DIR = "~/.daydream-framesaver/logs"

# Environment variable for overriding logs directory
LOGS_DIR_ENV_VAR = "FRAMESAVER_LOGS_DIR"

LOG_FILE_PREFIX = "framesaver-logs-"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logs_dir() -> Path:
    """
    Get the logs directory path.

    Priority order:
    1. FRAMESAVER_LOGS_DIR environment variable
    2. Default: ~/.daydream-framesaver/logs

    Returns:
        Path: Absolute path to the logs directory
    """
    env_dir = os.environ.get(LOGS_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return Path(DEFAULT_LOGS_DIR).expanduser().resolve()


def ensure_logs_dir() -> Path:
    """
    Get the logs directory path and ensure it exists.

    Returns:
        Path: Absolute path to the logs directory
    """
    logs_dir = get_logs_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_current_log_file() -> Path:
    """Get a new log file path stamped with the current time."""
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    return get_logs_dir() / f"{LOG_FILE_PREFIX}{timestamp}.log"


def get_most_recent_log_file() -> Path | None:
    """
    Get the most recent log file.

    Rotated files (.log.1, .log.2, ...) are ignored. The timestamp in the
    file name sorts lexically, so the greatest name is the newest file.

    Returns:
        Path to the most recent log file, or None if there are none
    """
    logs_dir = get_logs_dir()
    if not logs_dir.exists():
        return None

    log_files = sorted(logs_dir.glob("*.log"), key=lambda p: p.name)
    return log_files[-1] if log_files else None


def cleanup_old_logs(max_age_days: int = 1) -> None:
    """
    Delete log files (including rotated ones) older than max_age_days.

    Args:
        max_age_days: Files last modified before this many days ago are deleted
    """
    logs_dir = get_logs_dir()
    if not logs_dir.exists():
        return

    cutoff = time.time() - max_age_days * 24 * 60 * 60
    deleted = 0
    for log_file in logs_dir.glob("*.log*"):
        if not log_file.is_file():
            continue
        try:
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                deleted += 1
        except OSError as e:
            logger.warning(f"Failed to delete old log file {log_file}: {e}")

    if deleted:
        logger.info(
            f"Cleaned up {deleted} old log file(s) older than {max_age_days} day(s)"
        )


def configure_logging(verbose: bool = False, log_to_file: bool = True) -> None:
    """Configure console and rotating file logging for the CLI.

    The root logger stays at WARNING to keep libraries quiet; framesaver
    loggers log at INFO (DEBUG when verbose).
    """
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    root_logger = logging.getLogger()

    if log_to_file:
        ensure_logs_dir()
        cleanup_old_logs(max_age_days=1)
        file_handler = RotatingFileHandler(
            get_current_log_file(),
            maxBytes=5 * 1024 * 1024,  # 5 MB per file
            backupCount=5,  # Keep 5 backup files
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    logging.getLogger("framesaver").setLevel(
        logging.DEBUG if verbose else logging.INFO
    )
