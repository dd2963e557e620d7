# treecopy/core/logger_setup.py

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config_manager import ConfigManager


def get_default_log_dir() -> Path:
    return ConfigManager.get_appdata_dir() / "logs"


def _prepare_log_dir(log_dir: Path) -> Optional[Path]:
    """Create ``log_dir``, falling back to the home directory; None disables file logging."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir
    except PermissionError as perm_err:
        print(f"Permission denied creating log directory {log_dir}: {perm_err}", file=sys.stderr)
    except OSError as os_err:
        print(f"OS error creating log directory {log_dir}: {os_err}", file=sys.stderr)
        return None

    fallback = Path.home() / 'treecopy_logs'
    try:
        fallback.mkdir(parents=True, exist_ok=True)
        print(f"Using fallback log directory in home folder: {fallback}", file=sys.stderr)
        return fallback
    except OSError as home_err:
        print(f"Failed to create fallback log directory: {home_err}", file=sys.stderr)
        return None


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: int = logging.INFO,
    log_format: str = '%(message)s',  # Simplified format for Rich
    console_level: Optional[int] = None,
    log_file_rotation: int = 5,       # Number of backup log files
    log_file_max_size: int = 10       # Size in MB
) -> logging.Logger:
    """Setup root logging with a rotating log file and a Rich console handler."""
    logger = logging.getLogger()
    logger.setLevel(log_level)
    logger.handlers.clear()

    if log_dir is None:
        log_dir = get_default_log_dir()
    log_dir = _prepare_log_dir(Path(log_dir))

    log_file = None
    if log_dir is not None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = log_dir / f'treecopy_{timestamp}.log'
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=log_file_max_size * 1024 * 1024,
                backupCount=log_file_rotation,
                encoding='utf-8'
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            logger.addHandler(file_handler)
        except OSError as os_err:
            print(f"Could not create log file {log_file}: {os_err}", file=sys.stderr)
            log_file = None

    console_handler_level = console_level if console_level is not None else log_level
    try:
        rich_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            enable_link_path=False,
            markup=False,
            rich_tracebacks=True,
            level=console_handler_level
        )
        rich_handler.setFormatter(logging.Formatter(log_format))
        logger.addHandler(rich_handler)
    except Exception as rich_err:
        print(f"Error setting up Rich handler: {rich_err}", file=sys.stderr)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_handler_level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(console_handler)

    if log_file is not None:
        logger.info(f"Log file created at: {log_file}")
    logger.debug(f"Logging level: {logging.getLevelName(log_level)}")
    logger.debug(f"Log rotation: {log_file_rotation} files, {log_file_max_size}MB max size")
    logger.debug(f"Python version: {sys.version}")
    logger.debug(f"Platform: {sys.platform}")
    return logger
