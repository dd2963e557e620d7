# treecopy/core/utils.py

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def format_size(size_bytes: int) -> str:
    """
    Format byte size into human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        str: Formatted size string (e.g., "1.23 MB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024 or unit == 'TB':
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024


def remove_tree(path: Path) -> None:
    """
    Remove a file, symlink or directory tree at ``path``.

    Links are removed as links; their targets are never touched.
    """
    if os.path.islink(path) or not os.path.isdir(path):
        os.unlink(path)
    else:
        shutil.rmtree(path)
    logger.debug(f"Removed {path}")
