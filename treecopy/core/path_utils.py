# treecopy/core/path_utils.py

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def normalize(path: Union[str, Path]) -> Path:
    """
    Turn a user supplied path into an absolute one with '.' and '..' collapsed.

    The collapse is lexical; symlinks are left in place so the classifier can
    still see them.

    Args:
        path: Path as given by the caller

    Returns:
        Path: Absolute, normalized path
    """
    if path is None:
        raise TypeError("path must not be None")
    expanded = os.path.expanduser(os.fspath(path))
    return Path(os.path.normpath(os.path.abspath(expanded)))


def _resolved(path: Path) -> Path:
    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path


def is_subpath(child: Path, parent: Path) -> bool:
    """True when ``child`` is ``parent`` itself or lies somewhere below it."""
    child_resolved = _resolved(child)
    parent_resolved = _resolved(parent)
    try:
        child_resolved.relative_to(parent_resolved)
        return True
    except ValueError:
        pass
    # Compare case-folded on case-insensitive platforms
    if os.path.normcase(str(child_resolved)).startswith(
        os.path.normcase(str(parent_resolved)).rstrip(os.sep) + os.sep
    ):
        return True
    return os.path.normcase(str(child_resolved)) == os.path.normcase(str(parent_resolved))


def is_same_path(first: Path, second: Path) -> bool:
    """
    True when both paths name the same filesystem entry.

    Catches links pointing at the other path and case-only differences on
    case-insensitive file systems.
    """
    if os.path.exists(first) and os.path.exists(second):
        try:
            return os.path.samefile(first, second)
        except OSError as e:
            logger.debug(f"samefile failed for {first} and {second}: {e}")
    return os.path.normcase(str(_resolved(first))) == os.path.normcase(str(_resolved(second)))
