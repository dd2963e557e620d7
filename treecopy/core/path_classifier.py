# treecopy/core/path_classifier.py

import os
import stat
from pathlib import Path
from typing import Union

from .exceptions import NotAFileError
from .interfaces.types import PathKind


def classify(path: Union[str, Path]) -> PathKind:
    """
    Report what kind of entry lives at ``path`` right now.

    Symlinks are reported as links (SYMLINK_FILE / SYMLINK_DIRECTORY) rather
    than as their target; a dangling link counts as SYMLINK_FILE.
    """
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return PathKind.NOT_FOUND
    except NotADirectoryError:
        return PathKind.NOT_FOUND

    if stat.S_ISLNK(st.st_mode):
        try:
            target = os.stat(path)
        except OSError:
            return PathKind.SYMLINK_FILE
        if stat.S_ISDIR(target.st_mode):
            return PathKind.SYMLINK_DIRECTORY
        return PathKind.SYMLINK_FILE
    if stat.S_ISDIR(st.st_mode):
        return PathKind.DIRECTORY
    if stat.S_ISREG(st.st_mode):
        return PathKind.FILE
    return PathKind.OTHER


def size_of_file(path: Union[str, Path]) -> int:
    """
    Size in bytes of the regular file at ``path`` (links are followed).

    Raises:
        NotAFileError: If the path is not a regular file at the moment of the call
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise NotAFileError(f"Not a file: {path} ({e})", path=Path(path)) from e
    if not stat.S_ISREG(st.st_mode):
        raise NotAFileError(f"Not a file: {path}", path=Path(path))
    return st.st_size
