# treecopy/core/file_operations.py

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .file_context import TempFileGuard, io_errors
from .progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)

# Fixed read size; bounds memory use independently of file size
CHUNK_SIZE = 4 * 1024 * 1024
TEMP_FILE_EXTENSION = ".tcpart"  # Temporary file extension during transfer


def create_temp_file(dst_path: Path):
    """
    Create a new, uniquely named temporary sibling of ``dst_path``.

    Existing entries are never reused, so a destination file that happens to
    carry the temporary extension is left alone.

    Returns:
        tuple: Open file descriptor and the temporary path
    """
    fd, name = tempfile.mkstemp(dir=dst_path.parent, prefix=f".{dst_path.name}.",
                                suffix=TEMP_FILE_EXTENSION)
    return fd, Path(name)


def copy_file_chunked(src_path: Path, dst_path: Path,
                      tracker: Optional[ProgressTracker] = None,
                      preserve_metadata: bool = False,
                      hash_obj=None) -> int:
    """
    Copy one file in bounded chunks, reporting each chunk to ``tracker``.

    The data is written to a temporary sibling first and renamed over
    ``dst_path`` once complete, so an existing destination is only replaced
    by a fully written file. Permission bits are always copied; timestamps
    and other stat metadata only with ``preserve_metadata``.

    Args:
        src_path: Source file path (links are followed)
        dst_path: Destination file path
        tracker: Optional progress tracker fed with chunk sizes
        preserve_metadata: Also copy timestamps and flags
        hash_obj: Optional hash object updated with every chunk

    Returns:
        int: Number of bytes written

    Raises:
        TransferIOError: If reading, writing or renaming fails
    """
    bytes_transferred = 0

    with io_errors(src_path, "Copy", source=src_path, destination=dst_path):
        with open(src_path, 'rb') as src, TempFileGuard() as guard:
            fd, temp_dst_path = create_temp_file(dst_path)
            guard.register_temp_file(temp_dst_path)

            with os.fdopen(fd, 'wb') as dst:
                while True:
                    chunk = src.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    dst.write(chunk)
                    if hash_obj is not None:
                        hash_obj.update(chunk)
                    bytes_transferred += len(chunk)
                    if tracker is not None:
                        tracker.advance(len(chunk))

            if preserve_metadata:
                shutil.copystat(src_path, temp_dst_path)
            else:
                shutil.copymode(src_path, temp_dst_path)

            os.replace(temp_dst_path, dst_path)

    logger.debug(f"Copied {src_path} -> {dst_path} ({bytes_transferred} bytes)")
    return bytes_transferred


def copy_symlink(src_path: Path, dst_path: Path) -> str:
    """
    Recreate the link at ``src_path`` as ``dst_path`` with the same link text.

    Returns:
        str: The link target that was written
    """
    with io_errors(src_path, "Symlink copy", source=src_path, destination=dst_path):
        target = os.readlink(src_path)
        os.symlink(target, dst_path, target_is_directory=os.path.isdir(src_path))
    logger.debug(f"Linked {dst_path} -> {target}")
    return target


def ensure_directory(dir_path: Path, parents: bool = False) -> bool:
    """
    Make sure ``dir_path`` exists as a directory.

    Returns:
        bool: True if the directory was created, False if it already existed

    Raises:
        TransferIOError: If directory creation fails
    """
    with io_errors(dir_path, "Create directory"):
        try:
            dir_path.mkdir(parents=parents)
            return True
        except FileExistsError:
            if dir_path.is_dir():
                return False
            raise
