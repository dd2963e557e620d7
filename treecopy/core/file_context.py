# treecopy/core/file_context.py

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from .exceptions import TransferIOError, infer_error_type

logger = logging.getLogger(__name__)


@contextmanager
def io_errors(path: Path, operation: str = "I/O operation",
              source: Optional[Path] = None, destination: Optional[Path] = None):
    """
    Convert OSError raised inside the block into TransferIOError naming ``path``.

    Args:
        path: Entry the block works on
        operation: Short description used in the message and logs
        source: Source path of the surrounding transfer, if any
        destination: Destination path of the surrounding transfer, if any

    Raises:
        TransferIOError: Converted from OSError
    """
    try:
        yield
    except TransferIOError:
        raise
    except OSError as e:
        error_type = infer_error_type(e)
        logger.error(f"{operation} failed for {path}: {e}")
        raise TransferIOError(f"{operation} failed for {path}: {e}", path=path,
                              source=source, destination=destination,
                              error_type=error_type) from e


class TempFileGuard:
    """Context manager removing registered temporary files if the block fails."""

    def __init__(self):
        self.temp_files = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self._clean_up_temp_files()
        return False

    def _clean_up_temp_files(self):
        for temp_file in self.temp_files:
            try:
                if temp_file.exists():
                    temp_file.unlink()
                    logger.info(f"Cleaned up temporary file: {temp_file}")
            except OSError as e:
                logger.warning(f"Failed to clean up temporary file {temp_file}: {e}")

    def register_temp_file(self, temp_file: Path):
        """
        Register a temporary file for cleanup in case of errors.

        Args:
            temp_file: Path to the temporary file
        """
        self.temp_files.append(temp_file)
