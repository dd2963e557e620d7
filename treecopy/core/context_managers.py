# treecopy/core/context_managers.py

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

from .exceptions import TreeCopyError

logger = logging.getLogger(__name__)


@contextmanager
def operation_context(operation_name: str = "Operation", on_error: Optional[Callable] = None):
    """
    Log the start, completion and failure of one public operation.

    Args:
        operation_name: Name of the operation for logging
        on_error: Optional callback invoked with the exception before it propagates

    Yields:
        None
    """
    start = time.monotonic()
    logger.debug(f"Starting {operation_name}")
    try:
        yield
    except TreeCopyError as e:
        logger.error(f"{operation_name} failed: {e}")
        if on_error:
            on_error(e)
        raise
    except Exception as e:
        logger.error(f"Unexpected error in {operation_name}: {e}", exc_info=True)
        if on_error:
            on_error(e)
        raise
    else:
        logger.info(f"Completed {operation_name} in {time.monotonic() - start:.2f}s")
