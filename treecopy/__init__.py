"""
treecopy - Recursive file and directory copy/move with byte-accurate progress
"""

__version__ = "1.0.0"
__author__ = "treecopy contributors"
__license__ = "MIT"
__description__ = "Recursive file and directory copy/move with byte-accurate progress"
__project_name__ = "treecopy"

from treecopy.core.interfaces.types import (  # noqa: E402
    ConflictPolicy, CopyStats, MoveOutcome, PathKind, ProgressReport,
    TransferPlan, TreeEntry,
)
from treecopy.core.exceptions import (  # noqa: E402
    ChecksumError, ConflictError, CrossDeviceFallbackError, NotAFileError,
    ScanError, TransferCancelledError, TransferIOError, TreeCopyError,
    ValidationError,
)
from treecopy.core.path_classifier import classify  # noqa: E402
from treecopy.core.tree_scanner import scan_tree  # noqa: E402
from treecopy.core.transfer_engine import (  # noqa: E402
    TransferEngine, copy_directory, copy_file, move_directory, move_file,
)
