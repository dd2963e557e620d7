# treecopy/cli/application_factory.py

import logging

from treecopy.core.config_manager import TransferConfig
from treecopy.core.exceptions import TreeCopyError
from treecopy.core.interfaces.types import ConflictPolicy, PathKind
from treecopy.core.path_classifier import classify
from treecopy.core.path_utils import normalize
from treecopy.core.rich_display import RichProgressDisplay
from treecopy.core.transfer_engine import TransferEngine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_config(args, config: TransferConfig) -> TransferConfig:
    """
    Overlay command line options on the loaded configuration.

    Args:
        args: Parsed command line arguments
        config: Configuration loaded from file

    Returns:
        TransferConfig: Configuration for this run
    """
    updates = {}
    if args.policy:
        updates["default_policy"] = ConflictPolicy(args.policy)
    if getattr(args, "max_depth", None) is not None:
        updates["max_depth"] = args.max_depth
    if getattr(args, "verify", False):
        updates["verify_transfers"] = True
    if getattr(args, "preserve_metadata", False):
        updates["preserve_metadata"] = True
    return config.model_copy(update=updates)


def _is_directory_source(source) -> bool:
    return classify(normalize(source)) in (PathKind.DIRECTORY, PathKind.SYMLINK_DIRECTORY)


def _run(args, config: TransferConfig, operation) -> int:
    run_config = build_config(args, config)
    engine = TransferEngine(config=run_config)
    display = RichProgressDisplay(enabled=not args.no_progress)
    try:
        with display:
            operation(engine, display)
        return EXIT_OK
    except KeyboardInterrupt:
        logger.warning("Transfer interrupted by user")
        display.console.print("\nInterrupted")
        return EXIT_INTERRUPTED
    except TreeCopyError as e:
        display.show_error(e)
        return EXIT_ERROR


def run_copy(args, config: TransferConfig) -> int:
    """
    Run the copy command.

    Returns:
        Exit code (0 for success, 1 for failure, 130 when interrupted)
    """
    def operation(engine: TransferEngine, display: RichProgressDisplay):
        if _is_directory_source(args.source):
            stats = engine.copy_directory(args.source, args.destination, on_progress=display)
        else:
            stats = engine.copy_file(args.source, args.destination, on_progress=display)
        display.show_copy_summary(stats)

    return _run(args, config, operation)


def run_move(args, config: TransferConfig) -> int:
    """
    Run the move command.

    Returns:
        Exit code (0 for success, 1 for failure, 130 when interrupted)
    """
    def operation(engine: TransferEngine, display: RichProgressDisplay):
        # A link to a directory is moved as a link
        if classify(normalize(args.source)) == PathKind.DIRECTORY:
            outcome = engine.move_directory(args.source, args.destination, on_progress=display)
        else:
            outcome = engine.move_file(args.source, args.destination)
        display.show_move_summary(outcome)

    return _run(args, config, operation)


def validate_arguments(args):
    """
    Validate command line arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        tuple: (is_valid: bool, error_message: str)
    """
    if getattr(args, "max_depth", None) is not None and args.max_depth < 0:
        return False, "Maximum depth must be zero or a positive integer"

    if not args.source or not args.destination:
        return False, "Source and destination must not be empty"

    return True, ""
