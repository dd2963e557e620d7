# treecopy/cli/argument_parser.py

import argparse
from treecopy import __version__, __project_name__
from treecopy.core.interfaces.types import ConflictPolicy


def _add_transfer_arguments(parser):
    parser.add_argument(
        "source",
        help="File or directory to transfer"
    )

    parser.add_argument(
        "destination",
        help="Target path; a directory source is transferred onto this path itself"
    )

    parser.add_argument(
        "--policy",
        choices=[p.value for p in ConflictPolicy],
        default=None,
        help="What to do when a destination entry already exists (default from config)"
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show a progress bar"
    )


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="treecopy",
        description=f"{__project_name__} v{__version__}"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to an alternative configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    copy_parser = subparsers.add_parser("copy", help="Copy a file or directory tree")
    _add_transfer_arguments(copy_parser)

    copy_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Deepest directory level to descend into (0 copies only direct children)"
    )

    copy_parser.add_argument(
        "--verify",
        action="store_true",
        help="Verify every copied file with an XXH64 checksum"
    )

    copy_parser.add_argument(
        "--preserve-metadata",
        action="store_true",
        help="Also copy timestamps and file flags"
    )

    move_parser = subparsers.add_parser("move", help="Move a file or directory tree")
    _add_transfer_arguments(move_parser)

    return parser.parse_args(argv)
