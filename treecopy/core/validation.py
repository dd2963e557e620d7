"""
Request validation for treecopy operations.
Everything here runs before the engine touches the filesystem.
"""
import logging
from pathlib import Path

from .exceptions import ValidationError
from .interfaces.types import ConflictPolicy, PathKind
from .path_classifier import classify
from .path_utils import is_same_path, is_subpath

logger = logging.getLogger(__name__)


class ErrorMessages:
    """Centralized error message definitions."""

    INVALID_POLICY = "Invalid conflict policy"
    SOURCE_NOT_FOUND = "Source does not exist"
    SOURCE_NOT_FILE = "Source is not a file"
    SOURCE_NOT_DIRECTORY = "Source is not a directory"
    SOURCE_UNSUPPORTED = "Source is not a regular file, directory or symlink"
    SAME_PATH = "Source and destination are the same entry"
    DESTINATION_INSIDE_SOURCE = "Destination is inside the source directory"
    DESTINATION_IS_DIRECTORY = "Destination is an existing directory"
    DESTINATION_NOT_DIRECTORY = "Destination exists and is not a directory"


def validate_transfer_request(policy, source: Path, destination: Path,
                              expect_directory: bool, follow_source_link: bool = True) -> PathKind:
    """
    Reject malformed or nonsensical requests.

    Args:
        policy: ConflictPolicy selected for the operation
        source: Normalized source path
        destination: Normalized destination path
        expect_directory: True for directory operations, False for file operations
        follow_source_link: Whether a symlink source stands for its target

    Returns:
        PathKind: Kind of the source as classified during validation

    Raises:
        ValidationError: If the request cannot be carried out
    """
    if not isinstance(policy, ConflictPolicy):
        raise ValidationError(f"{ErrorMessages.INVALID_POLICY}: {policy!r}",
                              source=source, destination=destination)

    source_kind = classify(source)
    if source_kind == PathKind.NOT_FOUND:
        raise ValidationError(f"{ErrorMessages.SOURCE_NOT_FOUND}: {source}",
                              source=source, destination=destination)

    if expect_directory:
        accepted = (PathKind.DIRECTORY, PathKind.SYMLINK_DIRECTORY) if follow_source_link \
            else (PathKind.DIRECTORY,)
        if source_kind not in accepted:
            raise ValidationError(f"{ErrorMessages.SOURCE_NOT_DIRECTORY}: {source}",
                                  source=source, destination=destination)
    elif source_kind == PathKind.OTHER:
        raise ValidationError(f"{ErrorMessages.SOURCE_UNSUPPORTED}: {source}",
                              source=source, destination=destination)
    elif source_kind == PathKind.DIRECTORY or (
        follow_source_link and source_kind == PathKind.SYMLINK_DIRECTORY
    ):
        raise ValidationError(f"{ErrorMessages.SOURCE_NOT_FILE}: {source}",
                              source=source, destination=destination)

    if is_same_path(source, destination):
        raise ValidationError(f"{ErrorMessages.SAME_PATH}: {source} -> {destination}",
                              source=source, destination=destination)

    destination_kind = classify(destination)
    if expect_directory:
        if is_subpath(destination, source):
            raise ValidationError(
                f"{ErrorMessages.DESTINATION_INSIDE_SOURCE}: {destination}",
                source=source, destination=destination)
        if destination_kind not in (PathKind.NOT_FOUND, PathKind.DIRECTORY,
                                    PathKind.SYMLINK_DIRECTORY):
            raise ValidationError(
                f"{ErrorMessages.DESTINATION_NOT_DIRECTORY}: {destination}",
                source=source, destination=destination)
    elif destination_kind in (PathKind.DIRECTORY, PathKind.SYMLINK_DIRECTORY):
        raise ValidationError(f"{ErrorMessages.DESTINATION_IS_DIRECTORY}: {destination}",
                              source=source, destination=destination)

    logger.debug(f"Validated request {source} -> {destination} ({policy.value})")
    return source_kind
