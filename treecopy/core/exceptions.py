# treecopy/core/exceptions.py

import errno


class TreeCopyError(Exception):
    """Base exception for all treecopy errors"""

    def __init__(self, message, path=None, recoverable=True, recovery_steps=None, *args):
        self.path = path
        self.recoverable = recoverable
        self.recovery_steps = recovery_steps or []
        super().__init__(message, *args)


class ConfigError(TreeCopyError):
    """Configuration related errors"""

    def __init__(self, message, config_key=None, invalid_value=None, expected_type=None, *args,
                 recovery_steps=None):
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.expected_type = expected_type
        if recovery_steps is None:
            recovery_steps = ["Check configuration file format", "Verify configuration values"]
            if config_key:
                recovery_steps.append(f"Validate the '{config_key}' setting")
        super().__init__(message, recoverable=True, recovery_steps=recovery_steps, *args)


class ValidationError(TreeCopyError):
    """Malformed or nonsensical request, raised before anything is touched"""

    def __init__(self, message, source=None, destination=None, *args):
        self.source = source
        self.destination = destination
        recovery_steps = [
            "Check that the source exists",
            "Choose a destination outside of the source tree",
        ]
        super().__init__(message, path=source, recoverable=True,
                         recovery_steps=recovery_steps, *args)


class NotAFileError(TreeCopyError):
    """Path is not a regular file at the moment of the call"""

    def __init__(self, message, path=None, *args):
        super().__init__(message, path=path, recoverable=False, *args)


class ScanError(TreeCopyError):
    """Traversal of the source tree could not complete"""

    def __init__(self, message, path=None, *args):
        recovery_steps = [
            "Check read permissions on the source tree",
            "Make sure nothing else is modifying the source while scanning",
        ]
        super().__init__(message, path=path, recoverable=True,
                         recovery_steps=recovery_steps, *args)


class ConflictError(TreeCopyError):
    """Destination entry exists and the policy does not allow touching it"""

    def __init__(self, message, path=None, policy=None, *args):
        self.policy = policy
        recovery_steps = [
            "Remove or rename the existing destination entry",
            "Retry with the 'skip' or 'overwrite' policy",
        ]
        super().__init__(message, path=path, recoverable=True,
                         recovery_steps=recovery_steps, *args)


def infer_error_type(error: OSError) -> str:
    """Map an OSError onto one of the coarse error types used for recovery hints."""
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return "permission"
    if error.errno in (errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)):
        return "space"
    if isinstance(error, FileNotFoundError):
        return "missing"
    return "io"


class TransferIOError(TreeCopyError):
    """A read/write/create/remove primitive failed"""

    def __init__(self, message, path=None, source=None, destination=None, *args, error_type=None):
        self.source = source
        self.destination = destination

        if error_type is None:
            lowered = message.lower()
            if "permission" in lowered or "access" in lowered:
                error_type = "permission"
            elif "space" in lowered:
                error_type = "space"
            elif "no such file" in lowered or "not found" in lowered:
                error_type = "missing"
        self.error_type = error_type

        if error_type == "permission":
            recovery_steps = [
                "Check file/directory permissions",
                "Verify user has necessary access rights"
            ]
        elif error_type == "space":
            recovery_steps = [
                "Free up space on the destination device",
                "Verify sufficient storage capacity"
            ]
        elif error_type == "missing":
            recovery_steps = [
                "Check that the entry was not removed during the transfer",
                "Rescan the source and retry"
            ]
        else:
            recovery_steps = [
                "Verify source and destination paths",
                "Check the device is still connected",
                "Retry the transfer"
            ]
        super().__init__(message, path=path, recoverable=True,
                         recovery_steps=recovery_steps, *args)


class ChecksumError(TransferIOError):
    """Destination content does not hash to the same value as the source"""

    def __init__(self, message, path=None, expected=None, actual=None, *args):
        self.expected = expected
        self.actual = actual
        super().__init__(message, path=path, error_type="checksum", *args)
        self.recovery_steps = [
            "Verify source file integrity",
            "Retry the transfer",
            "Check for transfer medium errors"
        ]


class CrossDeviceFallbackError(TreeCopyError):
    """The copy or cleanup phase of a cross-device move failed"""

    def __init__(self, message, source=None, destination=None, source_removed=False,
                 cause=None, *args):
        self.source = source
        self.destination = destination
        self.source_removed = source_removed
        self.cause = cause
        if source_removed:
            recovery_steps = [
                "Inspect the source for entries that were not removed",
                "Check the destination holds the complete tree",
            ]
        else:
            recovery_steps = [
                "The source is intact; remove the partial copy at the destination",
                "Fix the underlying error and retry the move",
            ]
        path = getattr(cause, "path", None) or source
        super().__init__(message, path=path, recoverable=True,
                         recovery_steps=recovery_steps, *args)


class TransferCancelledError(TreeCopyError):
    """A stop was requested between two entries"""

    def __init__(self, message, path=None, *args):
        super().__init__(message, path=path, recoverable=True,
                         recovery_steps=["Restart the transfer to continue"], *args)
