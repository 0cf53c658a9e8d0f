"""
Error types raised while seeding managed directories and handing off.
"""
import errno
from enum import Enum
from typing import Optional


class SeedErrorKind(str, Enum):
    """Classification of seeding failures."""
    SOURCE_MISSING = "source_missing"        # Snapshot absent or unreadable, recoverable
    PERMISSION_DENIED = "permission_denied"  # Fatal
    DISK_FULL = "disk_full"                  # Fatal
    UNKNOWN_IO = "unknown_io"                # Fatal


_DISK_FULL_ERRNOS = {errno.ENOSPC, errno.EDQUOT} if hasattr(errno, "EDQUOT") else {errno.ENOSPC}


def classify_os_error(error: OSError) -> SeedErrorKind:
    """Map an OSError raised during seeding onto a fatal error kind."""
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return SeedErrorKind.PERMISSION_DENIED
    if error.errno in _DISK_FULL_ERRNOS:
        return SeedErrorKind.DISK_FULL
    return SeedErrorKind.UNKNOWN_IO


class SeedError(Exception):
    """Fatal failure while seeding a managed directory.

    The process must not hand off to the downstream service after this is raised.
    """

    def __init__(self, directory: str, kind: SeedErrorKind, cause: Optional[BaseException] = None):
        self.directory = directory
        self.kind = kind
        self.cause = cause
        super().__init__(f"Failed to seed '{directory}' ({kind.value}): {cause}")

    @classmethod
    def from_os_error(cls, directory: str, error: OSError) -> "SeedError":
        return cls(directory, classify_os_error(error), error)


class HandoffError(Exception):
    """Raised when control cannot be passed to the downstream service."""

    def __init__(self, message: str, exit_code: int):
        self.exit_code = exit_code
        super().__init__(message)
