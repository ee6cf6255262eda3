"""
Storage Errors

Error kinds and exception hierarchy for the storage lifecycle core, plus the
diagnostics sink used for failures that are reported but never surfaced
(rollback and config-persistence failures).

@.architecture
Incoming: core/storage/*.py --- {failure conditions, caught OSError instances}
Processing: StorageOperationError hierarchy, log_diagnostic() --- {2 jobs: error_classification, diagnostics_reporting}
Outgoing: core/storage/service.py, api/v1/endpoints/storage.py --- {typed exceptions with StorageErrorKind, Diagnostic records}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from monitoring import get_logger

logger = get_logger(__name__)


class StorageErrorKind(str, Enum):
    """Failure categories reported by storage operations."""

    INVALID_PATH = "invalid_path"
    DIRECTORY_NOT_FOUND = "directory_not_found"
    NO_VALID_DATA = "no_valid_data"
    PATH_CONFLICT = "path_conflict"
    COPY_FAILURE = "copy_failure"
    ROLLBACK_FAILURE = "rollback_failure"
    CONFIG_PERSIST_FAILURE = "config_persist_failure"


class ConflictKind(str, Enum):
    """Ancestor/descendant relationship between the current base and a target."""

    SOURCE_IS_ANCESTOR = "source_is_ancestor"
    DEST_IS_ANCESTOR = "dest_is_ancestor"


EMPTY_PATH_MESSAGE = "Path cannot be empty"
DIRECTORY_NOT_FOUND_MESSAGE = "Directory does not exist"
NOT_A_DIRECTORY_MESSAGE = "Path is not a directory"
NO_VALID_DATA_MESSAGE = (
    "Directory does not contain valid data (requires projects/ or media/ subdirectory)"
)
SOURCE_NO_VALID_DATA_MESSAGE = (
    "Source directory does not contain valid data (requires projects/ or media/ subdirectory)"
)
CONFLICT_MESSAGES = {
    ConflictKind.SOURCE_IS_ANCESTOR: "Target path cannot be a subdirectory of the current path",
    ConflictKind.DEST_IS_ANCESTOR: "Current path cannot be a subdirectory of the target path",
}
LEGACY_MOVE_MESSAGE = "Use the unified storage path move operation instead"


class StorageOperationError(Exception):
    """Base class for storage operation failures."""

    kind: StorageErrorKind = StorageErrorKind.COPY_FAILURE

    def __init__(self, message: str, kind: Optional[StorageErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class InvalidPathError(StorageOperationError):
    kind = StorageErrorKind.INVALID_PATH

    def __init__(self, message: str = EMPTY_PATH_MESSAGE):
        super().__init__(message)


class DirectoryNotFoundError(StorageOperationError):
    kind = StorageErrorKind.DIRECTORY_NOT_FOUND

    def __init__(self, message: str = DIRECTORY_NOT_FOUND_MESSAGE):
        super().__init__(message)


class NoValidDataError(StorageOperationError):
    kind = StorageErrorKind.NO_VALID_DATA

    def __init__(self, message: str = NO_VALID_DATA_MESSAGE):
        super().__init__(message)


class PathConflictError(StorageOperationError):
    """Raised when source and destination are nested inside each other."""

    kind = StorageErrorKind.PATH_CONFLICT

    def __init__(self, conflict: ConflictKind):
        super().__init__(CONFLICT_MESSAGES[conflict])
        self.conflict = conflict


class CopyFailureError(StorageOperationError):
    """Underlying I/O error while copying or removing a directory tree."""

    kind = StorageErrorKind.COPY_FAILURE


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A failure that is logged and reported, but not returned to the caller."""

    kind: StorageErrorKind
    message: str
    error: Optional[BaseException] = None


DiagnosticsSink = Callable[[Diagnostic], None]


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default diagnostics sink: write to the structured log."""
    logger.warning(
        diagnostic.message,
        kind=diagnostic.kind.value,
        error=str(diagnostic.error) if diagnostic.error else None,
    )
