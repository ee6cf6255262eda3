"""
Directory Validator

Read-only inspection of a candidate data root. Used before link, move and
import decisions; never touches the filesystem beyond listing directories.

@.architecture
Incoming: core/storage/service.py, api/v1/endpoints/storage.py --- {raw candidate path strings}
Processing: validate_data_dir(), count_projects(), count_media() --- {3 jobs: path_validation, entity_counting, error_classification}
Outgoing: core/storage/service.py --- {ValidationResult}
"""

from pathlib import Path

from monitoring import get_logger

from .errors import (
    DIRECTORY_NOT_FOUND_MESSAGE,
    EMPTY_PATH_MESSAGE,
    NO_VALID_DATA_MESSAGE,
    NOT_A_DIRECTORY_MESSAGE,
    StorageErrorKind,
)
from .models import DataKind, ValidationResult
from .paths import normalize_path

logger = get_logger(__name__)

# Nested per-project layout: projects/_p/<project id>/
PER_PROJECT_DIR = "_p"
PROJECT_RECORD_SUFFIX = ".json"


def count_projects(projects_dir: Path) -> int:
    """
    Number of projects under ``projects_dir``.

    Flat layout counts ``*.json`` records; the nested layout counts
    non-hidden directories in ``_p/``. The larger of the two wins.
    """
    if not projects_dir.is_dir():
        return 0

    flat_count = sum(
        1 for entry in projects_dir.iterdir()
        if entry.name.endswith(PROJECT_RECORD_SUFFIX)
    )

    per_project_dir = projects_dir / PER_PROJECT_DIR
    nested_count = 0
    if per_project_dir.is_dir():
        nested_count = sum(
            1 for entry in per_project_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith('.')
        )

    return max(flat_count, nested_count)


def count_media(media_dir: Path) -> int:
    if not media_dir.is_dir():
        return 0
    return sum(1 for _ in media_dir.iterdir())


def validate_data_dir(path: str) -> ValidationResult:
    """Report whether ``path`` looks like a data root, with entity counts."""
    if not path or not str(path).strip():
        return ValidationResult(
            valid=False, error=EMPTY_PATH_MESSAGE, error_kind=StorageErrorKind.INVALID_PATH
        )

    try:
        target = normalize_path(path)
        if not target.exists():
            return ValidationResult(
                valid=False,
                error=DIRECTORY_NOT_FOUND_MESSAGE,
                error_kind=StorageErrorKind.DIRECTORY_NOT_FOUND,
            )
        if not target.is_dir():
            return ValidationResult(
                valid=False,
                error=NOT_A_DIRECTORY_MESSAGE,
                error_kind=StorageErrorKind.DIRECTORY_NOT_FOUND,
            )

        project_count = count_projects(target / DataKind.PROJECTS.value)
        media_count = count_media(target / DataKind.MEDIA.value)
    except OSError as e:
        logger.warning(f"Failed to inspect {path}: {e}")
        return ValidationResult(valid=False, error=str(e))

    if project_count == 0 and media_count == 0:
        return ValidationResult(
            valid=False, error=NO_VALID_DATA_MESSAGE, error_kind=StorageErrorKind.NO_VALID_DATA
        )

    return ValidationResult(valid=True, project_count=project_count, media_count=media_count)
