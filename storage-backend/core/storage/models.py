"""
Storage Models

The persisted StorageConfig record and the result types returned by storage
operations.

@.architecture
Incoming: core/storage/config_store.py, core/storage/*.py --- {JSON config dicts, operation outcomes}
Processing: StorageConfig validation, to_dict() serialization --- {2 jobs: schema_validation, serialization}
Outgoing: core/storage/service.py, api/v1/endpoints/storage.py --- {StorageConfig, OperationResult, ValidationResult, CacheSizeReport, StoragePaths}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConflictKind, StorageErrorKind


DEFAULT_AUTO_CLEAN_DAYS = 30


class DataKind(str, Enum):
    """The two live data roots under a base path."""

    PROJECTS = "projects"
    MEDIA = "media"


# =============================================================================
# Persisted Config
# =============================================================================

class StorageConfig(BaseModel):
    """
    Where data lives and how the cache is pruned.

    Serialized with the camelCase keys used by existing config files.
    projectPath/mediaPath are legacy fields kept only so older files still
    resolve; new writes always clear them.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    base_path: str = Field(default="", alias="basePath")
    project_path: str = Field(default="", alias="projectPath")
    media_path: str = Field(default="", alias="mediaPath")
    auto_clean_enabled: bool = Field(default=False, alias="autoCleanEnabled")
    auto_clean_days: int = Field(default=DEFAULT_AUTO_CLEAN_DAYS, alias="autoCleanDays")

    @field_validator('base_path', 'project_path', 'media_path', mode='before')
    @classmethod
    def null_path_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('auto_clean_enabled', mode='before')
    @classmethod
    def null_enabled_to_false(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator('auto_clean_days', mode='before')
    @classmethod
    def null_days_to_default(cls, v: Any) -> Any:
        return DEFAULT_AUTO_CLEAN_DAYS if v is None else v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# =============================================================================
# Operation Results
# =============================================================================

def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class OperationResult:
    """Success/failure outcome of a migration or cache operation."""

    success: bool
    path: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[StorageErrorKind] = None
    conflict: Optional[ConflictKind] = None
    cleared_bytes: Optional[int] = None

    @classmethod
    def ok(cls, path: Optional[str] = None, cleared_bytes: Optional[int] = None) -> "OperationResult":
        return cls(success=True, path=path, cleared_bytes=cleared_bytes)

    @classmethod
    def fail(
        cls,
        error: str,
        kind: Optional[StorageErrorKind] = None,
        conflict: Optional[ConflictKind] = None,
    ) -> "OperationResult":
        return cls(success=False, error=error, error_kind=kind, conflict=conflict)

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "success": self.success,
            "path": self.path,
            "error": self.error,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "conflict": self.conflict.value if self.conflict else None,
            "clearedBytes": self.cleared_bytes,
        })


@dataclass
class ValidationResult:
    """Outcome of inspecting a candidate data root."""

    valid: bool
    error: Optional[str] = None
    error_kind: Optional[StorageErrorKind] = None
    project_count: Optional[int] = None
    media_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "valid": self.valid,
            "error": self.error,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "projectCount": self.project_count,
            "mediaCount": self.media_count,
        })


@dataclass
class CacheEntry:
    path: str
    size: int


@dataclass
class CacheSizeReport:
    """Per-directory cache sizes plus their total, in bytes."""

    details: List[CacheEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(entry.size for entry in self.details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "details": [{"path": entry.path, "size": entry.size} for entry in self.details],
        }


@dataclass
class StoragePaths:
    base_path: str
    project_path: str
    media_path: str
    cache_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basePath": self.base_path,
            "projectPath": self.project_path,
            "mediaPath": self.media_path,
            "cachePath": self.cache_path,
        }
