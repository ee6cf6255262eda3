"""
Migration Engine

Link, move, export and import of the live data roots. Import is the only
operation that replaces live data in place, so it runs as a small
transaction: back up the roots it will replace, swap them, then either
commit (drop the backup) or roll back from the backup.

@.architecture
Incoming: core/storage/service.py --- {raw target/source path strings}
Processing: link(), move(), export(), import_data(), link_project_data(), link_media_data(), move_project_data(), move_media_data(), _guarded() --- {6 jobs: precondition_checks, tree_copy, config_repointing, backup_swap_commit, rollback, error_to_result_conversion}
Outgoing: core/storage/config_store.py, core/storage/fileops.py, Local filesystem, diagnostics sink --- {config merges, copied/removed trees, OperationResult}
"""

import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Set

from monitoring import get_logger, operation_context

from .config_store import ConfigStore
from .errors import (
    LEGACY_MOVE_MESSAGE,
    SOURCE_NO_VALID_DATA_MESSAGE,
    ConflictKind,
    CopyFailureError,
    Diagnostic,
    DiagnosticsSink,
    DirectoryNotFoundError,
    InvalidPathError,
    NoValidDataError,
    PathConflictError,
    StorageErrorKind,
    StorageOperationError,
    log_diagnostic,
)
from .fileops import LocalFileOps, run_blocking
from .models import DataKind, OperationResult
from .paths import PathResolver, is_subdirectory, normalize_path, paths_conflict, same_path
from .validator import PER_PROJECT_DIR

logger = get_logger(__name__)

MIGRATION_FLAG = "_migrated.json"
DEFAULT_EXPORT_PREFIX = "storage-data"
DEFAULT_BACKUP_PREFIX = "storage-backup"


def export_dir_name(prefix: str, timestamp: float) -> str:
    """``<prefix>-2025-01-01T12-00-00-000Z`` for the given epoch seconds."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    millis = moment.microsecond // 1000
    return f"{prefix}-{moment.strftime('%Y-%m-%dT%H-%M-%S')}-{millis:03d}Z"


def _require_path(raw: Optional[str]) -> Path:
    if not raw or not raw.strip():
        raise InvalidPathError()
    return normalize_path(raw)


# =============================================================================
# Import Transaction
# =============================================================================

class ImportState(str, Enum):
    IDLE = "idle"
    BACKED_UP = "backed_up"
    SWAPPING = "swapping"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"


_TRANSITIONS: Dict[ImportState, Set[ImportState]] = {
    ImportState.IDLE: {ImportState.BACKED_UP},
    ImportState.BACKED_UP: {ImportState.SWAPPING},
    ImportState.SWAPPING: {ImportState.COMMITTED, ImportState.ROLLING_BACK},
    ImportState.ROLLING_BACK: {ImportState.IDLE},
    ImportState.COMMITTED: set(),
}


@dataclass
class ImportTransaction:
    """
    Bookkeeping for one import.

    ``backed_up`` holds the kinds whose live root had content and was copied
    into ``backup_dir``; ``swapped`` holds the kinds whose live root has been
    (or was about to be) replaced, in order.
    """

    source: Path
    backup_dir: Path
    kinds: List[DataKind]
    state: ImportState = ImportState.IDLE
    backed_up: Set[DataKind] = field(default_factory=set)
    swapped: List[DataKind] = field(default_factory=list)
    history: List[ImportState] = field(default_factory=lambda: [ImportState.IDLE])
    rollback_failed: bool = False

    def advance(self, state: ImportState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid import transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


# =============================================================================
# Migration Engine
# =============================================================================

class MigrationEngine:
    """
    Relocates, snapshots and restores user data.

    Every public operation returns an OperationResult; precondition and I/O
    errors are converted at the operation boundary and never raised to the
    caller. Operations are not serialized here; callers must not run two at
    once.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        resolver: PathResolver,
        fs: Optional[LocalFileOps] = None,
        *,
        diagnostics: Optional[DiagnosticsSink] = None,
        clock: Callable[[], float] = time.time,
        export_prefix: str = DEFAULT_EXPORT_PREFIX,
        backup_prefix: str = DEFAULT_BACKUP_PREFIX,
        temp_dir: Optional[Path] = None,
        protected_dir: Optional[Path] = None,
    ):
        self.config_store = config_store
        self.resolver = resolver
        self.fs = fs or LocalFileOps()
        self._diagnostics = diagnostics or log_diagnostic
        self._clock = clock
        self.export_prefix = export_prefix
        self.backup_prefix = backup_prefix
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
        # Old roots inside this directory are never deleted after a move
        self.protected_dir = normalize_path(protected_dir or resolver.app_data_dir)
        self.last_import: Optional[ImportTransaction] = None

    async def _guarded(
        self,
        operation: str,
        func: Callable[..., Awaitable[OperationResult]],
        *args,
    ) -> OperationResult:
        with operation_context(operation):
            try:
                return await func(*args)
            except StorageOperationError as e:
                logger.warning(f"{operation} rejected: {e.message}", kind=e.kind.value)
                return OperationResult.fail(e.message, e.kind, getattr(e, "conflict", None))
            except OSError as e:
                logger.error(f"{operation} failed: {e}", exc_info=True)
                return OperationResult.fail(str(e), StorageErrorKind.COPY_FAILURE)
            except Exception as e:
                logger.error(f"{operation} failed: {e}", exc_info=True)
                return OperationResult.fail(str(e))

    def _repoint(self, base: Path) -> None:
        self.config_store.update({"basePath": str(base), "projectPath": "", "mediaPath": ""})

    # =========================================================================
    # Link
    # =========================================================================

    async def link(self, path: str) -> OperationResult:
        """Point the config at an existing data root without touching any files."""
        return await self._guarded("link-data", self._link, path)

    async def _link(self, path: str) -> OperationResult:
        target = _require_path(path)
        if not target.exists():
            raise DirectoryNotFoundError()
        if not any((target / kind.value).is_dir() for kind in DataKind):
            raise NoValidDataError()

        self._repoint(target)
        logger.info(f"Linked storage to {target}")
        return OperationResult.ok(str(target))

    async def link_project_data(self, path: str) -> OperationResult:
        """Older front-ends link a projects root; the base is its parent."""
        return await self._guarded("link-project-data", self._link_legacy_root, path)

    async def link_media_data(self, path: str) -> OperationResult:
        return await self._guarded("link-media-data", self._link_legacy_root, path)

    async def _link_legacy_root(self, path: str) -> OperationResult:
        base = _require_path(path).parent
        self._repoint(base)
        logger.info(f"Linked storage to {base} (legacy root {path})")
        return OperationResult.ok(str(base))

    # =========================================================================
    # Move
    # =========================================================================

    async def move(self, path: str) -> OperationResult:
        """Copy both live roots to a new base, repoint, then drop the old roots."""
        return await self._guarded("move-data", self._move, path)

    async def _move(self, path: str) -> OperationResult:
        target = _require_path(path)
        current_base = self.resolver.resolve_base_path()
        if target == current_base:
            return OperationResult.ok(str(current_base))

        conflict = paths_conflict(current_base, target)
        if conflict is not None:
            raise PathConflictError(conflict)

        old_roots = {kind: self.resolver.resolve_root(kind) for kind in DataKind}
        try:
            for kind, old_root in old_roots.items():
                new_root = await run_blocking(self.fs.ensure_dir, target / kind.value)
                copied = await run_blocking(self.fs.copy_entries, old_root, new_root)
                logger.debug(f"Copied {copied} {kind.value} entries to {new_root}")
        except OSError as e:
            raise CopyFailureError(f"Failed to copy data to {target}: {e}") from e

        self._repoint(target)
        logger.info(f"Moved storage from {current_base} to {target}")

        for old_root in old_roots.values():
            await self._remove_old_root(old_root)

        return OperationResult.ok(str(target))

    async def _remove_old_root(self, root: Path) -> None:
        if is_subdirectory(self.protected_dir, root):
            logger.debug(f"Keeping {root}: inside the application data directory")
            return
        try:
            await run_blocking(self.fs.remove_dir, root)
        except OSError as e:
            logger.warning(f"Failed to remove old data root {root}: {e}")

    async def move_project_data(self, path: str) -> OperationResult:
        return await self._guarded("move-project-data", self._move_legacy_root, path)

    async def move_media_data(self, path: str) -> OperationResult:
        return await self._guarded("move-media-data", self._move_legacy_root, path)

    async def _move_legacy_root(self, path: str) -> OperationResult:
        raise InvalidPathError(LEGACY_MOVE_MESSAGE)

    # =========================================================================
    # Export
    # =========================================================================

    async def export(self, path: str) -> OperationResult:
        """Snapshot both live roots into a new timestamped directory under ``path``."""
        return await self._guarded("export-data", self._export, path)

    async def _export(self, path: str) -> OperationResult:
        target = _require_path(path)
        export_dir = target / export_dir_name(self.export_prefix, self._clock())

        roots = {kind: self.resolver.resolve_root(kind) for kind in DataKind}
        for root in roots.values():
            # Copying a root into itself never terminates
            if is_subdirectory(root, export_dir):
                raise PathConflictError(ConflictKind.SOURCE_IS_ANCESTOR)

        try:
            for kind, root in roots.items():
                await run_blocking(self.fs.copy_dir, root, export_dir / kind.value)
        except OSError as e:
            raise CopyFailureError(f"Failed to export data to {export_dir}: {e}") from e

        logger.info(f"Exported storage to {export_dir}")
        return OperationResult.ok(str(export_dir))

    # =========================================================================
    # Import
    # =========================================================================

    async def import_data(self, path: str) -> OperationResult:
        """Replace the live roots with the ones found under ``path``."""
        return await self._guarded("import-data", self._import, path)

    async def _import(self, path: str) -> OperationResult:
        source = _require_path(path)
        kinds = [kind for kind in DataKind if (source / kind.value).is_dir()]
        if not kinds:
            raise NoValidDataError(SOURCE_NO_VALID_DATA_MESSAGE)

        live_roots = {kind: self.resolver.resolve_root(kind) for kind in DataKind}
        for kind in kinds:
            incoming = source / kind.value
            if same_path(incoming, live_roots[kind]):
                raise PathConflictError(ConflictKind.SOURCE_IS_ANCESTOR)
            conflict = paths_conflict(incoming, live_roots[kind])
            if conflict is not None:
                raise PathConflictError(conflict)

        txn = ImportTransaction(source=source, backup_dir=self._new_backup_dir(), kinds=kinds)
        self.last_import = txn

        await self._backup(txn, live_roots)
        txn.advance(ImportState.BACKED_UP)

        txn.advance(ImportState.SWAPPING)
        try:
            for kind in kinds:
                live_root = live_roots[kind]
                txn.swapped.append(kind)
                try:
                    await run_blocking(self.fs.remove_dir, live_root)
                except OSError as e:
                    logger.warning(f"Failed to clear {live_root} before import: {e}")
                await run_blocking(self.fs.copy_dir, source / kind.value, live_root)
                logger.debug(f"Imported {kind.value} from {source}")

            await self._clear_migration_flag(live_roots[DataKind.PROJECTS])
        except Exception:
            logger.error(f"Import from {source} failed, rolling back", exc_info=True)
            txn.advance(ImportState.ROLLING_BACK)
            await self._rollback(txn, live_roots)
            txn.advance(ImportState.IDLE)
            raise

        txn.advance(ImportState.COMMITTED)
        await self._discard_backup(txn)
        logger.info(f"Imported storage from {source} ({', '.join(k.value for k in kinds)})")
        return OperationResult.ok()

    def _new_backup_dir(self) -> Path:
        millis = int(self._clock() * 1000)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=f"{self.backup_prefix}-{millis}-", dir=self.temp_dir))

    async def _backup(self, txn: ImportTransaction, live_roots: Dict[DataKind, Path]) -> None:
        try:
            for kind in txn.kinds:
                live_root = live_roots[kind]
                if await run_blocking(self.fs.is_empty, live_root):
                    continue
                await run_blocking(self.fs.copy_dir, live_root, txn.backup_dir / kind.value)
                txn.backed_up.add(kind)
        except OSError as e:
            await self._discard_backup(txn)
            raise CopyFailureError(f"Failed to back up live data before import: {e}") from e

    async def _clear_migration_flag(self, project_root: Path) -> None:
        flag = project_root / PER_PROJECT_DIR / MIGRATION_FLAG
        if await run_blocking(self.fs.remove_file, flag):
            logger.info("Cleared migration flag after import")

    async def _rollback(self, txn: ImportTransaction, live_roots: Dict[DataKind, Path]) -> None:
        for kind in txn.swapped:
            live_root = live_roots[kind]
            try:
                await run_blocking(self.fs.remove_dir, live_root)
                if kind in txn.backed_up:
                    await run_blocking(self.fs.copy_dir, txn.backup_dir / kind.value, live_root)
                else:
                    await run_blocking(self.fs.ensure_dir, live_root)
                logger.info(f"Restored {kind.value} root after failed import")
            except Exception as e:
                txn.rollback_failed = True
                self._diagnostics(Diagnostic(
                    kind=StorageErrorKind.ROLLBACK_FAILURE,
                    message=f"Failed to restore {live_root} from backup {txn.backup_dir}",
                    error=e,
                ))

        if txn.rollback_failed:
            logger.error(f"Keeping import backup at {txn.backup_dir} for manual recovery")
            return
        await self._discard_backup(txn)

    async def _discard_backup(self, txn: ImportTransaction) -> None:
        try:
            await run_blocking(self.fs.remove_dir, txn.backup_dir)
        except OSError as e:
            logger.warning(f"Failed to remove import backup {txn.backup_dir}: {e}")
