"""
Filesystem Operations

Directory-tree primitives used by the migration engine and cache manager.
LocalFileOps is the filesystem provider; it is injected so tests can swap in
a provider that fails at a chosen step.

@.architecture
Incoming: core/storage/migration.py, core/storage/cache.py, core/storage/file_store.py --- {source/destination Paths, cutoff timestamps}
Processing: copy_dir(), copy_entries(), remove_dir(), directory_size(), delete_old_files(), run_blocking() --- {5 jobs: tree_copy, tree_removal, size_accounting, age_pruning, executor_dispatch}
Outgoing: Local filesystem (shutil/os), core/storage/*.py --- {copied/removed trees, int byte counts}
"""

import asyncio
import functools
import os
import shutil
from pathlib import Path
from typing import Any, Callable, List, TypeVar

from monitoring import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run blocking filesystem work in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class LocalFileOps:
    """
    Local filesystem provider.

    Copies overwrite existing files and merge into existing directories.
    Removal of a missing path is a no-op.
    """

    def ensure_dir(self, path: Path) -> Path:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def list_entries(self, path: Path) -> List[Path]:
        """Entries of ``path`` sorted by name; empty if it does not exist."""
        path = Path(path)
        if not path.is_dir():
            return []
        return sorted(path.iterdir(), key=lambda p: p.name)

    def is_empty(self, path: Path) -> bool:
        return not self.list_entries(path)

    def copy_dir(self, source: Path, destination: Path) -> None:
        """Recursively copy the contents of ``source`` into ``destination``."""
        self.ensure_dir(destination)
        shutil.copytree(source, destination, dirs_exist_ok=True)

    def copy_entry(self, source: Path, destination: Path) -> None:
        """Copy a single file or directory entry, overwriting on conflict."""
        source = Path(source)
        destination = Path(destination)
        if source.is_dir():
            shutil.copytree(source, destination, dirs_exist_ok=True)
        else:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)

    def copy_entries(self, source_dir: Path, destination_dir: Path) -> int:
        """Copy every entry of ``source_dir`` into ``destination_dir``. Returns entry count."""
        self.ensure_dir(destination_dir)
        entries = self.list_entries(source_dir)
        for entry in entries:
            self.copy_entry(entry, Path(destination_dir) / entry.name)
        return len(entries)

    def remove_dir(self, path: Path) -> None:
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)

    def remove_file(self, path: Path) -> bool:
        path = Path(path)
        if path.is_file():
            path.unlink()
            return True
        return False

    def directory_size(self, path: Path) -> int:
        """Recursive size of all files under ``path``; unreadable trees count 0."""
        total = 0
        try:
            with os.scandir(path) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        total += self.directory_size(Path(entry.path))
                    else:
                        total += entry.stat(follow_symlinks=False).st_size
        except OSError:
            return total
        return total

    def delete_old_files(self, path: Path, cutoff: float) -> int:
        """
        Delete files under ``path`` modified before ``cutoff`` (epoch seconds).

        Subdirectories left empty are removed bottom-up; ``path`` itself is
        kept. Entries that cannot be read or removed are skipped. Returns
        bytes freed.
        """
        cleared = 0
        try:
            entries = list(os.scandir(path))
        except OSError as e:
            logger.debug(f"Skipping unreadable cache directory {path}: {e}")
            return 0

        for entry in entries:
            entry_path = Path(entry.path)
            try:
                if entry.is_dir(follow_symlinks=False):
                    cleared += self.delete_old_files(entry_path, cutoff)
                    if not any(entry_path.iterdir()):
                        entry_path.rmdir()
                else:
                    stat = entry.stat(follow_symlinks=False)
                    if stat.st_mtime < cutoff:
                        entry_path.unlink()
                        cleared += stat.st_size
            except OSError as e:
                logger.debug(f"Skipping {entry_path}: {e}")

        return cleared
