"""
File Store

Opaque key/value persistence inside the live project root. A key such as
``_p/abc/script`` is stored as ``<project root>/_p/abc/script.json``; values
are written and read back as text and never parsed.

@.architecture
Incoming: core/storage/service.py, api/v1/endpoints/file_storage.py --- {string keys and prefixes, string values}
Processing: get(), set(), remove(), exists(), list(), remove_dir(), _resolve_key() --- {3 jobs: key_validation, record_persistence, prefix_listing}
Outgoing: core/storage/paths.py, Local filesystem --- {<key>.json files, Optional[str], bool, List[str]}
"""

import os
from pathlib import Path
from typing import List, Optional

import aiofiles

from monitoring import get_logger

from .fileops import LocalFileOps, run_blocking
from .paths import PathResolver

logger = get_logger(__name__)

RECORD_SUFFIX = ".json"


class InvalidKeyError(ValueError):
    pass


class FileStore:
    """
    Record storage under the project root.

    Every method resolves the project root on each call, so records follow
    the data after a link, move or import. I/O failures are logged and
    reported as None/False rather than raised.
    """

    def __init__(self, resolver: PathResolver, fs: Optional[LocalFileOps] = None):
        self.resolver = resolver
        self.fs = fs or LocalFileOps()

    def _relative(self, key: str) -> Path:
        if not key or '..' in key or os.path.isabs(key) or key.startswith(('/', '\\')):
            raise InvalidKeyError(f"Invalid key for file storage: {key!r}")
        return Path(key)

    def _resolve_key(self, key: str) -> Path:
        relative = self._relative(key)
        return self.resolver.resolve_project_root() / f"{relative}{RECORD_SUFFIX}"

    async def get(self, key: str) -> Optional[str]:
        try:
            path = self._resolve_key(key)
            if not path.is_file():
                return None
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return await f.read()
        except InvalidKeyError as e:
            logger.error(str(e))
            return None
        except OSError as e:
            logger.error(f"Failed to read {key} from file storage: {e}")
            return None

    async def set(self, key: str, value: str) -> bool:
        try:
            path = self._resolve_key(key)
            await run_blocking(self.fs.ensure_dir, path.parent)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(value)
            logger.debug(f"Saved to file: {path} ({round(len(value) / 1024)}KB)")
            return True
        except InvalidKeyError as e:
            logger.error(str(e))
            return False
        except OSError as e:
            logger.error(f"Failed to write {key} to file storage: {e}")
            return False

    async def remove(self, key: str) -> bool:
        """Delete a record. Removing a missing record succeeds."""
        try:
            path = self._resolve_key(key)
            await run_blocking(self.fs.remove_file, path)
            return True
        except InvalidKeyError as e:
            logger.error(str(e))
            return False
        except OSError as e:
            logger.error(f"Failed to remove {key} from file storage: {e}")
            return False

    async def exists(self, key: str) -> bool:
        try:
            return self._resolve_key(key).is_file()
        except InvalidKeyError:
            return False

    async def list(self, prefix: str) -> List[str]:
        """Keys of the records directly under ``prefix``, as ``prefix/name``."""
        try:
            directory = self.resolver.resolve_project_root() / self._relative(prefix)
            entries = await run_blocking(self.fs.list_entries, directory)
        except InvalidKeyError as e:
            logger.error(str(e))
            return []
        except OSError as e:
            logger.warning(f"Failed to list file storage prefix {prefix}: {e}")
            return []

        return [
            f"{prefix}/{entry.name[:-len(RECORD_SUFFIX)]}"
            for entry in entries
            if entry.is_file() and entry.name.endswith(RECORD_SUFFIX)
        ]

    async def remove_dir(self, prefix: str) -> bool:
        """Recursively delete everything under ``prefix``."""
        try:
            directory = self.resolver.resolve_project_root() / self._relative(prefix)
            await run_blocking(self.fs.remove_dir, directory)
            return True
        except InvalidKeyError as e:
            logger.error(str(e))
            return False
        except OSError as e:
            logger.error(f"Failed to remove file storage directory {prefix}: {e}")
            return False
