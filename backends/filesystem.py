"""File system capabilities consumed by the search engine."""

import asyncio
import fnmatch
import logging
import os
from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Sequence, Tuple

from backends.models import FileStat

logger = logging.getLogger(__name__)

_DIRECTORY = "dir"
_FILE = "file"


def matches_glob(relative_path: str, pattern: str) -> bool:
    """Match a root-relative posix path against a ``**``-style glob.

    The path is anchored with a leading slash so that ``**/name/**`` also
    matches entries directly under the root.
    """
    return fnmatch.fnmatchcase("/" + relative_path.lstrip("/"), pattern)


class AbstractFileSystem(ABC):
    """Abstract base class for the file primitives a search runs on."""

    @abstractmethod
    def enumerate_files(
        self,
        include_glob: str,
        exclude_globs: Sequence[str],
        limit: int,
        cancellation: asyncio.Event,
    ) -> AsyncIterator[str]:
        """List files under the root.

        Args:
            include_glob: Glob a file must match to be listed
            exclude_globs: Globs excluding files and whole directories
            limit: Maximum number of paths produced
            cancellation: Set by the caller to stop the listing early

        Returns:
            Async iterator of absolute file paths
        """
        pass

    @abstractmethod
    async def stat_file(self, path: str) -> FileStat:
        """Get file metadata.

        Raises:
            OSError: If the file is missing or inaccessible
        """
        pass

    @abstractmethod
    async def read_file(self, path: str) -> bytes:
        """Read the full file content.

        Raises:
            OSError: If the file is missing or inaccessible
        """
        pass

    @abstractmethod
    def resolve_relative_path(self, path: str) -> str:
        """Root-relative path of ``path``, or the absolute path when outside the root."""
        pass

    @abstractmethod
    def is_within_root(self, path: str) -> bool:
        """True if ``path`` lies under the search root."""
        pass


class LocalFileSystem(AbstractFileSystem):
    """Local disk implementation; blocking calls run in worker threads."""

    def __init__(self, root: str) -> None:
        """Initialize local file system.

        Args:
            root: Workspace root directory
        """
        self.root = os.path.abspath(root)

    async def enumerate_files(
        self,
        include_glob: str,
        exclude_globs: Sequence[str],
        limit: int,
        cancellation: asyncio.Event,
    ) -> AsyncIterator[str]:
        """Walk the root depth-first in name order."""
        produced = 0
        pending = [self.root]
        while pending and produced < limit:
            if cancellation.is_set():
                logger.info(f"Enumeration of {self.root} cancelled after {produced} files")
                return
            directory = pending.pop()
            try:
                entries = await asyncio.to_thread(self._list_directory, directory)
            except OSError as exc:
                logger.debug(f"Cannot list {directory}: {exc}")
                continue

            subdirectories = []
            for name, kind in entries:
                path = os.path.join(directory, name)
                relative = self.resolve_relative_path(path)
                if kind == _DIRECTORY:
                    if not self._is_excluded(relative + "/", exclude_globs):
                        subdirectories.append(path)
                    continue
                if self._is_excluded(relative, exclude_globs):
                    continue
                if not matches_glob(relative, include_glob):
                    continue
                yield path
                produced += 1
                if produced >= limit:
                    return
            pending.extend(reversed(subdirectories))

    async def stat_file(self, path: str) -> FileStat:
        result = await asyncio.to_thread(os.stat, path)
        return FileStat(size=result.st_size)

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(self._read_bytes, path)

    def resolve_relative_path(self, path: str) -> str:
        absolute = os.path.abspath(path)
        try:
            relative = os.path.relpath(absolute, self.root)
        except ValueError:
            # Different drive on Windows
            return absolute
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return absolute
        return relative.replace(os.sep, "/")

    def is_within_root(self, path: str) -> bool:
        return self.resolve_relative_path(path) != os.path.abspath(path)

    @staticmethod
    def _list_directory(directory: str) -> List[Tuple[str, str]]:
        """List directory entries as (name, kind), skipping sockets, fifos and devices."""
        entries = []
        with os.scandir(directory) as iterator:
            for entry in iterator:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        entries.append((entry.name, _DIRECTORY))
                    elif entry.is_file():
                        entries.append((entry.name, _FILE))
                except OSError:
                    continue
        return sorted(entries)

    @staticmethod
    def _read_bytes(path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    @staticmethod
    def _is_excluded(relative_path: str, exclude_globs: Sequence[str]) -> bool:
        return any(matches_glob(relative_path, pattern) for pattern in exclude_globs)
