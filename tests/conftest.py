"""Pytest configuration for tests.

Sets up Python path and an in-memory file system double for all tests.
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Union

# Add project root to Python path so imports work correctly
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest

from backends.filesystem import AbstractFileSystem, matches_glob
from backends.models import FileStat

ROOT = "/workspace"


class InMemoryFileSystem(AbstractFileSystem):
    """File system double that records every stat and read."""

    def __init__(
        self,
        files: Dict[str, Union[str, bytes]],
        root: str = ROOT,
        sizes: Optional[Dict[str, int]] = None,
        failing: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
        enumeration_delay: float = 0.0,
    ) -> None:
        self.root = root
        self.files = {
            path: content.encode("utf-8") if isinstance(content, str) else content
            for path, content in files.items()
        }
        self.sizes = sizes or {}
        self.failing = set(failing)
        self.delays = delays or {}
        self.enumeration_delay = enumeration_delay
        self.stat_calls = []
        self.read_calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def enumerate_files(
        self,
        include_glob: str,
        exclude_globs: Sequence[str],
        limit: int,
        cancellation: asyncio.Event,
    ):
        produced = 0
        for path in self.files:
            if cancellation.is_set() or produced >= limit:
                return
            await asyncio.sleep(self.enumeration_delay)
            relative = self.resolve_relative_path(path)
            if any(matches_glob(relative, pattern) for pattern in exclude_globs):
                continue
            yield path
            produced += 1

    async def stat_file(self, path: str) -> FileStat:
        self.stat_calls.append(path)
        if path in self.failing or path not in self.files:
            raise FileNotFoundError(path)
        return FileStat(size=self.sizes.get(path, len(self.files[path])))

    async def read_file(self, path: str) -> bytes:
        self.read_calls.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(path, 0))
            if path not in self.files:
                raise FileNotFoundError(path)
            return self.files[path]
        finally:
            self.in_flight -= 1

    def resolve_relative_path(self, path: str) -> str:
        prefix = self.root.rstrip("/") + "/"
        if path.startswith(prefix):
            return path[len(prefix):]
        return path

    def is_within_root(self, path: str) -> bool:
        return path.startswith(self.root.rstrip("/") + "/")


def workspace_path(relative: str) -> str:
    return f"{ROOT}/{relative}"


@pytest.fixture
def make_filesystem():
    """Build an in-memory workspace from {relative path: content}."""

    def _make(files: Dict[str, Union[str, bytes]], **kwargs) -> InMemoryFileSystem:
        absolute = {workspace_path(name): content for name, content in files.items()}
        for key in ("sizes", "delays"):
            if key in kwargs:
                kwargs[key] = {workspace_path(name): value for name, value in kwargs[key].items()}
        if "failing" in kwargs:
            kwargs["failing"] = [workspace_path(name) for name in kwargs["failing"]]
        return InMemoryFileSystem(absolute, **kwargs)

    return _make
