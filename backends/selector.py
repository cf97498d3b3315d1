"""Candidate file selection for workspace search."""

import asyncio
import logging
from typing import AbstractSet, List, Optional, Sequence

from backends.filesystem import AbstractFileSystem
from backends.models import CandidateFile
from core.constants import (
    BINARY_EXTENSIONS,
    ENUMERATION_LIMIT,
    ENUMERATION_TIMEOUT_SECONDS,
    EXCLUDE_PATTERNS,
    INCLUDE_GLOB,
)
from core.options import SearchOptions

logger = logging.getLogger(__name__)


class FileSelector:
    """Produces the list of searchable files under the workspace root."""

    def __init__(
        self,
        filesystem: AbstractFileSystem,
        options: Optional[SearchOptions] = None,
        exclude_patterns: Sequence[str] = EXCLUDE_PATTERNS,
        binary_extensions: AbstractSet[str] = BINARY_EXTENSIONS,
        enumeration_limit: int = ENUMERATION_LIMIT,
        enumeration_timeout: float = ENUMERATION_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize file selector.

        Args:
            filesystem: File system to enumerate
            options: Search options; only max_files_to_search is used here
            exclude_patterns: Globs excluding files and directories
            binary_extensions: Lowercase extensions, without dot, never scanned
            enumeration_limit: Maximum number of raw paths enumerated
            enumeration_timeout: Seconds before enumeration is cancelled
        """
        self.filesystem = filesystem
        self.options = options or SearchOptions()
        self.exclude_patterns = list(exclude_patterns)
        self.binary_extensions = frozenset(ext.lower() for ext in binary_extensions)
        self.enumeration_limit = enumeration_limit
        self.enumeration_timeout = enumeration_timeout

    async def select_candidates(self) -> List[CandidateFile]:
        """Enumerate, filter and cap the candidate files.

        Enumeration problems never raise: a timeout keeps the paths collected
        so far and a failure keeps whatever was listed before it.

        Returns:
            Candidate files in enumeration order
        """
        paths: List[str] = []
        cancellation = asyncio.Event()
        try:
            await asyncio.wait_for(
                self._collect(paths, cancellation), timeout=self.enumeration_timeout
            )
        except asyncio.TimeoutError:
            cancellation.set()
            logger.warning(
                f"File enumeration exceeded {self.enumeration_timeout:.3f}s, "
                f"continuing with {len(paths)} files"
            )
        except Exception as exc:
            logger.error(f"File enumeration failed after {len(paths)} files: {exc}")

        candidates = [CandidateFile(path=path) for path in paths]
        candidates = [candidate for candidate in candidates if not self.is_binary(candidate)]
        if self.options.max_files_to_search is not None:
            candidates = candidates[: self.options.max_files_to_search]

        logger.debug(f"Selected {len(candidates)} of {len(paths)} enumerated files")
        return candidates

    def is_binary(self, candidate: CandidateFile) -> bool:
        """True if the candidate's extension is in the binary set."""
        extension = candidate.extension
        return bool(extension) and extension in self.binary_extensions

    async def _collect(self, paths: List[str], cancellation: asyncio.Event) -> None:
        async for path in self.filesystem.enumerate_files(
            INCLUDE_GLOB, self.exclude_patterns, self.enumeration_limit, cancellation
        ):
            paths.append(path)
