"""Batched content scanning for workspace search."""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from backends.filesystem import AbstractFileSystem
from backends.models import CandidateFile, FileSearchResult, SearchMatch
from core.limiters import FileSizeLimiter, ResultLimiter
from core.options import SearchOptions

logger = logging.getLogger(__name__)


def find_matches(
    file_path: str,
    relative_path: str,
    text: str,
    query_lower: str,
    max_matches: Optional[int] = None,
) -> List[SearchMatch]:
    """Find every non-overlapping occurrence of a lowercased query, line by line.

    Args:
        file_path: Absolute path recorded on each match
        relative_path: Display path recorded on each match
        text: Decoded file content
        query_lower: Lowercased literal query
        max_matches: Stop after this many matches, even mid-line

    Returns:
        Matches in line order, then column order
    """
    if not query_lower:
        return []

    limiter = ResultLimiter(max_matches)
    matches: List[SearchMatch] = []
    for number, line in enumerate(text.split("\n"), start=1):
        line_lower = line.lower()
        column = line_lower.find(query_lower)
        if column < 0:
            continue

        preview = line.strip()
        indent = len(line) - len(line.lstrip())
        while column >= 0:
            if not limiter.accept():
                return matches
            matches.append(
                SearchMatch(
                    file_path=file_path,
                    relative_path=relative_path,
                    line=number,
                    column=column,
                    preview_column=max(column - indent, 0),
                    text=preview,
                )
            )
            column = line_lower.find(query_lower, column + len(query_lower))
        if limiter.reached:
            break
    return matches


class ScanEngine:
    """Scans candidate files in sequential waves of concurrent reads."""

    def __init__(self, filesystem: AbstractFileSystem, options: Optional[SearchOptions] = None) -> None:
        """Initialize scan engine.

        Args:
            filesystem: File system used to stat and read candidates
            options: Search limits
        """
        self.filesystem = filesystem
        self.options = options or SearchOptions()
        self._size_limiter = FileSizeLimiter(self.options.max_file_size)

    async def scan(self, candidates: Sequence[CandidateFile], query: str) -> List[FileSearchResult]:
        """Scan candidates for a literal, case-insensitive query.

        Waves of ``batch_size`` files run one after another; the files of a
        wave are read concurrently and merged in candidate order once the
        whole wave is done. No wave starts after ``max_results`` files matched.

        Args:
            candidates: Files to scan, in result order
            query: Literal query text

        Returns:
            One result per matching file, in candidate order
        """
        if not query:
            return []

        query_lower = query.lower()
        batch_size = self.options.batch_size
        limiter = ResultLimiter(self.options.max_results)
        aggregate: Dict[str, FileSearchResult] = {}
        unique = self._unique(candidates)

        for start in range(0, len(unique), batch_size):
            if limiter.reached:
                logger.debug(f"Result limit reached, {len(unique) - start} files left unscanned")
                break
            batch = unique[start : start + batch_size]
            wave = await asyncio.gather(
                *(self._scan_file(candidate, query_lower) for candidate in batch)
            )
            for result in wave:
                if result is None or result.file_path in aggregate:
                    continue
                if not limiter.accept():
                    break
                aggregate[result.file_path] = result

        return list(aggregate.values())

    async def _scan_file(self, candidate: CandidateFile, query_lower: str) -> Optional[FileSearchResult]:
        """Scan one file; any failure skips it."""
        try:
            stat = await self.filesystem.stat_file(candidate.path)
            if not self._size_limiter.allows(stat.size):
                return None
            data = await self.filesystem.read_file(candidate.path)
        except Exception as exc:
            logger.debug(f"Skipping {candidate.path}: {exc}")
            return None

        text = data.decode("utf-8", errors="replace")
        if query_lower not in text.lower():
            return None

        matches = find_matches(
            candidate.path,
            self._relative_path(candidate.path),
            text,
            query_lower,
            self.options.max_matches_per_file,
        )
        if not matches:
            return None
        return FileSearchResult(
            file_path=candidate.path,
            relative_path=matches[0].relative_path,
            matches=matches,
        )

    def _relative_path(self, path: str) -> str:
        try:
            return self.filesystem.resolve_relative_path(path)
        except Exception as exc:
            logger.debug(f"Cannot resolve relative path for {path}: {exc}")
            return path

    @staticmethod
    def _unique(candidates: Sequence[CandidateFile]) -> List[CandidateFile]:
        seen = set()
        unique = []
        for candidate in candidates:
            if candidate.path in seen:
                continue
            seen.add(candidate.path)
            unique.append(candidate)
        return unique
