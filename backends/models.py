"""Backend models for file selection and search results."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class FileStat:
    """File metadata returned by a file system."""

    size: int


@dataclass(frozen=True)
class CandidateFile:
    """A file selected for content scanning."""

    path: str

    @property
    def extension(self) -> str:
        """Lowercase text after the final dot of the file name, or ''."""
        name = self.path.replace("\\", "/").rsplit("/", 1)[-1]
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].lower()


@dataclass(frozen=True)
class SearchMatch:
    """One occurrence of the query within one line of a file."""

    file_path: str
    relative_path: str
    line: int
    column: int
    preview_column: int
    text: str


@dataclass(frozen=True)
class FileSearchResult:
    """All matches found in a single file."""

    file_path: str
    relative_path: str
    matches: List[SearchMatch] = field(default_factory=list)
