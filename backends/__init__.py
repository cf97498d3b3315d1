"""Backend implementations for file selection, scanning and content fetching."""

from .content_fetcher import (
    AbstractContentFetcher,
    ContentFetcherFactory,
    LocalContentFetcher,
    RemoteContentFetcher,
)
from .filesystem import AbstractFileSystem, LocalFileSystem
from .messages import (
    CloseRequest,
    FetchFileContentRequest,
    OpenFileRequest,
    SearchRequest,
    rpc_request_adapter,
)
from .models import CandidateFile, FileSearchResult, FileStat, SearchMatch
from .scanner import ScanEngine, find_matches
from .search import (
    AbstractSearchClient,
    LocalSearchClient,
    RemoteSearchClient,
    SearchClientFactory,
)
from .selector import FileSelector

__all__ = [
    "AbstractFileSystem",
    "LocalFileSystem",
    "FileSelector",
    "ScanEngine",
    "find_matches",
    "AbstractSearchClient",
    "SearchClientFactory",
    "LocalSearchClient",
    "RemoteSearchClient",
    "AbstractContentFetcher",
    "ContentFetcherFactory",
    "LocalContentFetcher",
    "RemoteContentFetcher",
    "CandidateFile",
    "FileStat",
    "FileSearchResult",
    "SearchMatch",
    "SearchRequest",
    "FetchFileContentRequest",
    "OpenFileRequest",
    "CloseRequest",
    "rpc_request_adapter",
]
