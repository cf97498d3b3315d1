"""Dispatches typed panel requests to sessions, the search client and the content fetcher."""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from backends.content_fetcher import AbstractContentFetcher
from backends.messages import (
    CloseRequest,
    CloseResponse,
    FetchFileContentRequest,
    FileContentResponse,
    OpenFileRequest,
    OpenFileResponse,
    RpcResponse,
    SearchRequest,
    SearchResponse,
)
from backends.models import FileSearchResult
from core.catalog import MessageCatalog
from frontend.session import SessionRegistry

logger = logging.getLogger(__name__)

FileOpener = Callable[[str, int, int], str]


def default_file_opener(file_path: str, line: int, column: int) -> str:
    """Describe the file position as a URI; hosts with an editor inject their own opener."""
    uri = f"{Path(os.path.abspath(file_path)).as_uri()}#L{line}"
    logger.info(f"Open requested for {file_path}:{line}:{column}")
    return uri


class SearchDispatcher:
    """Routes each request kind to its handler and builds the typed response."""

    def __init__(
        self,
        registry: SessionRegistry,
        content_fetcher: AbstractContentFetcher,
        catalog: MessageCatalog,
        max_results: Optional[int] = None,
        opener: FileOpener = default_file_opener,
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Sessions of the open panels
            content_fetcher: Source of file previews
            catalog: Texts for result summaries
            max_results: Result cap, used to report truncation
            opener: Callback opening a file position in the host
        """
        self.registry = registry
        self.content_fetcher = content_fetcher
        self.catalog = catalog
        self.max_results = max_results
        self.opener = opener

    async def dispatch(self, request) -> RpcResponse:
        """Handle one request.

        Raises:
            TypeError: If the request kind is unknown
        """
        if isinstance(request, SearchRequest):
            return await self._search(request)
        if isinstance(request, FetchFileContentRequest):
            return await self._fetch_file_content(request)
        if isinstance(request, OpenFileRequest):
            return self._open_file(request)
        if isinstance(request, CloseRequest):
            return self._close(request)
        raise TypeError(f"Unsupported request: {type(request).__name__}")

    def summarize(self, results: List[FileSearchResult]) -> str:
        """One-line summary such as '3 results in 2 files'."""
        if not results:
            return self.catalog.get_text("summaries.empty", default="No results found")
        truncated = self.max_results is not None and len(results) >= self.max_results
        return self.catalog.render(
            "summaries.results",
            match_count=sum(len(result.matches) for result in results),
            file_count=len(results),
            truncated=truncated,
            max_results=self.max_results,
        )

    async def _search(self, request: SearchRequest) -> SearchResponse:
        session = self.registry.get(request.session_id)
        token, results = await session.search(request.text)
        if results is None:
            return SearchResponse(
                request_id=request.request_id,
                session_id=request.session_id,
                query=token.query,
                token=token.sequence,
                superseded=True,
            )
        return SearchResponse(
            request_id=request.request_id,
            session_id=request.session_id,
            query=token.query,
            token=token.sequence,
            results=results,
            summary=self.summarize(results),
        )

    async def _fetch_file_content(self, request: FetchFileContentRequest) -> FileContentResponse:
        session = self.registry.get(request.session_id)
        content = session.cached_content(request.file_path)
        if content is None:
            try:
                content = await self.content_fetcher.get_content(request.file_path)
            except ValueError as e:
                logger.warning(f"Error fetching content for {request.file_path}: {e}")
                return FileContentResponse(
                    request_id=request.request_id,
                    session_id=request.session_id,
                    file_path=request.file_path,
                    error=str(e),
                )
            session.cache_content(request.file_path, content)
        return FileContentResponse(
            request_id=request.request_id,
            session_id=request.session_id,
            file_path=request.file_path,
            content=content,
        )

    def _open_file(self, request: OpenFileRequest) -> OpenFileResponse:
        uri = self.opener(request.file_path, request.line, request.column)
        return OpenFileResponse(
            request_id=request.request_id,
            session_id=request.session_id,
            file_path=request.file_path,
            line=request.line,
            column=request.column,
            uri=uri,
        )

    def _close(self, request: CloseRequest) -> CloseResponse:
        self.registry.close(request.session_id)
        return CloseResponse(request_id=request.request_id, session_id=request.session_id)
