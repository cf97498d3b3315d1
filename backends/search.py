"""Search clients for local and remote workspaces."""

import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional

import requests
from pydantic import TypeAdapter

from backends.filesystem import AbstractFileSystem, LocalFileSystem
from backends.messages import SearchRequest
from backends.models import FileSearchResult
from backends.rpc import RpcClient
from backends.scanner import ScanEngine
from backends.selector import FileSelector
from core.config import SearchConfig
from core.options import SearchOptions

logger = logging.getLogger(__name__)

_results_adapter = TypeAdapter(List[FileSearchResult])


class AbstractSearchClient(ABC):
    """Abstract base class for search clients."""

    @abstractmethod
    async def search(self, query: str) -> List[FileSearchResult]:
        """Search the workspace.

        Args:
            query: Literal query text; an empty query yields no results

        Returns:
            One result per matching file, in scan order
        """
        pass


class LocalSearchClient(AbstractSearchClient):
    """Searches a workspace through a file system capability."""

    def __init__(
        self,
        filesystem: AbstractFileSystem,
        options: Optional[SearchOptions] = None,
        selector: Optional[FileSelector] = None,
    ) -> None:
        """Initialize local search client.

        Args:
            filesystem: File system holding the workspace
            options: Search limits, fixed for the client's lifetime
            selector: Candidate selector; built from options when omitted
        """
        self.filesystem = filesystem
        self.options = options or SearchOptions()
        self.selector = selector or FileSelector(filesystem, self.options)
        self.engine = ScanEngine(filesystem, self.options)

    async def search(self, query: str) -> List[FileSearchResult]:
        """Search using a fresh scan of the workspace."""
        if not query:
            return []

        started = time.perf_counter()
        candidates = await self.selector.select_candidates()
        results = await self.engine.scan(candidates, query)
        logger.info(
            f"Search {query!r}: {len(results)} files matched out of {len(candidates)} candidates "
            f"in {(time.perf_counter() - started) * 1000:.0f}ms"
        )
        return results


class RemoteSearchClient(AbstractSearchClient):
    """Searches through a running search front end."""

    def __init__(self, base_url: str, session_id: str = "default") -> None:
        """Initialize remote search client.

        Args:
            base_url: Front end base URL
            session_id: Session the searches are issued for
        """
        self.rpc = RpcClient(base_url)
        self.session_id = session_id

    async def search(self, query: str) -> List[FileSearchResult]:
        """Search over the RPC endpoint; transport errors yield no results."""
        if not query:
            return []

        try:
            body = await self.rpc.call_async(SearchRequest(session_id=self.session_id, text=query))
            if body.get("superseded"):
                logger.info(f"Remote search {query!r} was superseded")
                return []
            return _results_adapter.validate_python(body.get("results") or [])
        except requests.exceptions.RequestException as exc:
            logger.error(f"Remote search HTTP error: {exc}")
            return []
        except ValueError as exc:
            logger.error(f"Remote search returned an invalid response: {exc}")
            return []


class SearchClientFactory:
    """Factory for creating search clients."""

    @staticmethod
    def create_client(backend: str, **kwargs) -> AbstractSearchClient:
        """Create a search client for the given backend.

        Args:
            backend: Backend name ('local' or 'remote')
            **kwargs: Backend-specific configuration

        Returns:
            Search client instance

        Raises:
            ValueError: If backend is not supported
        """
        backend = backend.lower()
        if backend == "local":
            filesystem = kwargs.get("filesystem") or LocalFileSystem(kwargs.get("root") or ".")
            options = kwargs.get("options") or SearchOptions()
            selector_kwargs = {
                key: kwargs[key]
                for key in (
                    "exclude_patterns",
                    "binary_extensions",
                    "enumeration_limit",
                    "enumeration_timeout",
                )
                if key in kwargs
            }
            return LocalSearchClient(
                filesystem=filesystem,
                options=options,
                selector=FileSelector(filesystem, options, **selector_kwargs),
            )
        elif backend == "remote":
            return RemoteSearchClient(
                base_url=kwargs.get("base_url", ""), session_id=kwargs.get("session_id", "default")
            )
        else:
            raise ValueError(f"Unsupported backend: {backend}")

    @staticmethod
    def from_config(config: SearchConfig, **overrides) -> AbstractSearchClient:
        """Create the client described by a search configuration."""
        kwargs = {
            "root": config.search_root,
            "options": config.search_options(),
            "exclude_patterns": config.exclude_patterns,
            "binary_extensions": config.binary_extensions,
            "enumeration_limit": config.enumeration_limit,
            "enumeration_timeout": config.enumeration_timeout,
            "base_url": config.remote_url,
        }
        kwargs.update(overrides)
        return SearchClientFactory.create_client(config.search_backend, **kwargs)
