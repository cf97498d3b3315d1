"""Content fetcher backends for local and remote workspaces."""

import os
from abc import ABC, abstractmethod

from backends.filesystem import AbstractFileSystem, LocalFileSystem
from backends.messages import FetchFileContentRequest
from backends.rpc import RpcClient
from core.constants import DEFAULT_MAX_FILE_SIZE
from core.limiters import FileSizeLimiter


class AbstractContentFetcher(ABC):
    """Abstract base class for content fetchers."""

    @abstractmethod
    async def get_content(self, path: str) -> str:
        """Get file content for preview.

        Args:
            path: Absolute path, or a path relative to the workspace root

        Returns:
            Decoded file content

        Raises:
            ValueError: If the path is outside the workspace, too large or unreadable
        """
        pass


class LocalContentFetcher(AbstractContentFetcher):
    """Reads previews through a file system capability."""

    def __init__(self, filesystem: AbstractFileSystem, root: str, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> None:
        """Initialize local content fetcher.

        Args:
            filesystem: File system to read from
            root: Workspace root used to resolve relative paths
            max_file_size: Largest file, in bytes, that is returned
        """
        self.filesystem = filesystem
        self.root = os.path.abspath(root)
        self._size_limiter = FileSizeLimiter(max_file_size)

    async def get_content(self, path: str) -> str:
        """Get content from the local workspace."""
        absolute = path if os.path.isabs(path) else os.path.join(self.root, path)
        absolute = os.path.abspath(absolute)
        if not self.filesystem.is_within_root(absolute):
            raise ValueError(f"{path} is outside the workspace")

        try:
            stat = await self.filesystem.stat_file(absolute)
            if not self._size_limiter.allows(stat.size):
                raise ValueError(
                    f"{path} is {stat.size} bytes, larger than {self._size_limiter.max_bytes}"
                )
            data = await self.filesystem.read_file(absolute)
        except OSError as exc:
            raise ValueError(f"{path} cannot be read: {exc.strerror or exc}")

        return data.decode("utf-8", errors="replace")


class RemoteContentFetcher(AbstractContentFetcher):
    """Fetches previews from a running search front end."""

    def __init__(self, base_url: str, session_id: str = "default") -> None:
        """Initialize remote content fetcher.

        Args:
            base_url: Front end base URL
            session_id: Session the requests are issued for
        """
        self.rpc = RpcClient(base_url)
        self.session_id = session_id

    async def get_content(self, path: str) -> str:
        """Get content over the RPC endpoint."""
        body = await self.rpc.call_async(
            FetchFileContentRequest(session_id=self.session_id, file_path=path)
        )
        if body.get("error"):
            raise ValueError(body["error"])
        return body.get("content") or ""


class ContentFetcherFactory:
    """Factory for creating content fetchers."""

    @staticmethod
    def create_fetcher(backend: str, **kwargs) -> AbstractContentFetcher:
        """Create a content fetcher for the given backend.

        Args:
            backend: Backend name ('local' or 'remote')
            **kwargs: Backend-specific configuration

        Returns:
            Content fetcher instance

        Raises:
            ValueError: If backend is not supported
        """
        backend = backend.lower()
        if backend == "local":
            root = kwargs.get("root") or os.getcwd()
            return LocalContentFetcher(
                filesystem=kwargs.get("filesystem") or LocalFileSystem(root),
                root=root,
                max_file_size=kwargs.get("max_file_size", DEFAULT_MAX_FILE_SIZE),
            )
        elif backend == "remote":
            return RemoteContentFetcher(
                base_url=kwargs.get("base_url", ""), session_id=kwargs.get("session_id", "default")
            )
        else:
            raise ValueError(f"Unsupported backend: {backend}")
