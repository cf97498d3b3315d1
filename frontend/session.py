"""Per-panel live search state."""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from backends.models import FileSearchResult, SearchMatch
from backends.search import AbstractSearchClient
from core.constants import DEBOUNCE_SECONDS, MAX_SESSIONS

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_CACHE_SIZE = 32


class Debouncer:
    """Runs the latest submitted call after a quiet period.

    A newer ``run`` cancels the previous one, whether it is still waiting out
    the delay or already running; the superseded ``run`` returns None.
    """

    def __init__(self, delay: float = DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self._task: Optional[asyncio.Future] = None

    async def run(self, factory: Callable[[], Awaitable[T]]) -> Optional[T]:
        self.cancel()
        task = asyncio.ensure_future(self._delayed(factory))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._task is not task:
                return None
            raise
        finally:
            if self._task is task:
                self._task = None

    def cancel(self) -> None:
        """Cancel the pending call, if any."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _delayed(self, factory: Callable[[], Awaitable[T]]) -> T:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return await factory()


@dataclass(frozen=True)
class SearchToken:
    """Identifies one submitted search within a session."""

    session_id: str
    sequence: int
    query: str


class SearchSession:
    """State of one search panel: query, results, selection and previews."""

    def __init__(
        self,
        session_id: str,
        client: AbstractSearchClient,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize search session.

        Args:
            session_id: Identifier of the panel
            client: Search client used for every query of the panel
            debounce_seconds: Quiet period before a submitted query runs
        """
        self.session_id = session_id
        self.client = client
        self.current_query = ""
        self.results: List[FileSearchResult] = []
        self.matches: List[SearchMatch] = []
        self.selected_index = -1
        self.closed = False
        self._sequence = 0
        self._debouncer = Debouncer(debounce_seconds)
        self._content_cache: "OrderedDict[str, str]" = OrderedDict()

    def next_token(self, query: str) -> SearchToken:
        """Mint the token of a new search; older tokens stop being current."""
        self._sequence += 1
        self.current_query = query
        return SearchToken(session_id=self.session_id, sequence=self._sequence, query=query)

    def is_current(self, token: SearchToken) -> bool:
        return token.sequence == self._sequence

    async def search(self, query: str) -> Tuple[SearchToken, Optional[List[FileSearchResult]]]:
        """Submit a query; returns its token and results, or None when superseded."""
        query = query.strip()
        token = self.next_token(query)
        if not query:
            self._debouncer.cancel()
            self.apply_results(token, [])
            return token, []

        results = await self._debouncer.run(lambda: self.client.search(query))
        if results is None or not self.apply_results(token, results):
            logger.debug(f"Discarding superseded results for {query!r} in session {self.session_id}")
            return token, None
        return token, results

    def apply_results(self, token: SearchToken, results: List[FileSearchResult]) -> bool:
        """Store results if their token is still the latest one.

        Returns:
            True if the results were applied, False if they are stale
        """
        if not self.is_current(token):
            return False
        self.results = list(results)
        self.matches = [match for result in self.results for match in result.matches]
        self.selected_index = 0 if self.matches else -1
        return True

    @property
    def selected_match(self) -> Optional[SearchMatch]:
        if 0 <= self.selected_index < len(self.matches):
            return self.matches[self.selected_index]
        return None

    def select(self, index: int) -> Optional[SearchMatch]:
        """Select a match by its position in the flattened match list; out of range is ignored."""
        if 0 <= index < len(self.matches):
            self.selected_index = index
        return self.selected_match

    def move_selection(self, delta: int) -> Optional[SearchMatch]:
        """Move the selection by ``delta``, clamped to the match list."""
        if not self.matches:
            return None
        return self.select(min(max(self.selected_index + delta, 0), len(self.matches) - 1))

    def cached_content(self, file_path: str) -> Optional[str]:
        content = self._content_cache.get(file_path)
        if content is not None:
            self._content_cache.move_to_end(file_path)
        return content

    def cache_content(self, file_path: str, content: str) -> None:
        self._content_cache[file_path] = content
        self._content_cache.move_to_end(file_path)
        while len(self._content_cache) > CONTENT_CACHE_SIZE:
            self._content_cache.popitem(last=False)

    def close(self) -> None:
        """Cancel pending work and drop cached state."""
        self.closed = True
        self._debouncer.cancel()
        self._content_cache.clear()
        self.results = []
        self.matches = []
        self.selected_index = -1


class SessionRegistry:
    """Holds the sessions of the open search panels.

    At most ``max_sessions`` are kept; opening one more closes the session
    used least recently.
    """

    def __init__(
        self,
        client: AbstractSearchClient,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self.client = client
        self.debounce_seconds = debounce_seconds
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, SearchSession]" = OrderedDict()

    def get(self, session_id: str) -> SearchSession:
        """Get the session for ``session_id``, creating it on first use."""
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
            return session

        session = SearchSession(session_id, self.client, self.debounce_seconds)
        self._sessions[session_id] = session
        logger.info(f"Opened search session {session_id}")
        while len(self._sessions) > self.max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            evicted.close()
            logger.info(f"Evicted idle search session {evicted_id}")
        return session

    def close(self, session_id: str) -> bool:
        """Close and forget a session; returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Closed search session {session_id}")
        return True

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
