"""Tests for the MCP server tool helpers."""

from unittest.mock import AsyncMock, Mock

import pytest

import servers.search.server as search_server
from backends.content_fetcher import LocalContentFetcher
from backends.search import LocalSearchClient
from conftest import ROOT


@pytest.fixture
def workspace(make_filesystem, monkeypatch):
    fs = make_filesystem({"a.txt": "hello world\n", "notes.md": "nothing here\n"})
    monkeypatch.setattr(search_server, "search_client", LocalSearchClient(fs))
    monkeypatch.setattr(search_server, "content_fetcher", LocalContentFetcher(fs, ROOT))
    return fs


class TestServerTools:
    """Tests for run_search and run_fetch_content."""

    @pytest.mark.asyncio
    async def test_run_search(self, workspace):
        """Test that the search helper returns engine results."""
        results = await search_server.run_search("HELLO")

        assert [r.relative_path for r in results] == ["a.txt"]
        assert results[0].matches[0].text == "hello world"

    @pytest.mark.asyncio
    async def test_search_errors_yield_no_results(self, monkeypatch):
        """Test that an unexpected client failure is logged, not raised."""
        failing = Mock()
        failing.search = AsyncMock(side_effect=RuntimeError("index unavailable"))
        monkeypatch.setattr(search_server, "search_client", failing)

        assert await search_server.run_search("hello") == []

    @pytest.mark.asyncio
    async def test_fetch_content(self, workspace):
        """Test fetching by relative path."""
        assert await search_server.run_fetch_content("notes.md") == "nothing here\n"

    @pytest.mark.asyncio
    async def test_fetch_content_errors_become_messages(self, workspace):
        """Test that invalid paths are answered, not raised."""
        message = await search_server.run_fetch_content("../secret.txt")

        assert message.startswith("invalid arguments:")

    @pytest.mark.asyncio
    async def test_requests_declined_during_shutdown(self, workspace, monkeypatch):
        """Test that no new work starts after a termination signal."""
        monkeypatch.setattr(search_server, "_shutdown_requested", True)

        assert await search_server.run_search("hello") == []
        assert workspace.read_calls == []

    def test_guide_and_descriptions_loaded(self):
        """Test that server texts come from the message catalog."""
        assert "case-insensitive" in search_server.SEARCH_GUIDE
        assert search_server.SEARCH_TOOL_DESCRIPTION
        assert search_server.FETCH_CONTENT_DESCRIPTION
