"""Tests for environment configuration, limiters and the message catalog."""

import pytest

from core.catalog import MessageCatalog
from core.config import SearchConfig
from core.constants import BINARY_EXTENSIONS, DEFAULT_MAX_RESULTS, EXCLUDE_PATTERNS, MAX_SESSIONS
from core.limiters import FileSizeLimiter, ResultLimiter

SEARCH_ENV = [
    "SEARCH_ROOT",
    "SEARCH_BACKEND",
    "SEARCH_MAX_RESULTS",
    "SEARCH_MAX_MATCHES_PER_FILE",
    "SEARCH_MAX_FILES_TO_SEARCH",
    "SEARCH_MAX_FILE_SIZE",
    "SEARCH_BATCH_SIZE",
    "SEARCH_ENUMERATION_LIMIT",
    "SEARCH_ENUMERATION_TIMEOUT_MS",
    "SEARCH_EXCLUDE_PATTERNS",
    "SEARCH_BINARY_EXTENSIONS",
    "SEARCH_DEBOUNCE_MS",
    "SEARCH_MAX_SESSIONS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in SEARCH_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestSearchConfig:
    """Tests for SearchConfig."""

    def test_defaults(self, clean_env, tmp_path):
        """Test default limits and lists."""
        clean_env.chdir(tmp_path)

        config = SearchConfig()

        assert config.search_root == str(tmp_path)
        assert config.search_backend == "local"
        assert config.max_results == DEFAULT_MAX_RESULTS
        assert config.enumeration_timeout == 1.0
        assert config.debounce_seconds == 0.075
        assert config.exclude_patterns == list(EXCLUDE_PATTERNS)
        assert config.binary_extensions == BINARY_EXTENSIONS
        assert config.max_sessions == MAX_SESSIONS

    def test_overrides(self, clean_env):
        """Test values read from the environment."""
        clean_env.setenv("SEARCH_BACKEND", "Remote")
        clean_env.setenv("SEARCH_MAX_RESULTS", "5")
        clean_env.setenv("SEARCH_BATCH_SIZE", "8")
        clean_env.setenv("SEARCH_ENUMERATION_TIMEOUT_MS", "250")
        clean_env.setenv("SEARCH_EXCLUDE_PATTERNS", "**/vendor/**, **/*.lock")
        clean_env.setenv("SEARCH_BINARY_EXTENSIONS", ".DAT,bin")
        clean_env.setenv("SEARCH_MAX_SESSIONS", "3")

        config = SearchConfig()
        options = config.search_options()

        assert config.search_backend == "remote"
        assert options.max_results == 5
        assert options.batch_size == 8
        assert config.enumeration_timeout == 0.25
        assert config.exclude_patterns[-2:] == ["**/vendor/**", "**/*.lock"]
        assert config.binary_extensions == frozenset({"dat", "bin"})
        assert config.max_sessions == 3

    @pytest.mark.parametrize("value", ["none", "Unlimited", "null"])
    def test_unbounded_limits(self, clean_env, value):
        """Test that limits can be disabled."""
        clean_env.setenv("SEARCH_MAX_FILES_TO_SEARCH", value)

        assert SearchConfig().search_options().max_files_to_search is None

    def test_empty_value_means_default(self, clean_env):
        """Test that a blank variable keeps the default."""
        clean_env.setenv("SEARCH_MAX_RESULTS", " ")

        assert SearchConfig().max_results == DEFAULT_MAX_RESULTS

    def test_invalid_integer(self, clean_env):
        """Test that a malformed integer names the variable."""
        clean_env.setenv("SEARCH_BATCH_SIZE", "lots")

        with pytest.raises(ValueError, match="SEARCH_BATCH_SIZE"):
            SearchConfig()


class TestLimiters:
    """Tests for ResultLimiter and FileSizeLimiter."""

    def test_result_limiter(self):
        """Test counting up to the limit and reset."""
        limiter = ResultLimiter(2)

        assert limiter.accept()
        assert limiter.accept()
        assert not limiter.accept()
        assert limiter.reached
        limiter.reset()
        assert not limiter.reached

    def test_unbounded_result_limiter(self):
        """Test that None never limits."""
        limiter = ResultLimiter(None)

        assert all(limiter.accept() for _ in range(1000))
        assert not limiter.reached

    def test_file_size_limiter(self):
        """Test the inclusive size bound."""
        limiter = FileSizeLimiter(10)

        assert limiter.allows(10)
        assert not limiter.allows(11)


class TestMessageCatalog:
    """Tests for MessageCatalog."""

    def test_tool_descriptions(self):
        """Test that tool descriptions exist and are stripped."""
        catalog = MessageCatalog()

        assert catalog.get_text("tools.search").startswith("Search every text file")
        assert not catalog.get_text("tools.fetch_content").endswith("\n")

    def test_result_summaries(self):
        """Test singular, plural and truncated summaries."""
        catalog = MessageCatalog()

        assert (
            catalog.render("summaries.results", match_count=1, file_count=1, truncated=False, max_results=100)
            == "1 result in 1 file"
        )
        assert (
            catalog.render("summaries.results", match_count=3, file_count=2, truncated=True, max_results=2)
            == "3 results in 2 files (showing the first 2 files)"
        )

    def test_section_and_missing_entries(self):
        """Test section scoping, defaults and missing keys."""
        catalog = MessageCatalog(section_path="summaries")

        assert catalog.get_text("empty") == "No results found"
        assert catalog.get_text("missing", default="fallback") == "fallback"
        with pytest.raises(ValueError):
            catalog.get("missing")

    def test_missing_file(self, tmp_path):
        """Test that a missing catalog file is reported."""
        with pytest.raises(FileNotFoundError):
            MessageCatalog(tmp_path / "nope.yaml")
