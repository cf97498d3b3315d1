"""Configuration for workspace search components."""

import os
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

from core.constants import (
    BINARY_EXTENSIONS,
    DEBOUNCE_SECONDS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES_TO_SEARCH,
    DEFAULT_MAX_MATCHES_PER_FILE,
    DEFAULT_MAX_RESULTS,
    ENUMERATION_LIMIT,
    ENUMERATION_TIMEOUT_SECONDS,
    EXCLUDE_PATTERNS,
    MAX_SESSIONS,
)
from core.options import SearchOptions

load_dotenv()

_UNBOUNDED = {"none", "null", "unlimited"}


class SearchConfig:
    """Configuration for search settings."""

    def __init__(self) -> None:
        """Initialize search configuration from environment variables."""
        self.search_root = os.path.abspath(os.getenv("SEARCH_ROOT") or os.getcwd())
        self.search_backend = os.getenv("SEARCH_BACKEND", "local").lower()
        self.remote_url = os.getenv("SEARCH_REMOTE_URL", "http://localhost:3000")

        # Search limits
        self.max_results = self._get_optional_int("SEARCH_MAX_RESULTS", DEFAULT_MAX_RESULTS)
        self.max_matches_per_file = self._get_optional_int(
            "SEARCH_MAX_MATCHES_PER_FILE", DEFAULT_MAX_MATCHES_PER_FILE
        )
        self.max_files_to_search = self._get_optional_int(
            "SEARCH_MAX_FILES_TO_SEARCH", DEFAULT_MAX_FILES_TO_SEARCH
        )
        self.max_file_size = self._get_int("SEARCH_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)
        self.batch_size = self._get_int("SEARCH_BATCH_SIZE", DEFAULT_BATCH_SIZE)

        # Enumeration guard
        self.enumeration_limit = self._get_int("SEARCH_ENUMERATION_LIMIT", ENUMERATION_LIMIT)
        self.enumeration_timeout = (
            self._get_int("SEARCH_ENUMERATION_TIMEOUT_MS", int(ENUMERATION_TIMEOUT_SECONDS * 1000))
            / 1000.0
        )

        self.exclude_patterns = list(EXCLUDE_PATTERNS) + self._get_list("SEARCH_EXCLUDE_PATTERNS")
        binary_override = self._get_list("SEARCH_BINARY_EXTENSIONS")
        self.binary_extensions: FrozenSet[str] = (
            frozenset(ext.lstrip(".").lower() for ext in binary_override)
            if binary_override
            else BINARY_EXTENSIONS
        )

        self.debounce_seconds = self._get_int("SEARCH_DEBOUNCE_MS", int(DEBOUNCE_SECONDS * 1000)) / 1000.0
        self.max_sessions = self._get_int("SEARCH_MAX_SESSIONS", MAX_SESSIONS)

    def search_options(self) -> SearchOptions:
        """Build the immutable search options for a service instance."""
        return SearchOptions(
            max_results=self.max_results,
            max_matches_per_file=self.max_matches_per_file,
            max_files_to_search=self.max_files_to_search,
            max_file_size=self.max_file_size,
            batch_size=self.batch_size,
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get an integer environment variable or raise descriptive error."""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")

    @staticmethod
    def _get_optional_int(key: str, default: Optional[int]) -> Optional[int]:
        """Get an integer environment variable where 'none' disables the limit."""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        if value.strip().lower() in _UNBOUNDED:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValueError(
                f"Environment variable {key} must be an integer or 'none', got {value!r}"
            )

    @staticmethod
    def _get_list(key: str) -> List[str]:
        """Get a comma-separated environment variable as a list."""
        return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]
