"""Search options shared by the selector, the scan engine and the clients."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES_TO_SEARCH,
    DEFAULT_MAX_MATCHES_PER_FILE,
    DEFAULT_MAX_RESULTS,
)


class SearchOptions(BaseModel):
    """Limits applied to a single search.

    The optional bounds accept ``None`` to mean "unbounded". Instances are
    frozen: a service builds its options once and reads them for its lifetime.
    """

    model_config = ConfigDict(frozen=True)

    max_results: Optional[int] = Field(
        default=DEFAULT_MAX_RESULTS, ge=1, description="distinct matching files retained"
    )
    max_matches_per_file: Optional[int] = Field(
        default=DEFAULT_MAX_MATCHES_PER_FILE, ge=1, description="matches kept per file"
    )
    max_files_to_search: Optional[int] = Field(
        default=DEFAULT_MAX_FILES_TO_SEARCH, ge=1, description="candidate files considered"
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE, ge=0, description="bytes; larger files are skipped"
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE, ge=1, description="files scanned concurrently per wave"
    )
