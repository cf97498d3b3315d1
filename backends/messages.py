"""Typed request/response messages between a search surface and the engine."""

import uuid
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from backends.models import FileSearchResult


def _new_request_id() -> str:
    return str(uuid.uuid4())


class _Request(BaseModel):
    request_id: str = Field(default_factory=_new_request_id, description="echoed on the response")
    session_id: str = Field(default="default", description="search panel the request belongs to")


class SearchRequest(_Request):
    """Run a search for the given text."""

    kind: Literal["search"] = "search"
    text: str = ""


class FetchFileContentRequest(_Request):
    """Fetch the content of a file for preview."""

    kind: Literal["fetch_file_content"] = "fetch_file_content"
    file_path: str


class OpenFileRequest(_Request):
    """Open a file at a position in the host editor."""

    kind: Literal["open_file"] = "open_file"
    file_path: str
    line: int = Field(default=1, ge=1)
    column: int = Field(default=0, ge=0)


class CloseRequest(_Request):
    """Close the search panel and drop its session."""

    kind: Literal["close"] = "close"


RpcRequest = Annotated[
    Union[SearchRequest, FetchFileContentRequest, OpenFileRequest, CloseRequest],
    Field(discriminator="kind"),
]

rpc_request_adapter: TypeAdapter = TypeAdapter(RpcRequest)


class _Response(BaseModel):
    request_id: str
    session_id: str


class SearchResponse(_Response):
    """Results of a search request."""

    kind: Literal["search_results"] = "search_results"
    query: str
    token: int = Field(..., description="session sequence number of this search")
    superseded: bool = Field(default=False, description="a newer search replaced this one")
    results: List[FileSearchResult] = Field(default_factory=list)
    summary: str = ""


class FileContentResponse(_Response):
    """Content of a previewed file."""

    kind: Literal["file_content"] = "file_content"
    file_path: str
    content: Optional[str] = None
    error: Optional[str] = None


class OpenFileResponse(_Response):
    """Outcome of an open-file request."""

    kind: Literal["file_opened"] = "file_opened"
    file_path: str
    line: int
    column: int
    uri: str


class CloseResponse(_Response):
    """Acknowledges a closed session."""

    kind: Literal["closed"] = "closed"


RpcResponse = Union[SearchResponse, FileContentResponse, OpenFileResponse, CloseResponse]
