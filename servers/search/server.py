"""Workspace search MCP server."""

import asyncio
import base64
import json
import logging
import os
import signal
import uuid
from dataclasses import asdict
from typing import Any, Dict, List

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.server.dependencies import get_http_request
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from starlette.requests import Request

from backends.content_fetcher import AbstractContentFetcher, ContentFetcherFactory
from backends.models import FileSearchResult
from backends.search import AbstractSearchClient, SearchClientFactory
from core import MessageCatalog, SearchConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

load_dotenv()


class ServerConfig:
    """Server configuration."""

    def __init__(self) -> None:
        """Initialize server configuration."""
        self.sse_port = int(os.getenv("MCP_SSE_PORT", "8000"))
        self.streamable_http_port = int(os.getenv("MCP_STREAMABLE_HTTP_PORT", "8080"))

        # Langfuse configuration (optional)
        self.langfuse_enabled = os.getenv("LANGFUSE_ENABLED", "false").lower() == "true"
        if self.langfuse_enabled:
            self.langfuse_public_key = self._get_required_env("LANGFUSE_PUBLIC_KEY")
            self.langfuse_secret_key = self._get_required_env("LANGFUSE_SECRET_KEY")
            self.langfuse_host = self._get_required_env("LANGFUSE_HOST")
        else:
            self.langfuse_public_key = ""
            self.langfuse_secret_key = ""
            self.langfuse_host = ""

        self.search = SearchConfig()
        if self.search.search_backend not in ("local", "remote"):
            raise ValueError("Invalid option for SEARCH_BACKEND. Valid options are [local|remote] ")

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value


class TelemetryManager:
    """Telemetry manager for Langfuse integration."""

    def __init__(self, cfg: ServerConfig) -> None:
        """Initialize telemetry manager."""
        self.cfg = cfg
        self.enabled = cfg.langfuse_enabled
        if self.enabled:
            self._setup()

    def _setup(self) -> None:
        """Export spans to Langfuse over OTLP."""
        langfuse_auth = base64.b64encode(
            f"{self.cfg.langfuse_public_key}:{self.cfg.langfuse_secret_key}".encode()
        ).decode()

        os.environ["OTEL_EXPORTER_OTLP_HEADERS"] = f"Authorization=Basic {langfuse_auth}"
        os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = f"{self.cfg.langfuse_host}/api/public/otel"

        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(provider)

    def get_tracer(self, name: str) -> trace.Tracer:
        """Get tracer instance, a no-op one when telemetry is disabled."""
        if self.enabled:
            return trace.get_tracer(name)
        return trace.get_tracer(name, tracer_provider=TracerProvider())


config = ServerConfig()
telemetry = TelemetryManager(config)
tracer = telemetry.get_tracer("workspace-search-mcp")

search_client: AbstractSearchClient = SearchClientFactory.from_config(config.search)
logger.info(f"Using {config.search.search_backend} search backend for {config.search.search_root}")

content_fetcher: AbstractContentFetcher = ContentFetcherFactory.create_fetcher(
    config.search.search_backend,
    root=config.search.search_root,
    max_file_size=config.search.max_file_size,
    base_url=config.search.remote_url,
)

catalog = MessageCatalog()
SEARCH_GUIDE = catalog.get_text("guides.search_guide")
SEARCH_TOOL_DESCRIPTION = catalog.get_text("tools.search")
FETCH_CONTENT_DESCRIPTION = catalog.get_text("tools.fetch_content")

server = FastMCP(name="workspace-search", instructions=SEARCH_GUIDE)

_shutdown_requested = False


def signal_handler(sig: int, frame: Any) -> None:
    """Handle termination signals for graceful shutdown."""
    global _shutdown_requested
    logger.info(f"Received signal {sig}, initiating graceful shutdown...")
    _shutdown_requested = True


def _trace_id() -> str:
    """Trace id from the X-TRACE-ID header, or a fresh one outside HTTP requests."""
    try:
        request: Request = get_http_request()
        return str(request.headers.get("X-TRACE-ID", uuid.uuid4()))
    except Exception:
        return str(uuid.uuid4())


def _set_span_attributes(
    span: trace.Span,
    input_data: Dict[str, Any],
    output_data: Dict[str, Any],
    session_id: str,
) -> None:
    """Attach common Langfuse attributes to the current span."""
    if not telemetry.enabled:
        return
    try:
        span.set_attribute("langfuse.session.id", session_id)
        span.set_attribute("langfuse.tags", ["workspace-search-mcp"])
        span.set_attribute("input", json.dumps(input_data))
        span.set_attribute("output", json.dumps(output_data))
    except Exception as exc:
        logger.error(f"Error setting span attributes: {exc}")


async def run_search(query: str) -> List[FileSearchResult]:
    """Search the workspace, reporting results on the current span."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        return []

    logger.info(f"Search query: {query}")
    with tracer.start_as_current_span("WorkspaceSearchMcp:search") as span:
        try:
            results = await search_client.search(query)
        except Exception as e:
            logger.error(f"Error searching for {query!r}: {e}")
            return []

        simplified_results = [
            {
                "file_path": result.relative_path,
                "matches": [{"line": match.line, "column": match.column} for match in result.matches],
            }
            for result in results
        ]
        _set_span_attributes(span, {"query": query}, {"results": simplified_results}, _trace_id())
        return results


async def run_fetch_content(path: str) -> str:
    """Fetch a workspace file, answering errors with a message instead of raising."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        return ""

    with tracer.start_as_current_span("WorkspaceSearchMcp:fetch_content") as span:
        try:
            result = await content_fetcher.get_content(path)
        except ValueError as e:
            logger.warning(f"Error fetching content for {path}: {str(e)}")
            return f"invalid arguments: {e}"
        except Exception as e:
            logger.error(f"Unexpected error fetching content: {e}")
            return "error fetching content"

        _set_span_attributes(span, {"path": path}, {"output": result}, _trace_id())
        return result


@server.tool(description=SEARCH_TOOL_DESCRIPTION)
async def search(query: str) -> List[Dict[str, Any]]:
    results = await run_search(query)
    return [asdict(result) for result in results]


@server.tool(description=FETCH_CONTENT_DESCRIPTION)
async def fetch_content(path: str) -> str:
    return await run_fetch_content(path)


async def _run_server() -> None:
    """Run the FastMCP server with both HTTP and SSE transports."""
    tasks = [
        server.run_http_async(
            transport="streamable-http",
            host="0.0.0.0",
            path="/search/mcp",
            port=config.streamable_http_port,
        ),
        server.run_http_async(transport="sse", host="0.0.0.0", path="/search/sse", port=config.sse_port),
    ]
    await asyncio.gather(*tasks)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info("Starting Workspace Search MCP server...")
        asyncio.run(_run_server())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt (CTRL+C)")
    except Exception as exc:
        logger.error(f"Server error: {exc}")
        raise
    finally:
        logger.info("Server has shut down.")


if __name__ == "__main__":
    main()
