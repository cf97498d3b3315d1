"""Web frontend for live workspace search."""

import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Body, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from backends.content_fetcher import AbstractContentFetcher, ContentFetcherFactory
from backends.messages import SearchRequest, rpc_request_adapter
from backends.search import AbstractSearchClient, SearchClientFactory
from core.catalog import MessageCatalog
from core.config import SearchConfig
from frontend.dispatcher import SearchDispatcher
from frontend.session import SessionRegistry

load_dotenv()

logger = logging.getLogger(__name__)

# Templates
templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

# Static files
static_dir = Path(__file__).parent / "static"


def create_app(
    config: Optional[SearchConfig] = None,
    client: Optional[AbstractSearchClient] = None,
    content_fetcher: Optional[AbstractContentFetcher] = None,
) -> FastAPI:
    """Build the web application around one search client.

    Args:
        config: Search configuration; read from the environment when omitted
        client: Search client; built from the configuration when omitted
        content_fetcher: Preview source; built from the configuration when omitted
    """
    config = config or SearchConfig()
    client = client or SearchClientFactory.from_config(config)
    content_fetcher = content_fetcher or ContentFetcherFactory.create_fetcher(
        config.search_backend,
        root=config.search_root,
        max_file_size=config.max_file_size,
        base_url=config.remote_url,
    )

    app = FastAPI(title="Workspace Search")
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    registry = SessionRegistry(
        client, debounce_seconds=config.debounce_seconds, max_sessions=config.max_sessions
    )
    dispatcher = SearchDispatcher(
        registry=registry,
        content_fetcher=content_fetcher,
        catalog=MessageCatalog(),
        max_results=config.max_results,
    )
    app.state.config = config
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        """Main page."""
        return templates.TemplateResponse(
            request,
            "index.html",
            {"session_id": str(uuid.uuid4()), "search_root": config.search_root},
        )

    @app.post("/api/rpc")
    async def rpc(payload: Dict[str, Any] = Body(...)):
        """Dispatch one typed request."""
        try:
            message = rpc_request_adapter.validate_python(payload)
        except ValidationError as e:
            return JSONResponse(
                status_code=422,
                content={"success": False, "error": e.errors(include_url=False, include_context=False)},
            )
        response = await dispatcher.dispatch(message)
        return response.model_dump()

    @app.get("/api/search")
    async def search(q: str = "", session_id: str = "api"):
        """Search and return results with a summary line."""
        response = await dispatcher.dispatch(SearchRequest(session_id=session_id, text=q))
        return {
            "success": not response.superseded,
            "query": response.query,
            "summary": response.summary,
            "results": response.model_dump()["results"],
        }

    logger.info(f"Serving workspace search for {config.search_root} ({config.search_backend} backend)")
    return app


app = create_app()


def main() -> None:
    """Main entry point."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("FRONTEND_PORT", "3000"))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
