"""FastAPI application factory for the TweetCurator JSON API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tweetcurator.config import CuratorConfig, load_config
from tweetcurator.search.query import QueryError

logger = logging.getLogger(__name__)


def create_app(config: CuratorConfig | None = None, llm_client=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without `llm_client`, semantic search and LLM tagging answer 503.
    """
    from tweetcurator.web.routes.admin import LLMTagJob

    app = FastAPI(title="TweetCurator")
    app.state.config = config or load_config()
    app.state.llm_client = llm_client
    app.state.llm_tag_job = LLMTagJob()

    @app.exception_handler(QueryError)
    async def query_error_handler(request: Request, exc: QueryError):
        logger.error(f"Query failed on {request.url.path}: {exc}")
        return JSONResponse({"error": str(exc)}, status_code=500)

    from tweetcurator.web.routes import register_routes

    register_routes(app)

    return app
