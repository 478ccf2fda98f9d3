"""Natural-language search route."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from tweetcurator.search.semantic import semantic_search
from tweetcurator.web.deps import get_config, get_db, get_llm_client

router = APIRouter()


class SemanticQuery(BaseModel):
    query: str = ""


@router.post("/semantic-search")
def semantic_search_route(request: Request, body: SemanticQuery):
    """Ask a question in plain language; Claude picks the filters.

    Sync so the model call runs in the threadpool.
    """
    if not body.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    llm_client = get_llm_client(request)
    if llm_client is None:
        raise HTTPException(status_code=503, detail="AI search is not configured")
    with get_db(get_config(request)) as db:
        return semantic_search(db, llm_client, body.query.strip())
