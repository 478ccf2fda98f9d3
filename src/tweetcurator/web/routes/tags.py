"""Tag vocabulary routes."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from tweetcurator.web.deps import get_config, get_db, get_repo

router = APIRouter()


@router.get("/tags")
async def tags_index(request: Request):
    """All tags with usage counts, grouped by category."""
    with get_db(get_config(request)) as db:
        return get_repo(db).list_tags()


@router.get("/tags/search")
async def tags_search(request: Request, q: str = Query("")):
    """Autocomplete lookup by substring."""
    if not q.strip():
        return []
    with get_db(get_config(request)) as db:
        return get_repo(db).search_tags(q)
