"""Archive statistics route."""

from __future__ import annotations

from fastapi import APIRouter, Request

from tweetcurator.web.deps import get_config, get_db, get_repo

router = APIRouter()


@router.get("/stats")
async def stats(request: Request):
    with get_db(get_config(request)) as db:
        return get_repo(db).get_stats()
