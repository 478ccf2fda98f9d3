"""Swipe queue routes."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from tweetcurator.config import SWIPE_QUEUE_DEFAULT_LIMIT
from tweetcurator.search.query import swipe_queue
from tweetcurator.web.deps import get_config, get_db, get_repo

router = APIRouter()


@router.get("/swipe/queue")
async def queue(
    request: Request,
    limit: str = Query(str(SWIPE_QUEUE_DEFAULT_LIMIT)),
    length: str = Query(""),
    tag: str = Query(""),
):
    """Next unswiped tweets and how many remain."""
    with get_db(get_config(request)) as db:
        return swipe_queue(db, limit=limit, length=length, tag=tag)


@router.get("/swipe/today")
async def today(request: Request):
    with get_db(get_config(request)) as db:
        return get_repo(db).get_today_session()
