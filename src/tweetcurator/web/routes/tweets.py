"""Tweet listing, detail, curation and tag assignment routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from tweetcurator.search.query import list_tweets
from tweetcurator.web.deps import (
    filters_from_request,
    get_config,
    get_db,
    get_repo,
    not_found,
)

router = APIRouter()


class TweetUpdate(BaseModel):
    quality_rating: Optional[str] = None
    swipe_status: Optional[str] = None
    notes: Optional[str] = None
    is_reviewed: Optional[bool] = None


class TagAssignment(BaseModel):
    name: str = ""
    category: str = "custom"


@router.get("/tweets")
async def tweets_index(request: Request):
    """Filtered, sorted, paginated listing."""
    filters = filters_from_request(request)
    with get_db(get_config(request)) as db:
        return list_tweets(db, filters)


@router.get("/tweets/{tweet_id}")
async def tweet_detail(request: Request, tweet_id: str):
    with get_db(get_config(request)) as db:
        tweet = get_repo(db).get_tweet(tweet_id)
    if tweet is None:
        not_found()
    return tweet


@router.get("/tweets/{tweet_id}/thread")
async def tweet_thread(request: Request, tweet_id: str):
    """Replies chained below a tweet, oldest first."""
    with get_db(get_config(request)) as db:
        return get_repo(db).get_thread(tweet_id)


@router.patch("/tweets/{tweet_id}")
async def update_tweet(request: Request, tweet_id: str, update: TweetUpdate):
    """Swipe, rate, annotate or mark a tweet reviewed."""
    changes = update.model_dump(exclude_unset=True)
    with get_db(get_config(request)) as db:
        try:
            updated = get_repo(db).update_tweet(tweet_id, changes)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        not_found()
    return {"success": True}


@router.post("/tweets/{tweet_id}/tags")
async def add_tweet_tag(request: Request, tweet_id: str, assignment: TagAssignment):
    if not assignment.name.strip():
        raise HTTPException(status_code=400, detail="Tag name required")
    with get_db(get_config(request)) as db:
        try:
            added = get_repo(db).add_tag(tweet_id, assignment.name, assignment.category)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if not added:
        not_found()
    return {"success": True}


@router.delete("/tweets/{tweet_id}/tags/{tag_name}")
async def remove_tweet_tag(request: Request, tweet_id: str, tag_name: str):
    with get_db(get_config(request)) as db:
        removed = get_repo(db).remove_tag(tweet_id, tag_name)
    if not removed:
        not_found("Tag")
    return {"success": True}
