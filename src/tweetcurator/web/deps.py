"""Dependency helpers for web routes."""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import HTTPException, Request

from tweetcurator.config import CuratorConfig
from tweetcurator.search.filters import TweetFilters
from tweetcurator.storage.database import Database
from tweetcurator.storage.repository import Repository


def get_config(request: Request) -> CuratorConfig:
    return request.app.state.config


def get_llm_client(request: Request):
    """The app's LLM client, or None when none is configured."""
    return request.app.state.llm_client


@contextmanager
def get_db(config: CuratorConfig):
    """Open the archive database, ensuring it's closed."""
    with Database(config.db_path) as db:
        yield db


def get_repo(db: Database) -> Repository:
    return Repository(db)


def filters_from_request(request: Request) -> TweetFilters:
    """Listing options straight from the query string."""
    return TweetFilters.from_params(request.query_params)


def not_found(what: str = "Tweet"):
    raise HTTPException(status_code=404, detail=f"{what} not found")
