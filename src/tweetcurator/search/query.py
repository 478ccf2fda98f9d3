"""Paginated tweet listing and swipe queue queries."""

from __future__ import annotations

import logging
import math
import sqlite3

from tweetcurator.config import SWIPE_QUEUE_DEFAULT_LIMIT
from tweetcurator.search.filters import (
    ComposedFilter,
    TweetFilters,
    compose,
    compose_queue,
    parse_positive_int,
)
from tweetcurator.storage.database import Database
from tweetcurator.storage.repository import QUOTED_COLUMNS, QUOTED_JOIN, attach_tags

logger = logging.getLogger(__name__)


class QueryError(Exception):
    """A listing query failed in the storage layer."""


def count_matches(db: Database, composed: ComposedFilter) -> int:
    """Number of distinct tweets passing WHERE and HAVING."""
    sql = f"SELECT COUNT(*) FROM (SELECT t.id {composed.body()})"
    return db.conn.execute(sql, composed.params).fetchone()[0]


def fetch_page(
    db: Database, composed: ComposedFilter, limit: int, offset: int = 0
) -> list[dict]:
    """Rows for one page, decorated with tags and quoted tweet fields."""
    sql = (
        f"SELECT t.*, {QUOTED_COLUMNS}\n"
        f"{composed.body((QUOTED_JOIN,))}\n"
        f"ORDER BY {composed.order_by}\n"
        "LIMIT ? OFFSET ?"
    )
    rows = db.conn.execute(sql, [*composed.params, limit, offset]).fetchall()
    return attach_tags(db, [dict(r) for r in rows])


def list_tweets(db: Database, filters: TweetFilters | None = None) -> dict:
    """Filtered, sorted, paginated listing.

    Returns {"tweets": [...], "pagination": {page, limit, total, totalPages}}.
    """
    if filters is None:
        filters = TweetFilters()

    composed = compose(filters)
    logger.debug(f"Listing tweets: {composed.body()} {composed.params}")

    try:
        total = count_matches(db, composed)
        tweets = fetch_page(db, composed, filters.limit, filters.offset)
    except sqlite3.Error as e:
        raise QueryError(str(e)) from e

    return {
        "tweets": tweets,
        "pagination": {
            "page": filters.page,
            "limit": filters.limit,
            "total": total,
            "totalPages": math.ceil(total / filters.limit),
        },
    }


def swipe_queue(
    db: Database,
    limit=SWIPE_QUEUE_DEFAULT_LIMIT,
    length: str = "",
    tag: str = "",
) -> dict:
    """Next unswiped tweets, most-liked first, and how many remain."""
    limit = parse_positive_int(limit, SWIPE_QUEUE_DEFAULT_LIMIT)
    composed = compose_queue(length, tag)

    try:
        tweets = fetch_page(db, composed, limit)
        remaining = count_matches(db, composed)
    except sqlite3.Error as e:
        raise QueryError(str(e)) from e

    return {"tweets": tweets, "remaining": remaining}
