"""Search filter builder for TweetCurator.

`TweetFilters` is the request-scoped set of listing options. `compose()` turns
it into a `ComposedFilter`: the joins, WHERE clauses and optional HAVING
condition that both the count query and the page query are built from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from tweetcurator.config import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT,
    SORT_COLUMNS,
)
from tweetcurator.search.predicates import text_predicate

# type= values that select thread starters structurally instead of by tweet_type
THREAD_START_TYPES = ("thread", "thread-start")

UNREVIEWED = "unreviewed"

THREAD_PARENT_JOIN = (
    "LEFT JOIN tweets thread_parent ON t.in_reply_to_tweet_id = thread_parent.id"
)


# Largest value SQLite can bind as an INTEGER
SQLITE_MAX_INT = 2**63 - 1


def parse_positive_int(value, default: int) -> int:
    """Parse a positive integer, falling back to default on anything else.

    Values SQLite cannot bind count as malformed too.
    """
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if 1 <= number <= SQLITE_MAX_INT else default


def parse_bool(value, default: bool) -> bool:
    """Only the literal "true" (any case) is true; absent means default."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def parse_reviewed(value) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


def parse_csv(value) -> list[str]:
    """Split a comma-separated value, dropping blanks and duplicates."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    else:
        parts = str(value).split(",")
    result: list[str] = []
    for part in parts:
        part = part.strip()
        if part and part not in result:
            result.append(part)
    return result


def parse_tags(value) -> list[str]:
    """Tag names are stored lowercased."""
    tags: list[str] = []
    for name in parse_csv(value):
        name = name.lower()
        if name not in tags:
            tags.append(name)
    return tags


@dataclass
class TweetFilters:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE
    search: str = ""
    tweet_type: str = ""
    length: str = ""
    swipe: str = ""
    tags: list[str] = field(default_factory=list)
    reviewed: Optional[bool] = None
    quality: str = ""
    exclude_retweets: bool = True
    exclude_replies: bool = True
    exclude_threads: bool = False
    sort: str = DEFAULT_SORT
    order: str = "desc"

    @classmethod
    def from_params(cls, params: Mapping[str, object]) -> TweetFilters:
        """Build filters from request-style options, never raising.

        Keys follow the public API: page, limit, search, type, length, swipe,
        tag, reviewed, quality, excludeRetweets, excludeReplies,
        excludeThreads, sort, order.
        """
        page = parse_positive_int(params.get("page"), DEFAULT_PAGE)
        limit = parse_positive_int(params.get("limit"), DEFAULT_PAGE_SIZE)
        if (page - 1) * limit > SQLITE_MAX_INT:
            page = DEFAULT_PAGE
        return cls(
            page=page,
            limit=limit,
            search=str(params.get("search") or ""),
            tweet_type=str(params.get("type") or "").strip(),
            length=str(params.get("length") or "").strip(),
            swipe=str(params.get("swipe") or "").strip(),
            tags=parse_tags(params.get("tag")),
            reviewed=parse_reviewed(params.get("reviewed")),
            quality=str(params.get("quality") or "").strip(),
            exclude_retweets=parse_bool(params.get("excludeRetweets"), True),
            exclude_replies=parse_bool(params.get("excludeReplies"), True),
            exclude_threads=parse_bool(params.get("excludeThreads"), False),
            sort=str(params.get("sort") or DEFAULT_SORT),
            order=str(params.get("order") or "desc"),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def sort_column(self) -> str:
        return self.sort if self.sort in SORT_COLUMNS else DEFAULT_SORT

    @property
    def sort_direction(self) -> str:
        return "ASC" if str(self.order).lower() == "asc" else "DESC"


@dataclass
class ComposedFilter:
    """Joins, WHERE clauses and HAVING condition shared by count and page queries."""

    joins: list[str] = field(default_factory=list)
    join_params: list = field(default_factory=list)
    where: list[str] = field(default_factory=list)
    where_params: list = field(default_factory=list)
    having: str = ""
    having_params: list = field(default_factory=list)
    order_by: str = f"t.{DEFAULT_SORT} DESC, t.id DESC"

    @property
    def params(self) -> list:
        """Parameters in the order they appear in `body()`."""
        return [*self.join_params, *self.where_params, *self.having_params]

    def body(self, extra_joins: tuple[str, ...] = ()) -> str:
        """FROM ... WHERE ... GROUP BY t.id [HAVING ...].

        `extra_joins` must not take parameters; they are placed after the
        filter joins so `params` stays valid.
        """
        parts = ["FROM tweets t", *self.joins, *extra_joins]
        if self.where:
            parts.append("WHERE " + " AND ".join(self.where))
        parts.append("GROUP BY t.id")
        if self.having:
            parts.append("HAVING " + self.having)
        return "\n".join(parts)

    def add_tag_filter(self, tags: list[str]):
        """Inner-join the requested tags; several tags must all be present."""
        if not tags:
            return
        placeholders = ",".join("?" for _ in tags)
        self.joins.append(
            "INNER JOIN tweet_tags tt_filter ON t.id = tt_filter.tweet_id\n"
            "INNER JOIN tags tag_filter ON tag_filter.id = tt_filter.tag_id "
            f"AND tag_filter.name IN ({placeholders})"
        )
        self.join_params.extend(tags)
        if len(tags) > 1:
            self.having = "COUNT(DISTINCT tag_filter.name) = ?"
            self.having_params = [len(tags)]


def compose(
    filters: TweetFilters, hide_thread_continuations: bool = True
) -> ComposedFilter:
    """Compose the listing predicate for a filter set.

    With `hide_thread_continuations`, a thread tweet whose parent exists in
    the archive is hidden; thread starters (no stored parent) stay visible.
    """
    composed = ComposedFilter()

    if hide_thread_continuations:
        composed.joins.append(THREAD_PARENT_JOIN)
        composed.where.append("(t.tweet_type != 'thread' OR thread_parent.id IS NULL)")

    composed.add_tag_filter(filters.tags)

    clause, params = text_predicate(filters.search)
    if clause:
        composed.where.append(clause)
        composed.where_params.extend(params)

    if filters.tweet_type:
        if filters.tweet_type in THREAD_START_TYPES:
            composed.where.append(
                "EXISTS (SELECT 1 FROM tweets child WHERE child.in_reply_to_tweet_id = t.id)"
            )
        else:
            composed.where.append("t.tweet_type = ?")
            composed.where_params.append(filters.tweet_type)

    if filters.length:
        composed.where.append("t.length_category = ?")
        composed.where_params.append(filters.length)

    if filters.swipe:
        if filters.swipe == UNREVIEWED:
            composed.where.append("t.swipe_status IS NULL")
        else:
            composed.where.append("t.swipe_status = ?")
            composed.where_params.append(filters.swipe)

    if filters.quality:
        composed.where.append("t.quality_rating = ?")
        composed.where_params.append(filters.quality)

    if filters.reviewed is True:
        composed.where.append("t.is_reviewed = 1")
    elif filters.reviewed is False:
        composed.where.append("t.is_reviewed = 0")

    if filters.exclude_retweets:
        composed.where.append("t.tweet_type != 'retweet'")

    if filters.exclude_replies:
        composed.where.append("t.tweet_type != 'reply'")

    if filters.exclude_threads:
        # Interior thread tweets only; starters have no in_reply_to id
        composed.where.append("(t.tweet_type != 'thread' OR t.in_reply_to_tweet_id IS NULL)")

    direction = filters.sort_direction
    composed.order_by = f"t.{filters.sort_column} {direction}, t.id {direction}"
    return composed


def compose_queue(length: str = "", tags=None) -> ComposedFilter:
    """Predicate for the swipe queue: unswiped original tweets only."""
    composed = ComposedFilter(
        where=[
            "t.swipe_status IS NULL",
            "t.tweet_type NOT IN ('retweet', 'reply', 'thread')",
        ],
        order_by="t.favorite_count DESC, t.created_at DESC, t.id DESC",
    )

    composed.add_tag_filter(parse_tags(tags))

    lengths = parse_csv(length)
    if lengths:
        placeholders = ",".join("?" for _ in lengths)
        composed.where.append(f"t.length_category IN ({placeholders})")
        composed.where_params.extend(lengths)

    return composed
