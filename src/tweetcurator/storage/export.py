"""JSON and CSV export of curated tweets."""

from __future__ import annotations

import csv
import io
import json
import sqlite3
from pathlib import Path

from tweetcurator.search.filters import TweetFilters, compose
from tweetcurator.search.query import QueryError
from tweetcurator.storage.database import Database

EXPORT_COLUMNS = [
    "id",
    "full_text",
    "created_at",
    "favorite_count",
    "retweet_count",
    "tweet_type",
    "length_category",
    "quality_rating",
    "swipe_status",
    "tweet_url",
]

EXPORT_FORMATS = ("json", "csv")


def export_rows(db: Database, filters: TweetFilters | None = None) -> list[dict]:
    """Every tweet matching the filters, newest first, without pagination.

    Thread continuations are kept unless `exclude_threads` is set.
    """
    if filters is None:
        filters = TweetFilters()

    composed = compose(filters, hide_thread_continuations=False)
    columns = ", ".join(f"t.{c}" for c in EXPORT_COLUMNS)
    try:
        rows = db.conn.execute(
            f"SELECT {columns}\n{composed.body()}\nORDER BY t.created_at DESC, t.id DESC",
            composed.params,
        ).fetchall()
    except sqlite3.Error as e:
        raise QueryError(str(e)) from e
    return [dict(r) for r in rows]


def to_json(rows: list[dict]) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False)


def to_csv(rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({c: row.get(c) for c in EXPORT_COLUMNS})
    return buffer.getvalue()


def export_to_file(
    db: Database,
    path: Path,
    fmt: str = "json",
    filters: TweetFilters | None = None,
) -> int:
    """Write matching tweets to `path`. Returns the number exported."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {fmt}")

    rows = export_rows(db, filters)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = to_json(rows) if fmt == "json" else to_csv(rows)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return len(rows)
