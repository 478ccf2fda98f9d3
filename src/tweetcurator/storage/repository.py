"""CRUD operations for the TweetCurator database."""

from __future__ import annotations

import logging
from datetime import date, datetime

from tweetcurator.storage.database import Database
from tweetcurator.storage.models import (
    QUALITY_RATINGS,
    SWIPE_QUALITY,
    SWIPE_STATUSES,
    TAG_CATEGORIES,
    TAG_SOURCES,
    Tweet,
)

logger = logging.getLogger(__name__)

QUOTED_JOIN = "LEFT JOIN tweets quoted ON t.quoted_tweet_id = quoted.id"
QUOTED_COLUMNS = (
    "quoted.full_text AS quoted_text, "
    "quoted.media_url AS quoted_media, "
    "quoted.id AS quoted_id"
)

DEFAULT_TAG_COLOR = "#666"

# swipe_status -> swipe_sessions counter column
SESSION_COLUMNS = {
    "like": "likes",
    "superlike": "superlikes",
    "dislike": "dislikes",
    "review_later": "review_later",
}

EMPTY_SESSION = {
    "tweets_swiped": 0,
    "likes": 0,
    "superlikes": 0,
    "dislikes": 0,
    "review_later": 0,
}


def attach_tags(db: Database, rows: list[dict]) -> list[dict]:
    """Add a `tags` list ({id, name, category, color}) to each tweet dict."""
    if not rows:
        return rows

    ids = [r["id"] for r in rows]
    placeholders = ",".join("?" for _ in ids)
    tag_rows = db.conn.execute(
        f"""SELECT tt.tweet_id, tags.id, tags.name, tags.category,
                   COALESCE(tags.color, ?) AS color
            FROM tweet_tags tt
            JOIN tags ON tags.id = tt.tag_id
            WHERE tt.tweet_id IN ({placeholders})
            ORDER BY tags.category, tags.name""",
        [DEFAULT_TAG_COLOR, *ids],
    ).fetchall()

    by_tweet: dict[str, dict[int, dict]] = {tweet_id: {} for tweet_id in ids}
    for tr in tag_rows:
        by_tweet[tr["tweet_id"]].setdefault(tr["id"], {
            "id": tr["id"],
            "name": tr["name"],
            "category": tr["category"],
            "color": tr["color"],
        })

    for row in rows:
        row["tags"] = list(by_tweet[row["id"]].values())
    return rows


def _today() -> str:
    return date.today().isoformat()


class Repository:
    """Database operations for TweetCurator."""

    def __init__(self, db: Database):
        self.db = db

    # ── Tweets ─────────────────────────────────────────────────────

    def tweet_exists(self, tweet_id: str) -> bool:
        row = self.db.conn.execute(
            "SELECT 1 FROM tweets WHERE id = ?", (tweet_id,)
        ).fetchone()
        return row is not None

    def get_tweet_count(self) -> int:
        row = self.db.conn.execute("SELECT COUNT(*) FROM tweets").fetchone()
        return row[0]

    def upsert_tweets(self, tweets: list[Tweet]) -> int:
        """Insert tweets, refreshing archive fields of ones already stored.

        Curation fields (swipe, rating, notes, review state) and tags are
        left untouched on re-import.
        """
        for tweet in tweets:
            self.db.conn.execute(
                """INSERT INTO tweets
                   (id, full_text, created_at, favorite_count, retweet_count,
                    has_media, media_type, media_url, lang, source,
                    in_reply_to_user, in_reply_to_tweet_id, quoted_tweet_id,
                    tweet_url, char_count, length_category, tweet_type)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     full_text = excluded.full_text,
                     created_at = excluded.created_at,
                     favorite_count = excluded.favorite_count,
                     retweet_count = excluded.retweet_count,
                     has_media = excluded.has_media,
                     media_type = excluded.media_type,
                     media_url = excluded.media_url,
                     lang = excluded.lang,
                     source = excluded.source,
                     in_reply_to_user = excluded.in_reply_to_user,
                     in_reply_to_tweet_id = excluded.in_reply_to_tweet_id,
                     quoted_tweet_id = excluded.quoted_tweet_id,
                     tweet_url = excluded.tweet_url,
                     char_count = excluded.char_count,
                     length_category = excluded.length_category,
                     tweet_type = excluded.tweet_type""",
                (
                    tweet.id,
                    tweet.full_text,
                    tweet.created_at,
                    tweet.favorite_count,
                    tweet.retweet_count,
                    int(tweet.has_media),
                    tweet.media_type,
                    tweet.media_url,
                    tweet.lang,
                    tweet.source,
                    tweet.in_reply_to_user,
                    tweet.in_reply_to_tweet_id,
                    tweet.quoted_tweet_id,
                    tweet.tweet_url,
                    tweet.char_count,
                    tweet.length_category,
                    tweet.tweet_type,
                ),
            )
        self.db.conn.commit()
        return len(tweets)

    def get_tweet(self, tweet_id: str) -> dict | None:
        """A single tweet with tags and quoted tweet fields, or None."""
        row = self.db.conn.execute(
            f"""SELECT t.*, {QUOTED_COLUMNS}
                FROM tweets t
                {QUOTED_JOIN}
                WHERE t.id = ?""",
            (tweet_id,),
        ).fetchone()
        if row is None:
            return None
        return attach_tags(self.db, [dict(row)])[0]

    def get_thread(self, tweet_id: str) -> list[dict]:
        """All replies descending from a tweet, oldest first."""
        rows = self.db.conn.execute(
            """WITH RECURSIVE thread_chain AS (
                   SELECT * FROM tweets WHERE in_reply_to_tweet_id = ?
                   UNION
                   SELECT t.* FROM tweets t
                   JOIN thread_chain tc ON t.in_reply_to_tweet_id = tc.id
               )
               SELECT * FROM thread_chain ORDER BY created_at ASC""",
            (tweet_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    def update_tweet(self, tweet_id: str, changes: dict) -> bool:
        """Apply curation changes to a tweet.

        Recognised keys: quality_rating, swipe_status, notes, is_reviewed.
        A swipe marks the tweet reviewed, derives its quality rating and
        counts toward today's session. Returns False if the tweet is unknown.
        """
        updates: list[str] = []
        params: list = []

        if "quality_rating" in changes:
            rating = changes["quality_rating"]
            if rating is not None and rating not in QUALITY_RATINGS:
                raise ValueError(f"Invalid quality rating: {rating}")
            updates.append("quality_rating = ?")
            params.append(rating)

        swipe = changes.get("swipe_status")
        if "swipe_status" in changes:
            if swipe is not None and swipe not in SWIPE_STATUSES:
                raise ValueError(f"Invalid swipe status: {swipe}")
            updates.append("swipe_status = ?")
            params.append(swipe)
            if swipe is not None:
                updates.append("is_reviewed = 1")
                updates.append("reviewed_at = ?")
                params.append(datetime.now().isoformat())
                if swipe in SWIPE_QUALITY and "quality_rating" not in changes:
                    updates.append("quality_rating = ?")
                    params.append(SWIPE_QUALITY[swipe])

        if "notes" in changes:
            updates.append("notes = ?")
            params.append(changes["notes"])

        if "is_reviewed" in changes and swipe is None:
            reviewed = bool(changes["is_reviewed"])
            updates.append("is_reviewed = ?")
            params.append(int(reviewed))
            if reviewed:
                updates.append("reviewed_at = ?")
                params.append(datetime.now().isoformat())

        if not updates:
            raise ValueError("No valid fields to update")

        params.append(tweet_id)
        cursor = self.db.conn.execute(
            f"UPDATE tweets SET {', '.join(updates)} WHERE id = ?", params
        )
        if cursor.rowcount and swipe is not None:
            self._record_swipe(swipe)
        self.db.conn.commit()
        return cursor.rowcount > 0

    # ── Swipe Sessions ─────────────────────────────────────────────

    def _record_swipe(self, swipe_status: str):
        column = SESSION_COLUMNS[swipe_status]
        today = _today()
        self.db.conn.execute(
            "INSERT OR IGNORE INTO swipe_sessions (session_date) VALUES (?)",
            (today,),
        )
        self.db.conn.execute(
            f"""UPDATE swipe_sessions
                SET tweets_swiped = tweets_swiped + 1, {column} = {column} + 1
                WHERE session_date = ?""",
            (today,),
        )

    def get_today_session(self) -> dict:
        row = self.db.conn.execute(
            """SELECT tweets_swiped, likes, superlikes, dislikes, review_later
               FROM swipe_sessions WHERE session_date = ?""",
            (_today(),),
        ).fetchone()
        return dict(row) if row else dict(EMPTY_SESSION)

    # ── Tags ───────────────────────────────────────────────────────

    def ensure_tag(self, name: str, category: str = "custom", color: str | None = None) -> int:
        """Return the id of a tag, creating it on first use."""
        name = name.strip().lower()
        if category not in TAG_CATEGORIES:
            raise ValueError(f"Invalid tag category: {category}")
        self.db.conn.execute(
            "INSERT OR IGNORE INTO tags (name, category, color) VALUES (?, ?, ?)",
            (name, category, color),
        )
        row = self.db.conn.execute(
            "SELECT id FROM tags WHERE name = ?", (name,)
        ).fetchone()
        return row[0]

    def add_tag(
        self,
        tweet_id: str,
        name: str,
        category: str = "custom",
        source: str = "manual",
        commit: bool = True,
    ) -> bool:
        """Attach a tag to a tweet. Returns False if the tweet is unknown."""
        if source not in TAG_SOURCES:
            raise ValueError(f"Invalid tag source: {source}")
        if not name or not name.strip():
            raise ValueError("Tag name required")
        if not self.tweet_exists(tweet_id):
            return False
        tag_id = self.ensure_tag(name, category)
        self.db.conn.execute(
            """INSERT OR IGNORE INTO tweet_tags (tweet_id, tag_id, source)
               VALUES (?, ?, ?)""",
            (tweet_id, tag_id, source),
        )
        if commit:
            self.db.conn.commit()
        return True

    def remove_tag(self, tweet_id: str, name: str) -> bool:
        """Detach a tag. Returns False if no such tag exists."""
        row = self.db.conn.execute(
            "SELECT id FROM tags WHERE name = ?", (name.strip().lower(),)
        ).fetchone()
        if row is None:
            return False
        self.db.conn.execute(
            "DELETE FROM tweet_tags WHERE tweet_id = ? AND tag_id = ?",
            (tweet_id, row[0]),
        )
        self.db.conn.commit()
        return True

    def clear_tags(self, source: str | None = None, category: str | None = None) -> int:
        """Delete tag assignments by source and/or tag category."""
        clauses = []
        params: list = []
        if source:
            clauses.append("source = ?")
            params.append(source)
        if category:
            clauses.append("tag_id IN (SELECT id FROM tags WHERE category = ?)")
            params.append(category)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = self.db.conn.execute(f"DELETE FROM tweet_tags {where}", params)
        self.db.conn.commit()
        logger.info(f"Removed {cursor.rowcount} tag assignments")
        return cursor.rowcount

    def list_tags(self) -> dict[str, list[dict]]:
        """All tags with usage counts, grouped by category."""
        rows = self.db.conn.execute(
            """SELECT t.id, t.name, t.category, t.color,
                      COUNT(tt.tweet_id) AS tweet_count
               FROM tags t
               LEFT JOIN tweet_tags tt ON t.id = tt.tag_id
               GROUP BY t.id
               ORDER BY t.category, t.name"""
        ).fetchall()
        grouped: dict[str, list[dict]] = {cat: [] for cat in TAG_CATEGORIES}
        for r in rows:
            grouped.setdefault(r["category"], []).append(dict(r))
        return grouped

    def search_tags(self, query: str, limit: int = 20) -> list[dict]:
        """Tags whose name contains the query, for autocomplete."""
        rows = self.db.conn.execute(
            """SELECT id, name, category, color FROM tags
               WHERE name LIKE ?
               ORDER BY category, name
               LIMIT ?""",
            (f"%{query.strip().lower()}%", limit),
        ).fetchall()
        return [dict(r) for r in rows]

    # ── Stats ──────────────────────────────────────────────────────

    def get_stats(self) -> dict:
        """Archive breakdown, top tags and today's swipe session."""
        row = self.db.conn.execute(
            """SELECT
                COUNT(*) AS total,
                SUM(CASE WHEN tweet_type = 'text_only' THEN 1 ELSE 0 END) AS text_only,
                SUM(CASE WHEN tweet_type = 'reply' THEN 1 ELSE 0 END) AS replies,
                SUM(CASE WHEN tweet_type = 'retweet' THEN 1 ELSE 0 END) AS retweets,
                SUM(CASE WHEN tweet_type = 'media' THEN 1 ELSE 0 END) AS with_media,
                SUM(CASE WHEN tweet_type = 'quote' THEN 1 ELSE 0 END) AS quotes,
                SUM(CASE WHEN tweet_type = 'thread' THEN 1 ELSE 0 END) AS threads,
                SUM(CASE WHEN length_category = 'short' THEN 1 ELSE 0 END) AS short,
                SUM(CASE WHEN length_category = 'medium' THEN 1 ELSE 0 END) AS medium,
                SUM(CASE WHEN length_category = 'long' THEN 1 ELSE 0 END) AS long_tweets,
                SUM(CASE WHEN quality_rating = 'high' THEN 1 ELSE 0 END) AS high_quality,
                SUM(CASE WHEN quality_rating = 'medium' THEN 1 ELSE 0 END) AS medium_quality,
                SUM(CASE WHEN quality_rating = 'low' THEN 1 ELSE 0 END) AS low_quality,
                SUM(CASE WHEN swipe_status = 'like' THEN 1 ELSE 0 END) AS liked,
                SUM(CASE WHEN swipe_status = 'superlike' THEN 1 ELSE 0 END) AS superliked,
                SUM(CASE WHEN swipe_status = 'dislike' THEN 1 ELSE 0 END) AS disliked,
                SUM(CASE WHEN swipe_status = 'review_later' THEN 1 ELSE 0 END) AS review_later,
                SUM(CASE WHEN swipe_status IS NOT NULL THEN 1 ELSE 0 END) AS reviewed
            FROM tweets"""
        ).fetchone()
        # SUM over zero rows is NULL
        stats = {k: (row[k] or 0) for k in row.keys()}

        top_tags = self.db.conn.execute(
            """SELECT tags.name, tags.category, tags.color, COUNT(*) AS count
               FROM tweet_tags
               JOIN tags ON tags.id = tweet_tags.tag_id
               GROUP BY tags.id
               ORDER BY count DESC, tags.name
               LIMIT 20"""
        ).fetchall()

        return {
            "stats": stats,
            "topTags": [dict(r) for r in top_tags],
            "todayStats": self.get_today_session(),
        }
