"""SQLite database schema and connection management."""

from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1


def _casefold(value):
    """SQL casefold(): Unicode-aware, unlike SQLite's ASCII-only lower()."""
    return value.casefold() if isinstance(value, str) else value


SCHEMA_SQL = """
-- Archived tweets: historical fields from the export plus curation state
CREATE TABLE IF NOT EXISTS tweets (
    id                   TEXT PRIMARY KEY,
    full_text            TEXT,
    created_at           TEXT,
    favorite_count       INTEGER DEFAULT 0,
    retweet_count        INTEGER DEFAULT 0,
    has_media            INTEGER DEFAULT 0,
    media_type           TEXT,
    media_url            TEXT,
    lang                 TEXT,
    source               TEXT,
    in_reply_to_user     TEXT,
    in_reply_to_tweet_id TEXT,
    quoted_tweet_id      TEXT,
    tweet_url            TEXT,
    char_count           INTEGER,
    length_category      TEXT CHECK(length_category IN ('short', 'medium', 'long')),
    tweet_type           TEXT CHECK(tweet_type IN ('text_only', 'media', 'quote', 'reply', 'retweet', 'thread')),
    quality_rating       TEXT CHECK(quality_rating IN ('high', 'medium', 'low')),
    ai_quality_score     REAL,
    swipe_status         TEXT CHECK(swipe_status IN ('dislike', 'like', 'superlike', 'review_later')),
    is_reviewed          INTEGER DEFAULT 0,
    reviewed_at          TEXT,
    notes                TEXT
);

-- Tags
CREATE TABLE IF NOT EXISTS tags (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    name     TEXT NOT NULL UNIQUE,
    category TEXT NOT NULL CHECK(category IN ('topic', 'pattern', 'use', 'custom')),
    color    TEXT
);

CREATE TABLE IF NOT EXISTS tweet_tags (
    tweet_id   TEXT NOT NULL REFERENCES tweets(id) ON DELETE CASCADE,
    tag_id     INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    source     TEXT DEFAULT 'manual' CHECK(source IN ('ai', 'manual')),
    created_at TEXT DEFAULT (datetime('now')),
    PRIMARY KEY (tweet_id, tag_id)
);

-- Daily swipe tallies
CREATE TABLE IF NOT EXISTS swipe_sessions (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    session_date  TEXT NOT NULL UNIQUE DEFAULT (date('now')),
    tweets_swiped INTEGER DEFAULT 0,
    likes         INTEGER DEFAULT 0,
    superlikes    INTEGER DEFAULT 0,
    dislikes      INTEGER DEFAULT 0,
    review_later  INTEGER DEFAULT 0
);

-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_tweets_created_at ON tweets(created_at);
CREATE INDEX IF NOT EXISTS idx_tweets_favorite_count ON tweets(favorite_count);
CREATE INDEX IF NOT EXISTS idx_tweets_quality_rating ON tweets(quality_rating);
CREATE INDEX IF NOT EXISTS idx_tweets_ai_quality_score ON tweets(ai_quality_score);
CREATE INDEX IF NOT EXISTS idx_tweets_swipe_status ON tweets(swipe_status);
CREATE INDEX IF NOT EXISTS idx_tweets_length_category ON tweets(length_category);
CREATE INDEX IF NOT EXISTS idx_tweets_tweet_type ON tweets(tweet_type);
CREATE INDEX IF NOT EXISTS idx_tweets_reply_to ON tweets(in_reply_to_tweet_id);
CREATE INDEX IF NOT EXISTS idx_tweet_tags_tweet ON tweet_tags(tweet_id);
CREATE INDEX IF NOT EXISTS idx_tweet_tags_tag ON tweet_tags(tag_id);
"""

# Seed vocabulary: (name, category, color)
DEFAULT_TAGS = [
    ("art", "topic", "#8B4513"),
    ("aesthetics", "topic", "#CD853F"),
    ("romance", "topic", "#722F37"),
    ("friendship", "topic", "#DAA520"),
    ("religion", "topic", "#4A3728"),
    ("spirituality", "topic", "#6B4423"),
    ("nyc", "topic", "#2F4F4F"),
    ("psychospiritual-practices", "topic", "#556B2F"),
    ("psychospiritual-theory", "topic", "#6B8E23"),
    ("history", "topic", "#8B7355"),
    ("media-commentary", "topic", "#A0522D"),
    ("life-hacks", "topic", "#B8860B"),
    ("technology", "topic", "#4682B4"),
    ("performing-arts", "topic", "#800020"),
    ("community", "topic", "#8B6914"),
    ("woo-wizardry", "topic", "#483D8B"),
    ("philosophy", "topic", "#704214"),
    ("psychology", "topic", "#8B5A2B"),
    ("politics", "topic", "#654321"),
    ("culture", "topic", "#5D3A1A"),
    ("productivity", "topic", "#6B4226"),
    ("creativity", "topic", "#996515"),
    ("health", "topic", "#228B22"),
    ("career", "topic", "#8B7765"),
    ("education", "topic", "#5C4033"),
    ("science", "topic", "#2E8B57"),
    ("economics", "topic", "#8B4726"),
    ("depression", "topic", "#4A5568"),
    ("strategy", "topic", "#744210"),
    ("sociology", "topic", "#7B341E"),
    ("entities", "topic", "#553C9A"),
    ("hot-take", "pattern", "#DC143C"),
    ("theory", "pattern", "#9932CC"),
    ("observation", "pattern", "#CD853F"),
    ("question", "pattern", "#B8860B"),
    ("advice", "pattern", "#DAA520"),
    ("story", "pattern", "#8B4513"),
    ("joke", "pattern", "#D2691E"),
    ("rant", "pattern", "#800000"),
    ("announcement", "pattern", "#6B4423"),
    ("promotion", "pattern", "#C53030"),
    ("insight", "pattern", "#556B2F"),
    ("thread", "pattern", "#2B6CB0"),
    ("engagement-bait", "pattern", "#E53E3E"),
    ("dated-reference", "pattern", "#718096"),
    ("book", "use", "#1A365D"),
    ("blog-post", "use", "#2C5282"),
    ("short-post", "use", "#4299E1"),
]


class Database:
    """SQLite database connection manager."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.create_function("casefold", 1, _casefold, deterministic=True)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def initialize(self):
        """Create all tables if they don't exist and seed default tags."""
        self.conn.executescript(SCHEMA_SQL)
        self.conn.executemany(
            "INSERT OR IGNORE INTO tags (name, category, color) VALUES (?, ?, ?)",
            DEFAULT_TAGS,
        )
        row = self.conn.execute(
            "SELECT version FROM schema_version LIMIT 1"
        ).fetchone()
        if row is None:
            self.conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
        self.conn.commit()

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
