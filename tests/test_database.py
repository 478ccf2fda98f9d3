"""Tests for tweetcurator.storage.database."""

from __future__ import annotations

import sqlite3

import pytest

from tweetcurator.storage.database import DEFAULT_TAGS, SCHEMA_VERSION, Database


class TestDatabase:
    def test_context_manager_creates_tables(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            tables = db.conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            ).fetchall()
            table_names = {r[0] for r in tables}
            assert {"tweets", "tags", "tweet_tags", "swipe_sessions", "schema_version"} <= table_names

    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "deep" / "nested" / "test.db"
        with Database(db_path):
            assert db_path.parent.is_dir()

    def test_wal_mode_enabled(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            assert db.conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_foreign_keys_enabled(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            assert db.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_casefold_function_registered(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            row = db.conn.execute("SELECT casefold(?), casefold(NULL)", ("ÉCOLE Straße",)).fetchone()
            assert tuple(row) == ("école strasse", None)

    def test_default_tags_seeded(self, tmp_db):
        count = tmp_db.conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0]
        assert count == len(DEFAULT_TAGS)
        row = tmp_db.conn.execute(
            "SELECT category, color FROM tags WHERE name = 'hot-take'"
        ).fetchone()
        assert row["category"] == "pattern"
        assert row["color"].startswith("#")

    def test_initialize_idempotent(self, tmp_db):
        tmp_db.initialize()
        tmp_db.initialize()
        assert tmp_db.conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0] == len(DEFAULT_TAGS)
        versions = tmp_db.conn.execute("SELECT version FROM schema_version").fetchall()
        assert [r[0] for r in versions] == [SCHEMA_VERSION]

    def test_close_and_reopen(self, tmp_path):
        db_path = tmp_path / "test.db"
        with Database(db_path) as db:
            db.conn.execute("INSERT INTO tweets (id, full_text) VALUES ('1', 'persisted')")
            db.conn.commit()
        with Database(db_path) as db:
            row = db.conn.execute("SELECT full_text FROM tweets WHERE id = '1'").fetchone()
            assert row["full_text"] == "persisted"


class TestConstraints:
    def test_tweet_type_checked(self, tmp_db):
        with pytest.raises(sqlite3.IntegrityError):
            tmp_db.conn.execute(
                "INSERT INTO tweets (id, full_text, tweet_type) VALUES ('1', 'x', 'poll')"
            )

    def test_swipe_status_checked(self, tmp_db):
        with pytest.raises(sqlite3.IntegrityError):
            tmp_db.conn.execute(
                "INSERT INTO tweets (id, full_text, swipe_status) VALUES ('1', 'x', 'meh')"
            )

    def test_tag_links_cascade_with_tweet(self, tmp_db, repo, add_tweets):
        add_tweets(("1", "x", "text_only"))
        repo.add_tag("1", "art")
        tmp_db.conn.execute("DELETE FROM tweets WHERE id = '1'")
        assert tmp_db.conn.execute("SELECT COUNT(*) FROM tweet_tags").fetchone()[0] == 0
