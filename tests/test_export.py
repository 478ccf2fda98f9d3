"""Tests for tweetcurator.storage.export."""

from __future__ import annotations

import csv
import io
import json

import pytest

from tweetcurator.search.filters import TweetFilters
from tweetcurator.search.query import QueryError
from tweetcurator.storage.export import (
    EXPORT_COLUMNS,
    export_rows,
    export_to_file,
    to_csv,
)


class TestExportRows:
    def test_newest_first_with_fixed_columns(self, running_db):
        rows = export_rows(running_db)
        assert [r["id"] for r in rows] == ["e1", "e2"]
        assert list(rows[0]) == EXPORT_COLUMNS

    def test_thread_continuations_included(self, thread_db):
        ids = {r["id"] for r in export_rows(thread_db)}
        assert {"t10", "t20", "t21", "t22"} <= ids
        assert "t30" not in ids

    def test_filters(self, running_db, repo):
        repo.update_tweet("e2", {"swipe_status": "like"})
        rows = export_rows(running_db, TweetFilters(swipe="like"))
        assert [r["id"] for r in rows] == ["e2"]
        assert rows[0]["quality_rating"] == "medium"

    def test_tags_and(self, tagged_db):
        rows = export_rows(tagged_db, TweetFilters.from_params({"tag": "philosophy,art"}))
        assert sorted(r["id"] for r in rows) == ["p1", "p4"]

    def test_include_retweets(self, running_db):
        rows = export_rows(running_db, TweetFilters(exclude_retweets=False))
        assert len(rows) == 3

    def test_storage_failure_raises_query_error(self, running_db):
        running_db.conn.execute("DROP TABLE tweet_tags")
        with pytest.raises(QueryError, match="tweet_tags"):
            export_rows(running_db, TweetFilters(tags=["art"]))


class TestCsv:
    def test_header_and_escaping(self):
        rows = [{"id": "1", "full_text": 'hello, "world"\nsecond line', "favorite_count": 3}]
        text = to_csv(rows)
        assert text.splitlines()[0] == ",".join(EXPORT_COLUMNS)
        parsed = list(csv.DictReader(io.StringIO(text)))
        assert parsed[0]["full_text"] == 'hello, "world"\nsecond line'
        assert parsed[0]["quality_rating"] == ""

    def test_empty(self):
        assert to_csv([]) == ",".join(EXPORT_COLUMNS) + "\n"


class TestExportToFile:
    def test_json(self, running_db, tmp_path):
        path = tmp_path / "out" / "tweets.json"
        assert export_to_file(running_db, path, "json") == 2
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [d["id"] for d in data] == ["e1", "e2"]

    def test_csv(self, running_db, tmp_path):
        path = tmp_path / "tweets.csv"
        export_to_file(running_db, path, "csv")
        rows = list(csv.DictReader(path.open(encoding="utf-8", newline="")))
        assert rows[0]["full_text"] == "I love running every morning"

    def test_unknown_format(self, running_db, tmp_path):
        with pytest.raises(ValueError, match="Unknown export format"):
            export_to_file(running_db, tmp_path / "x.xml", "xml")
