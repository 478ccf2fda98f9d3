"""Tests for tweetcurator.search.filters."""

from __future__ import annotations

import pytest

from tweetcurator.search.filters import (
    THREAD_PARENT_JOIN,
    TweetFilters,
    compose,
    compose_queue,
    parse_bool,
    parse_positive_int,
    parse_tags,
)


class TestParsing:
    @pytest.mark.parametrize("value", ["abc", "0", "-3", "", None, "1.5"])
    def test_bad_positive_int_defaults(self, value):
        assert parse_positive_int(value, 7) == 7

    def test_positive_int(self):
        assert parse_positive_int("3", 1) == 3
        assert parse_positive_int(12, 1) == 12

    def test_values_sqlite_cannot_bind_default(self):
        assert parse_positive_int(str(2**63), 7) == 7
        assert parse_positive_int("99999999999999999999", 7) == 7
        assert parse_positive_int(str(2**63 - 1), 7) == 2**63 - 1

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        ("TRUE", True),
        ("false", False),
        ("yes", False),
        ("1", False),
    ])
    def test_bool_only_true_is_true(self, value, expected):
        assert parse_bool(value, not expected) is expected

    def test_bool_absent_uses_default(self):
        assert parse_bool(None, True) is True
        assert parse_bool("", False) is False

    def test_tags_lowercased_and_deduped(self):
        assert parse_tags("Philosophy, art,philosophy,,") == ["philosophy", "art"]
        assert parse_tags("") == []


class TestFromParams:
    def test_defaults(self):
        f = TweetFilters.from_params({})
        assert f.page == 1
        assert f.limit == 50
        assert f.exclude_retweets is True
        assert f.exclude_replies is True
        assert f.exclude_threads is False
        assert f.reviewed is None
        assert f.tags == []
        assert f.sort_column == "created_at"
        assert f.sort_direction == "DESC"

    def test_forgiving_numbers(self):
        f = TweetFilters.from_params({"page": "nope", "limit": "-1"})
        assert (f.page, f.limit) == (1, 50)

    def test_offset(self):
        f = TweetFilters.from_params({"page": "3", "limit": "20"})
        assert f.offset == 40

    def test_offset_past_sqlite_range_resets_page(self):
        f = TweetFilters.from_params({"page": str(2**62), "limit": "50"})
        assert f.page == 1
        assert f.offset == 0

    def test_toggles(self):
        f = TweetFilters.from_params({
            "excludeRetweets": "false",
            "excludeReplies": "maybe",
            "excludeThreads": "true",
        })
        assert f.exclude_retweets is False
        assert f.exclude_replies is False
        assert f.exclude_threads is True

    def test_reviewed(self):
        assert TweetFilters.from_params({"reviewed": "true"}).reviewed is True
        assert TweetFilters.from_params({"reviewed": "false"}).reviewed is False
        assert TweetFilters.from_params({"reviewed": "sometimes"}).reviewed is None

    def test_invalid_sort_falls_back(self):
        f = TweetFilters.from_params({"sort": "full_text; DROP TABLE tweets"})
        assert f.sort_column == "created_at"

    def test_allowed_sort(self):
        assert TweetFilters(sort="favorite_count").sort_column == "favorite_count"

    @pytest.mark.parametrize("order,expected", [
        ("asc", "ASC"),
        ("ASC", "ASC"),
        ("desc", "DESC"),
        ("sideways", "DESC"),
        ("", "DESC"),
    ])
    def test_order(self, order, expected):
        assert TweetFilters(order=order).sort_direction == expected


class TestCompose:
    def test_thread_hiding_by_default(self):
        composed = compose(TweetFilters())
        assert THREAD_PARENT_JOIN in composed.joins
        assert any("thread_parent.id IS NULL" in w for w in composed.where)

    def test_thread_hiding_can_be_disabled(self):
        composed = compose(TweetFilters(), hide_thread_continuations=False)
        assert THREAD_PARENT_JOIN not in composed.joins

    def test_exclusion_defaults(self):
        composed = compose(TweetFilters())
        assert "t.tweet_type != 'retweet'" in composed.where
        assert "t.tweet_type != 'reply'" in composed.where

    def test_single_tag_has_no_having(self):
        composed = compose(TweetFilters(tags=["art"]))
        assert composed.having == ""
        assert composed.params[0] == "art"

    def test_multi_tag_having(self):
        composed = compose(TweetFilters(tags=["philosophy", "art"]))
        assert composed.having == "COUNT(DISTINCT tag_filter.name) = ?"
        assert composed.params[-1] == 2

    def test_params_order_matches_body(self):
        composed = compose(TweetFilters(
            tags=["a", "b"], search="garden", quality="high", length="short",
        ))
        assert composed.params == ["a", "b", "garden", "short", "high", 2]
        assert composed.body().count("?") == len(composed.params)

    def test_thread_start_type_is_structural(self):
        composed = compose(TweetFilters(tweet_type="thread-start"))
        assert any("EXISTS" in w for w in composed.where)
        assert "thread-start" not in composed.params

    def test_plain_type(self):
        composed = compose(TweetFilters(tweet_type="media"))
        assert "t.tweet_type = ?" in composed.where
        assert composed.params == ["media"]

    def test_unreviewed_swipe(self):
        composed = compose(TweetFilters(swipe="unreviewed"))
        assert "t.swipe_status IS NULL" in composed.where
        assert composed.params == []

    def test_order_by_has_id_tiebreak(self):
        composed = compose(TweetFilters(sort="favorite_count", order="asc"))
        assert composed.order_by == "t.favorite_count ASC, t.id ASC"

    def test_body_groups_by_tweet(self):
        body = compose(TweetFilters()).body()
        assert body.startswith("FROM tweets t")
        assert "GROUP BY t.id" in body


class TestComposeQueue:
    def test_base_predicate(self):
        composed = compose_queue()
        assert "t.swipe_status IS NULL" in composed.where
        assert "t.tweet_type NOT IN ('retweet', 'reply', 'thread')" in composed.where
        assert composed.order_by.startswith("t.favorite_count DESC")

    def test_length_list(self):
        composed = compose_queue(length="short, medium")
        assert composed.params == ["short", "medium"]

    def test_tags(self):
        composed = compose_queue(tags="Art,philosophy")
        assert composed.params == ["art", "philosophy", 2]
