"""Tests for tweetcurator.storage.repository."""

from __future__ import annotations

import pytest

from tweetcurator.storage.repository import EMPTY_SESSION


class TestTweets:
    def test_upsert_and_get(self, repo, add_tweets):
        add_tweets(("1", "hello world", "text_only", {"favorite_count": 3}))
        tweet = repo.get_tweet("1")
        assert tweet["full_text"] == "hello world"
        assert tweet["char_count"] == 11
        assert tweet["length_category"] == "short"
        assert tweet["tags"] == []
        assert tweet["quoted_text"] is None
        assert repo.get_tweet_count() == 1

    def test_get_missing_is_none(self, repo):
        assert repo.get_tweet("nope") is None

    def test_reimport_keeps_curation_and_tags(self, repo, make_tweet):
        repo.upsert_tweets([make_tweet("1", "first text", favorite_count=1)])
        repo.update_tweet("1", {"swipe_status": "superlike", "notes": "keep"})
        repo.add_tag("1", "art")

        repo.upsert_tweets([make_tweet("1", "first text", favorite_count=42)])

        tweet = repo.get_tweet("1")
        assert tweet["favorite_count"] == 42
        assert tweet["swipe_status"] == "superlike"
        assert tweet["quality_rating"] == "high"
        assert tweet["notes"] == "keep"
        assert [t["name"] for t in tweet["tags"]] == ["art"]
        assert repo.get_tweet_count() == 1

    def test_get_thread_chain(self, repo, add_tweets):
        add_tweets(
            ("root", "start", "text_only", {"created_at": "2024-01-01T00:00:00+00:00"}),
            ("c2", "second", "thread",
             {"in_reply_to_tweet_id": "c1", "created_at": "2024-01-01T00:02:00+00:00"}),
            ("c1", "first", "thread",
             {"in_reply_to_tweet_id": "root", "created_at": "2024-01-01T00:01:00+00:00"}),
            ("other", "unrelated", "text_only"),
        )
        assert [t["id"] for t in repo.get_thread("root")] == ["c1", "c2"]
        assert repo.get_thread("other") == []

    def test_quoted_fields_on_detail(self, repo, add_tweets):
        add_tweets(
            ("orig", "original words", "text_only", {"media_url": "https://img/1.jpg",
                                                      "media_type": "photo"}),
            ("qt", "look at this", "quote", {"quoted_tweet_id": "orig"}),
        )
        tweet = repo.get_tweet("qt")
        assert tweet["quoted_text"] == "original words"
        assert tweet["quoted_media"] == "https://img/1.jpg"
        assert tweet["quoted_id"] == "orig"


class TestUpdateTweet:
    @pytest.fixture(autouse=True)
    def _seed(self, add_tweets):
        add_tweets(("1", "some tweet", "text_only"))

    @pytest.mark.parametrize("swipe,quality", [
        ("dislike", "low"),
        ("like", "medium"),
        ("superlike", "high"),
    ])
    def test_swipe_derives_quality(self, repo, swipe, quality):
        assert repo.update_tweet("1", {"swipe_status": swipe}) is True
        tweet = repo.get_tweet("1")
        assert tweet["swipe_status"] == swipe
        assert tweet["quality_rating"] == quality
        assert tweet["is_reviewed"] == 1
        assert tweet["reviewed_at"]

    def test_review_later_has_no_quality(self, repo):
        repo.update_tweet("1", {"swipe_status": "review_later"})
        assert repo.get_tweet("1")["quality_rating"] is None

    def test_explicit_quality_wins(self, repo):
        repo.update_tweet("1", {"swipe_status": "like", "quality_rating": "high"})
        assert repo.get_tweet("1")["quality_rating"] == "high"

    def test_swipe_counts_toward_session(self, repo):
        repo.update_tweet("1", {"swipe_status": "like"})
        repo.update_tweet("1", {"swipe_status": "superlike"})
        session = repo.get_today_session()
        assert session["tweets_swiped"] == 2
        assert session["likes"] == 1
        assert session["superlikes"] == 1
        assert session["dislikes"] == 0

    def test_clear_swipe(self, repo):
        repo.update_tweet("1", {"swipe_status": "like"})
        repo.update_tweet("1", {"swipe_status": None})
        assert repo.get_tweet("1")["swipe_status"] is None
        assert repo.get_today_session()["tweets_swiped"] == 1

    def test_notes_and_reviewed(self, repo):
        repo.update_tweet("1", {"notes": "for the book", "is_reviewed": True})
        tweet = repo.get_tweet("1")
        assert tweet["notes"] == "for the book"
        assert tweet["is_reviewed"] == 1

    def test_invalid_values(self, repo):
        with pytest.raises(ValueError):
            repo.update_tweet("1", {"swipe_status": "love"})
        with pytest.raises(ValueError):
            repo.update_tweet("1", {"quality_rating": "great"})

    def test_no_fields(self, repo):
        with pytest.raises(ValueError, match="No valid fields"):
            repo.update_tweet("1", {"favorite_count": 99})

    def test_unknown_tweet(self, repo):
        assert repo.update_tweet("missing", {"swipe_status": "like"}) is False
        assert repo.get_today_session() == EMPTY_SESSION


class TestTags:
    @pytest.fixture(autouse=True)
    def _seed(self, add_tweets):
        add_tweets(("1", "one", "text_only"), ("2", "two", "text_only"))

    def test_add_creates_lowercase_custom_tag(self, repo):
        assert repo.add_tag("1", "  My Tag ") is True
        tags = repo.get_tweet("1")["tags"]
        assert tags[0]["name"] == "my tag"
        assert tags[0]["category"] == "custom"
        assert tags[0]["color"] == "#666"

    def test_add_is_idempotent(self, repo):
        repo.add_tag("1", "art")
        repo.add_tag("1", "art")
        assert len(repo.get_tweet("1")["tags"]) == 1

    def test_add_to_unknown_tweet(self, repo):
        assert repo.add_tag("missing", "art") is False

    def test_add_requires_name(self, repo):
        with pytest.raises(ValueError):
            repo.add_tag("1", "   ")

    def test_remove(self, repo):
        repo.add_tag("1", "art")
        assert repo.remove_tag("1", "ART") is True
        assert repo.get_tweet("1")["tags"] == []

    def test_remove_unknown_tag(self, repo):
        assert repo.remove_tag("1", "never-created") is False

    def test_ensure_tag_rejects_bad_category(self, repo):
        with pytest.raises(ValueError):
            repo.ensure_tag("x", "mood")

    def test_clear_by_source(self, repo):
        repo.add_tag("1", "art", source="ai")
        repo.add_tag("2", "art", source="manual")
        assert repo.clear_tags(source="ai") == 1
        assert repo.get_tweet("1")["tags"] == []
        assert len(repo.get_tweet("2")["tags"]) == 1

    def test_clear_by_category(self, repo):
        repo.add_tag("1", "book", "use")
        repo.add_tag("1", "art", "topic")
        repo.clear_tags(category="use")
        assert [t["name"] for t in repo.get_tweet("1")["tags"]] == ["art"]

    def test_list_tags_grouped(self, repo):
        repo.add_tag("1", "art")
        repo.add_tag("2", "art")
        grouped = repo.list_tags()
        assert set(grouped) == {"topic", "pattern", "use", "custom"}
        art = next(t for t in grouped["topic"] if t["name"] == "art")
        assert art["tweet_count"] == 2

    def test_search_tags(self, repo):
        names = [t["name"] for t in repo.search_tags("PSYCHO")]
        assert "psychology" in names
        assert "psychospiritual-theory" in names
        assert all("psycho" in n for n in names)


class TestStats:
    def test_empty(self, repo):
        result = repo.get_stats()
        assert result["stats"]["total"] == 0
        assert all(v == 0 for v in result["stats"].values())
        assert result["topTags"] == []
        assert result["todayStats"] == EMPTY_SESSION

    def test_breakdown(self, repo, add_tweets):
        add_tweets(
            ("1", "one", "text_only"),
            ("2", "RT two", "retweet"),
            ("3", "x" * 500, "media"),
        )
        repo.update_tweet("1", {"swipe_status": "like"})
        repo.add_tag("1", "art")
        result = repo.get_stats()
        stats = result["stats"]
        assert stats["total"] == 3
        assert stats["text_only"] == 1
        assert stats["retweets"] == 1
        assert stats["with_media"] == 1
        assert stats["medium"] == 1
        assert stats["liked"] == 1
        assert stats["medium_quality"] == 1
        assert stats["reviewed"] == 1
        assert result["topTags"][0]["name"] == "art"
        assert result["todayStats"]["likes"] == 1
