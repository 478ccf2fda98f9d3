"""Shared test fixtures for TweetCurator."""

from __future__ import annotations

import pytest

from tweetcurator.storage.database import Database
from tweetcurator.storage.models import Tweet
from tweetcurator.storage.repository import Repository


@pytest.fixture
def tmp_db(tmp_path):
    """A temp database with schema and default tags."""
    db_path = tmp_path / "test.db"
    with Database(db_path) as db:
        yield db


@pytest.fixture
def repo(tmp_db):
    """Repository backed by the temp database."""
    return Repository(tmp_db)


@pytest.fixture
def make_tweet():
    """Factory for Tweet objects with sensible defaults."""

    def _make(tweet_id, text="Just a tweet", tweet_type="text_only", **fields):
        fields.setdefault("created_at", "2024-01-01T12:00:00+00:00")
        return Tweet(
            id=tweet_id,
            full_text=text,
            tweet_type=tweet_type,
            tweet_url=f"https://x.com/me/status/{tweet_id}",
            **fields,
        )

    return _make


@pytest.fixture
def add_tweets(repo, make_tweet):
    """Insert tweets given as (id, text, type, extra-fields) tuples or Tweets."""

    def _add(*specs):
        tweets = []
        for spec in specs:
            if isinstance(spec, Tweet):
                tweets.append(spec)
                continue
            tweet_id, text, tweet_type, *rest = spec
            tweets.append(make_tweet(tweet_id, text, tweet_type, **(rest[0] if rest else {})))
        repo.upsert_tweets(tweets)
        return tweets

    return _add


@pytest.fixture
def running_db(tmp_db, add_tweets):
    """Three tweets: two originals and one retweet mentioning running."""
    add_tweets(
        ("e1", "I love running every morning", "text_only",
         {"created_at": "2024-01-03T08:00:00+00:00", "favorite_count": 10}),
        ("e2", "Studies show exercise helps", "text_only",
         {"created_at": "2024-01-02T08:00:00+00:00", "favorite_count": 5}),
        ("e3", "RT running marathon", "retweet",
         {"created_at": "2024-01-01T08:00:00+00:00", "favorite_count": 1}),
    )
    return tmp_db


@pytest.fixture
def thread_db(tmp_db, add_tweets):
    """A parent with a thread reply, a thread tweet whose parent is missing,
    a parentless thread tweet, and a plain reply."""
    add_tweets(
        ("t10", "Thread opener about gardens", "text_only",
         {"created_at": "2024-02-01T10:00:00+00:00"}),
        ("t20", "2/ more about gardens", "thread",
         {"created_at": "2024-02-01T10:01:00+00:00", "in_reply_to_tweet_id": "t10",
          "in_reply_to_user": "me"}),
        ("t21", "continuation whose parent was deleted", "thread",
         {"created_at": "2024-02-01T10:02:00+00:00", "in_reply_to_tweet_id": "gone",
          "in_reply_to_user": "me"}),
        ("t22", "thread tweet with no parent id", "thread",
         {"created_at": "2024-02-01T10:03:00+00:00"}),
        ("t30", "a reply to someone else", "reply",
         {"created_at": "2024-02-01T10:04:00+00:00", "in_reply_to_tweet_id": "x1",
          "in_reply_to_user": "other"}),
    )
    return tmp_db


@pytest.fixture
def tagged_db(tmp_db, add_tweets, repo):
    """Tweets with combinations of the philosophy, art and history tags."""
    add_tweets(
        ("p1", "Both philosophy and art", "text_only",
         {"created_at": "2024-03-01T00:00:00+00:00"}),
        ("p2", "Only philosophy", "text_only",
         {"created_at": "2024-03-02T00:00:00+00:00"}),
        ("p3", "Only art", "text_only",
         {"created_at": "2024-03-03T00:00:00+00:00"}),
        ("p4", "Philosophy, art and history", "text_only",
         {"created_at": "2024-03-04T00:00:00+00:00"}),
        ("p5", "Untagged", "text_only",
         {"created_at": "2024-03-05T00:00:00+00:00"}),
    )
    for tweet_id, names in {
        "p1": ["philosophy", "art"],
        "p2": ["philosophy"],
        "p3": ["art"],
        "p4": ["philosophy", "art", "history"],
    }.items():
        for name in names:
            repo.add_tag(tweet_id, name, "topic")
    return tmp_db
