"""Data models for TweetCurator."""

from dataclasses import dataclass
from typing import Optional

TWEET_TYPES = ["text_only", "media", "quote", "reply", "retweet", "thread"]
LENGTH_CATEGORIES = ["short", "medium", "long"]
SWIPE_STATUSES = ["dislike", "like", "superlike", "review_later"]
QUALITY_RATINGS = ["high", "medium", "low"]
TAG_CATEGORIES = ["topic", "pattern", "use", "custom"]
TAG_SOURCES = ["ai", "manual"]

# Upper bounds (inclusive) of the short and medium buckets, in characters
SHORT_MAX_CHARS = 280
MEDIUM_MAX_CHARS = 1000

# Swipe decisions imply a quality rating
SWIPE_QUALITY = {
    "dislike": "low",
    "like": "medium",
    "superlike": "high",
}


def length_category(char_count: int) -> str:
    if char_count <= SHORT_MAX_CHARS:
        return "short"
    if char_count <= MEDIUM_MAX_CHARS:
        return "medium"
    return "long"


@dataclass
class Tweet:
    id: str
    full_text: str
    created_at: str  # ISO 8601
    tweet_type: str
    favorite_count: int = 0
    retweet_count: int = 0
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    lang: Optional[str] = None
    source: Optional[str] = None
    in_reply_to_user: Optional[str] = None
    in_reply_to_tweet_id: Optional[str] = None
    quoted_tweet_id: Optional[str] = None
    tweet_url: Optional[str] = None

    @property
    def char_count(self) -> int:
        return len(self.full_text)

    @property
    def length_category(self) -> str:
        return length_category(self.char_count)

    @property
    def has_media(self) -> bool:
        return self.media_type is not None

