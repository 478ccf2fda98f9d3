"""Import a Twitter/X data archive into the database."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from tweetcurator.storage.database import Database
from tweetcurator.storage.models import Tweet
from tweetcurator.storage.repository import Repository

logger = logging.getLogger(__name__)

STATUS_URL_RE = re.compile(r"(?:twitter|x)\.com/\w+/status/(\d+)")
SOURCE_RE = re.compile(r">([^<]+)<")
TWITTER_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

# Normalized prefix length used to match truncated tweets to note tweets
NOTE_PREFIX_CHARS = 200


def parse_archive_js(path: Path) -> list:
    """Parse a `window.YTD.<name>.part0 = [...]` archive file."""
    content = path.read_text(encoding="utf-8")
    start = content.find("[")
    if start == -1:
        raise ValueError(f"No JSON array found in {path}")
    return json.loads(content[start:])


def _note_prefix(text: str) -> str:
    return re.sub(r"\s+", " ", text[:NOTE_PREFIX_CHARS].lower()).strip()


def load_note_tweets(archive_dir: Path) -> tuple[dict[str, str], dict[str, str]]:
    """Full texts of long-form tweets, keyed by id and by normalized prefix."""
    path = archive_dir / "note-tweet.js"
    by_id: dict[str, str] = {}
    by_prefix: dict[str, str] = {}
    if not path.exists():
        return by_id, by_prefix

    for item in parse_archive_js(path):
        note = item.get("noteTweet") or {}
        text = (note.get("core") or {}).get("text")
        if note.get("noteTweetId") and text:
            by_id[note["noteTweetId"]] = text
            by_prefix[_note_prefix(text)] = text
    return by_id, by_prefix


def _is_truncated(text: str) -> bool:
    return text.endswith("…") or text.endswith("...")


def full_text_for(tweet: dict, notes: tuple[dict[str, str], dict[str, str]]) -> str:
    """Expand a truncated tweet from the matching note tweet, if any."""
    text = tweet.get("full_text") or ""
    if not _is_truncated(text):
        return text

    by_id, by_prefix = notes
    stripped = re.sub(r"(…|\.{3})$", "", text).strip()
    prefix = _note_prefix(stripped)
    if prefix in by_prefix:
        return by_prefix[prefix]
    if tweet.get("id_str") in by_id:
        return by_id[tweet["id_str"]]
    return text


def quoted_tweet_id(tweet: dict) -> str | None:
    if tweet.get("quoted_status_id_str"):
        return tweet["quoted_status_id_str"]
    for url in (tweet.get("entities") or {}).get("urls") or []:
        match = STATUS_URL_RE.search(url.get("expanded_url") or "")
        if match:
            return match.group(1)
    return None


def media_info(tweet: dict) -> tuple[str | None, str | None]:
    """(media_type, media_url) of the first attached media item."""
    media = (tweet.get("extended_entities") or {}).get("media") or []
    if not media:
        return None, None

    first = media[0]
    kind = {"video": "video", "animated_gif": "gif"}.get(first.get("type"), "photo")
    url = first.get("media_url_https") or first.get("media_url")
    if kind == "video":
        variants = [
            v for v in (first.get("video_info") or {}).get("variants") or []
            if v.get("content_type") == "video/mp4"
        ]
        if variants:
            best = max(variants, key=lambda v: int(v.get("bitrate") or 0))
            url = best["url"]
    return kind, url


def classify_tweet(tweet: dict, username: str) -> str:
    """Decide the tweet_type once, at import time."""
    text = tweet.get("full_text") or ""
    if text.startswith("RT @"):
        return "retweet"

    reply_to = tweet.get("in_reply_to_screen_name") or ""
    if reply_to and reply_to.lower() == username.lower():
        return "thread"

    if tweet.get("in_reply_to_status_id") or tweet.get("in_reply_to_status_id_str"):
        return "reply"

    if quoted_tweet_id(tweet) or tweet.get("quoted_status_id"):
        return "quote"

    entities = tweet.get("entities") or {}
    if tweet.get("extended_entities") or entities.get("media"):
        return "media"

    return "text_only"


def parse_twitter_date(value: str) -> str:
    """'Wed Oct 10 20:19:24 +0000 2018' -> ISO 8601; ISO input passes through."""
    try:
        return datetime.strptime(value, TWITTER_DATE_FORMAT).isoformat()
    except (TypeError, ValueError):
        return value


def _clean_source(source: str) -> str:
    match = SOURCE_RE.search(source or "")
    return match.group(1) if match else (source or "")


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def tweet_from_archive(tweet: dict, username: str, notes) -> Tweet:
    """Build a Tweet from one raw archive record."""
    tweet_id = tweet["id_str"]
    media_type, media_url = media_info(tweet)
    return Tweet(
        id=tweet_id,
        full_text=full_text_for(tweet, notes),
        created_at=parse_twitter_date(tweet.get("created_at", "")),
        tweet_type=classify_tweet(tweet, username),
        favorite_count=_to_int(tweet.get("favorite_count")),
        retweet_count=_to_int(tweet.get("retweet_count")),
        media_type=media_type,
        media_url=media_url,
        lang=tweet.get("lang") or "en",
        source=_clean_source(tweet.get("source", "")),
        in_reply_to_user=tweet.get("in_reply_to_screen_name"),
        in_reply_to_tweet_id=tweet.get("in_reply_to_status_id_str"),
        quoted_tweet_id=quoted_tweet_id(tweet),
        tweet_url=f"https://x.com/{username}/status/{tweet_id}",
    )


def import_archive(db: Database, archive_dir: Path, username: str) -> dict:
    """Import tweets.js (plus note-tweet.js) from an archive data directory.

    Returns a summary: imported, skipped, long_tweets, threads.
    """
    tweets_path = archive_dir / "tweets.js"
    if not tweets_path.exists():
        raise FileNotFoundError(f"tweets.js not found in {archive_dir}")

    notes = load_note_tweets(archive_dir)
    records = parse_archive_js(tweets_path)
    logger.info(f"Parsed {len(records)} archive records from {tweets_path}")

    tweets: list[Tweet] = []
    skipped = 0
    long_tweets = 0
    for item in records:
        raw = item.get("tweet") if isinstance(item, dict) else None
        if not raw or not raw.get("id_str"):
            skipped += 1
            continue
        try:
            tweet = tweet_from_archive(raw, username, notes)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping tweet {raw.get('id_str')}: {e}")
            skipped += 1
            continue
        if len(tweet.full_text) > len(raw.get("full_text") or ""):
            long_tweets += 1
        tweets.append(tweet)

    Repository(db).upsert_tweets(tweets)

    return {
        "imported": len(tweets),
        "skipped": skipped,
        "long_tweets": long_tweets,
        "threads": sum(1 for t in tweets if t.tweet_type == "thread"),
    }
