"""Claude-powered natural-language search over the archive.

The model never writes SQL. It turns the question into the same options the
listing accepts (search text, tags, type, length, sort), which are checked
against the known vocabularies before being run through `list_tweets`.
"""

from __future__ import annotations

import logging

from tweetcurator.config import SORT_COLUMNS
from tweetcurator.llm.client import LLMError, complete_json
from tweetcurator.search.filters import THREAD_START_TYPES, TweetFilters, parse_tags
from tweetcurator.search.query import list_tweets
from tweetcurator.storage.database import Database
from tweetcurator.storage.models import LENGTH_CATEGORIES
from tweetcurator.storage.repository import Repository

logger = logging.getLogger(__name__)

SEMANTIC_RESULT_LIMIT = 50
PROMPT_TAG_LIMIT = 50

# Retweets and replies are always excluded, so only these types can match
SEARCHABLE_TYPES = ("text_only", "media", "quote") + THREAD_START_TYPES

SYSTEM_PROMPT_TEMPLATE = """\
You turn natural-language questions about a personal tweet archive into
search options for the archive's filter engine.

Options (all optional):
- "search": words that must all appear in the tweet text. Use "double quotes"
  for an exact phrase. Prefer the most distinctive one to three words; every
  word must match, so do not list synonyms.
- "tag": one or more tag names, comma-separated; tweets must carry all of them.
  Only use a tag when the question names a general category that matches a
  tag below exactly. For specific topics use "search" instead.
- "type": one of text_only, media, quote, thread-start.
- "length": one of short, medium, long.
- "sort": one of {sort_columns}.
- "order": "asc" or "desc".
- "explanation": one short sentence on how you read the question.

Tags in use (name, category, tweets):
{tags}

Respond ONLY with a JSON object, no other text.

Examples:
- "tweets about effective altruism" -> {{"search": "\\"effective altruism\\"", "sort": "favorite_count", "order": "desc"}}
- "my most popular philosophy tweets" -> {{"tag": "philosophy", "sort": "favorite_count", "order": "desc"}}
- "long threads I wrote about startups" -> {{"search": "startup", "type": "thread-start", "length": "long"}}"""


def prompt_tags(repo: Repository, limit: int = PROMPT_TAG_LIMIT) -> list[dict]:
    """Most used tags first, skipping tags with no tweets."""
    used = [
        tag
        for group in repo.list_tags().values()
        for tag in group
        if tag["tweet_count"] > 0
    ]
    used.sort(key=lambda t: (-t["tweet_count"], t["name"]))
    return used[:limit]


def build_system_prompt(tags: list[dict]) -> str:
    lines = [f"- {t['name']} ({t['category']}, {t['tweet_count']})" for t in tags]
    return SYSTEM_PROMPT_TEMPLATE.format(
        sort_columns=", ".join(SORT_COLUMNS),
        tags="\n".join(lines) or "- (none yet)",
    )


def interpret(raw: dict, known_tags: set[str]) -> dict:
    """Keep only options the listing understands, with known values.

    Returns listing params keyed like the public API (search, tag, type,
    length, sort, order).
    """
    params: dict[str, str] = {}

    search = str(raw.get("search") or "").strip()
    if search:
        params["search"] = search

    tags = [t for t in parse_tags(raw.get("tag")) if t in known_tags]
    if tags:
        params["tag"] = ",".join(tags)

    tweet_type = str(raw.get("type") or "").strip().lower()
    if tweet_type in SEARCHABLE_TYPES:
        params["type"] = tweet_type

    length = str(raw.get("length") or "").strip().lower()
    if length in LENGTH_CATEGORIES:
        params["length"] = length

    sort = str(raw.get("sort") or "").strip()
    if sort in SORT_COLUMNS:
        params["sort"] = sort
        order = str(raw.get("order") or "").strip().lower()
        if order in ("asc", "desc"):
            params["order"] = order

    return params


def semantic_search(
    db: Database,
    llm_client,
    query: str,
    limit: int = SEMANTIC_RESULT_LIMIT,
) -> dict:
    """Answer a natural-language question with matching original tweets.

    When the model reply is unusable the question is run as a plain text
    search. Returns {"query", "interpreted", "explanation", "count", "tweets"}.
    """
    repo = Repository(db)
    known_tags = {t["name"] for group in repo.list_tags().values() for t in group}
    system = build_system_prompt(prompt_tags(repo))

    try:
        raw = complete_json(llm_client, system=system, user=f"Question: {query}", max_tokens=512)
    except LLMError as e:
        logger.warning(f"Could not interpret query, falling back to text search: {e}")
        raw = {"search": query}

    interpreted = interpret(raw, known_tags)
    logger.info(f"Semantic search {query!r} -> {interpreted}")

    filters = TweetFilters.from_params({
        **interpreted,
        "limit": limit,
        "excludeRetweets": "true",
        "excludeReplies": "true",
    })
    tweets = list_tweets(db, filters)["tweets"]
    return {
        "query": query,
        "interpreted": interpreted,
        "explanation": str(raw.get("explanation") or ""),
        "count": len(tweets),
        "tweets": tweets,
    }
