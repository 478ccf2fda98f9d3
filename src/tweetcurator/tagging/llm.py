"""Semantic tagging of tweets by an LLM, in batches."""

from __future__ import annotations

import logging
import time

from tweetcurator.config import LLM_TAG_BATCH_SIZE, LLM_TAG_DELAY_SECONDS
from tweetcurator.llm.client import LLMError, complete_json
from tweetcurator.storage.database import Database
from tweetcurator.storage.repository import Repository

logger = logging.getLogger(__name__)

MAX_TOPICS = 3
MAX_PATTERNS = 2

SYSTEM_PROMPT_TEMPLATE = """\
You are a semantic tweet analyzer. Given a batch of tweets, assign tags to each
one based on its actual meaning and context, not on keyword matches.

TOPIC TAGS (pick 0-{max_topics} that fit):
{topics}

PATTERN TAGS (pick 0-{max_patterns} that fit):
{patterns}

Rules:
- Read the full tweet and understand it before tagging.
- A tweet may span several topics if it genuinely does.
- Be conservative: only tag what truly fits.
- Use only the tag names listed above.

Respond ONLY with JSON in this shape, no other text:
{{"results": [{{"id": "tweet_id", "topics": ["tag"], "patterns": ["tag"]}}]}}"""

USER_PROMPT_TEMPLATE = "Analyze these {count} tweets and assign tags:\n\n{tweets}"


def _known_tags(db: Database, category: str) -> list[str]:
    rows = db.conn.execute(
        "SELECT name FROM tags WHERE category = ? ORDER BY name", (category,)
    ).fetchall()
    return [r["name"] for r in rows]


def build_system_prompt(topics: list[str], patterns: list[str]) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        max_topics=MAX_TOPICS,
        max_patterns=MAX_PATTERNS,
        topics="\n".join(f"- {t}" for t in topics),
        patterns="\n".join(f"- {p}" for p in patterns),
    )


def format_batch(tweets: list[dict]) -> str:
    return "\n\n---\n\n".join(f"[ID: {t['id']}]\n{t['full_text']}" for t in tweets)


def parse_results(data: dict) -> list[dict]:
    """The `results` list of a tagging reply."""
    results = data.get("results")
    if not isinstance(results, list):
        raise LLMError("Reply has no results list")
    return [item for item in results if isinstance(item, dict)]


def select_tweets(db: Database, limit: int | None = None) -> list[dict]:
    """Original tweets to tag, most liked first."""
    sql = """SELECT id, full_text FROM tweets
             WHERE tweet_type NOT IN ('retweet', 'reply')
             ORDER BY favorite_count DESC, id"""
    params: list = []
    if limit:
        sql += " LIMIT ?"
        params.append(limit)
    return [dict(r) for r in db.conn.execute(sql, params).fetchall()]


def llm_tag(
    db: Database,
    llm_client,
    batch_size: int = LLM_TAG_BATCH_SIZE,
    delay: float = LLM_TAG_DELAY_SECONDS,
    limit: int | None = None,
    clear_existing: bool = False,
    progress_callback=None,
) -> dict:
    """Tag tweets batch by batch with the LLM.

    Only tags already in the vocabulary are applied, with source `ai`. With
    `clear_existing`, earlier `ai` links are removed first. A batch
    that fails is logged and counted, and the run moves on.
    Returns {"processed", "tagged", "errors", "batches"}.
    """
    if clear_existing:
        Repository(db).clear_tags(source="ai")

    topics = _known_tags(db, "topic")
    patterns = _known_tags(db, "pattern")
    tag_ids = {
        r["name"]: r["id"]
        for r in db.conn.execute("SELECT id, name FROM tags").fetchall()
    }
    system = build_system_prompt(topics, patterns)

    tweets = select_tweets(db, limit)
    batches = [tweets[i : i + batch_size] for i in range(0, len(tweets), batch_size)]
    summary = {"processed": 0, "tagged": 0, "errors": 0, "batches": len(batches)}

    for index, batch in enumerate(batches, 1):
        if progress_callback:
            progress_callback(index, len(batches))
        batch_ids = {t["id"] for t in batch}

        try:
            data = complete_json(
                llm_client,
                system=system,
                user=USER_PROMPT_TEMPLATE.format(count=len(batch), tweets=format_batch(batch)),
            )
            results = parse_results(data)
        except LLMError as e:
            logger.error(f"Batch {index}/{len(batches)} failed: {e}")
            summary["errors"] += 1
            continue

        for item in results:
            tweet_id = str(item.get("id", ""))
            if tweet_id not in batch_ids:
                logger.warning(f"Ignoring result for unknown tweet id: {tweet_id}")
                continue
            names = list(item.get("topics") or [])[:MAX_TOPICS]
            names += list(item.get("patterns") or [])[:MAX_PATTERNS]
            for name in names:
                name = str(name).strip().lower()
                if name not in topics and name not in patterns:
                    continue
                cursor = db.conn.execute(
                    """INSERT OR IGNORE INTO tweet_tags (tweet_id, tag_id, source)
                       VALUES (?, ?, 'ai')""",
                    (tweet_id, tag_ids[name]),
                )
                summary["tagged"] += cursor.rowcount
            summary["processed"] += 1
        db.conn.commit()

        if delay and index < len(batches):
            time.sleep(delay)

    logger.info(
        f"LLM tagging done: {summary['processed']} tweets, "
        f"{summary['tagged']} tags, {summary['errors']} batch errors"
    )
    return summary
