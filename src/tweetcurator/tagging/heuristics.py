"""Keyword-scored topic tags and regex pattern tags."""

from __future__ import annotations

import logging
import re

from tweetcurator.storage.database import Database
from tweetcurator.storage.repository import Repository

logger = logging.getLogger(__name__)

STRICT_POINTS = 3
BROAD_POINTS = 1
SCORE_THRESHOLD = 1

# topic -> strict phrases (+3), broad words (+1, whole word), negatives (veto)
DEFINITIONS: dict[str, dict[str, list[str]]] = {
    "art": {
        "strict": ["painting", "sculpture", "museum", "gallery", "masterpiece",
                   "canvas", "exhibition", "curator", "art history"],
        "broad": ["art", "artist", "expression", "drawing", "sketch", "illustration"],
        "negative": ["art of war", "state of the art"],
    },
    "aesthetics": {
        "strict": ["moodboard", "interior design", "palette", "atmospheric", "cinematic"],
        "broad": ["aesthetic", "vibe", "mood", "atmosphere", "beauty", "style",
                  "elegant", "taste", "curation"],
        "negative": [],
    },
    "romance": {
        "strict": ["dating market", "marriage", "courtship", "breakup", "divorce",
                   "monogamy", "polyamory"],
        "broad": ["romance", "love", "dating", "relationship", "partner", "spouse",
                  "couple", "intimacy"],
        "negative": [],
    },
    "friendship": {
        "strict": ["best friend", "bff", "found family", "chosen family", "friend group"],
        "broad": ["friend", "friendship", "friends", "buddy", "companion", "platonic"],
        "negative": [],
    },
    "religion": {
        "strict": ["christianity", "islam", "buddhism", "hinduism", "judaism",
                   "catholic", "church", "mosque", "synagogue"],
        "broad": ["religion", "religious", "god", "faith", "prayer", "worship",
                  "scripture", "bible", "jesus"],
        "negative": [],
    },
    "spirituality": {
        "strict": ["meditation", "mindfulness", "mysticism", "contemplation"],
        "broad": ["spiritual", "soul", "sacred", "ritual", "inner"],
        "negative": [],
    },
    "nyc": {
        "strict": ["new york city", "manhattan", "brooklyn", "queens", "bronx",
                   "staten island", "subway", "nyc"],
        "broad": ["new york", "downtown", "uptown", "williamsburg", "soho"],
        "negative": [],
    },
    "history": {
        "strict": ["ancient rome", "medieval", "civil war", "renaissance",
                   "industrial revolution", "archaeology", "historian"],
        "broad": ["history", "historical", "century", "era", "ancient", "tradition"],
        "negative": [],
    },
    "media-commentary": {
        "strict": ["media literacy", "news cycle", "mainstream media", "journalism",
                   "clickbait", "cable news"],
        "broad": ["media", "news", "journalist", "headline", "coverage", "press"],
        "negative": ["social media"],
    },
    "life-hacks": {
        "strict": ["life hack", "shortcut", "cheat code", "pro tip", "trick to"],
        "broad": ["hack", "tip", "trick", "optimize", "easier"],
        "negative": [],
    },
    "technology": {
        "strict": ["artificial intelligence", "machine learning", "llm", "blockchain",
                   "saas", "api", "algorithm", "robotics"],
        "broad": ["technology", "tech", "software", "code", "startup", "app",
                  "digital", "internet", "computer"],
        "negative": [],
    },
    "performing-arts": {
        "strict": ["theater", "theatre", "broadway", "ballet", "opera", "improv",
                   "standup"],
        "broad": ["performance", "performer", "stage", "acting", "drama", "audience"],
        "negative": ["performance review", "job performance"],
    },
    "community": {
        "strict": ["social capital", "third place", "communitas", "dunbar"],
        "broad": ["community", "tribe", "gathering", "belonging", "hosting", "dinner",
                  "party"],
        "negative": ["community manager", "community notes"],
    },
    "woo-wizardry": {
        "strict": ["astrology", "tarot", "manifestation", "law of attraction",
                   "divination", "numerology", "crystal", "energy healing"],
        "broad": ["woo", "magic", "magical", "mystical", "esoteric", "occult",
                  "spell", "zodiac"],
        "negative": [],
    },
    "philosophy": {
        "strict": ["stoicism", "existentialism", "nihilism", "virtue ethics",
                   "utilitarian", "nietzsche", "epistemology", "metaphysics"],
        "broad": ["philosophy", "stoic", "ethics", "virtue", "meaning", "wisdom", "truth"],
        "negative": [],
    },
    "psychology": {
        "strict": ["cognitive bias", "trauma", "neuroplasticity", "dopamine",
                   "attachment theory"],
        "broad": ["psychology", "mindset", "healing", "habits", "ego", "subconscious",
                  "therapy", "brain"],
        "negative": [],
    },
    "politics": {
        "strict": ["democracy", "republican", "democrat", "legislation", "election",
                   "voting", "geopolitics"],
        "broad": ["politics", "political", "government", "law", "regulation", "campaign"],
        "negative": [],
    },
    "culture": {
        "strict": ["zeitgeist", "cultural shift", "pop culture", "subculture",
                   "counterculture"],
        "broad": ["culture", "cultural", "mainstream", "trend", "generation",
                  "millennial", "boomer"],
        "negative": [],
    },
    "productivity": {
        "strict": ["time blocking", "deep work", "workflow", "pomodoro",
                   "getting things done"],
        "broad": ["productivity", "productive", "focus", "habit", "goal", "schedule"],
        "negative": [],
    },
    "creativity": {
        "strict": ["creative process", "brainstorm", "ideation", "creative block"],
        "broad": ["creativity", "creative", "create", "imagination", "inspiration",
                  "invent"],
        "negative": [],
    },
    "health": {
        "strict": ["nutrition", "exercise", "circadian rhythm", "metabolism",
                   "longevity", "biohacking", "gym"],
        "broad": ["health", "fitness", "diet", "workout", "sleep", "wellness", "doctor"],
        "negative": [],
    },
    "career": {
        "strict": ["job interview", "resume", "linkedin", "salary negotiation",
                   "career path", "job search", "hiring manager"],
        "broad": ["career", "job", "profession", "employer", "office", "boss", "coworker"],
        "negative": [],
    },
    "education": {
        "strict": ["pedagogy", "curriculum", "university", "college", "academia",
                   "student loan"],
        "broad": ["education", "school", "learn", "teach", "student", "teacher", "course"],
        "negative": [],
    },
    "science": {
        "strict": ["physics", "chemistry", "biology", "quantum", "neuroscience",
                   "astronomy", "scientific method"],
        "broad": ["science", "scientific", "research", "experiment", "evidence", "data"],
        "negative": [],
    },
    "economics": {
        "strict": ["inflation", "gdp", "macroeconomics", "supply and demand",
                   "monetary policy", "central bank"],
        "broad": ["economics", "economy", "market", "money", "finance", "capital",
                  "price"],
        "negative": [],
    },
    "depression": {
        "strict": ["depression", "depressed", "antidepressant", "ssri",
                   "mental illness"],
        "broad": ["sad", "sadness", "hopeless", "despair", "lonely", "loneliness",
                  "numb"],
        "negative": [],
    },
    "strategy": {
        "strict": ["moat", "flywheel", "network effect", "game theory",
                   "incentive structure", "go-to-market", "business model"],
        "broad": ["strategy", "leverage", "tactic", "execution", "competition", "scale"],
        "negative": [],
    },
    "sociology": {
        "strict": ["mimetic", "signaling", "status game", "social dynamics", "girard"],
        "broad": ["sociology", "status", "hierarchy", "society", "norm"],
        "negative": [],
    },
    "entities": {
        "strict": ["egregore", "thoughtform", "tulpa", "collective consciousness",
                   "archetype"],
        "broad": ["entity", "entities", "presence", "ghost", "demon", "angel"],
        "negative": ["legal entity", "corporate entity"],
    },
}

PATTERNS: dict[str, list[re.Pattern]] = {
    "thread": [re.compile(r"^\d+/\s"), re.compile(r"^\d+/\d+"),
               re.compile("🧵"), re.compile(r"below 👇")],
    "question": [re.compile(r"\?$"), re.compile(r"^(what|why|how)\b", re.I),
                 re.compile(r"anyone else", re.I)],
    "rant": [re.compile(r"tired of", re.I), re.compile(r"\bannoying\b", re.I),
             re.compile(r"\bhate\b", re.I)],
    "joke": [re.compile(r"\b(lol|lmao)\b", re.I), re.compile(r"\bfunny\b", re.I),
             re.compile(r"\bmeme\b", re.I)],
    "story": [re.compile(r"^i was\b", re.I), re.compile(r"^when i\b", re.I),
              re.compile(r"story time", re.I), re.compile(r"happened to me", re.I)],
    "insight": [re.compile(r"realization", re.I), re.compile(r"\blearned\b", re.I),
                re.compile(r"truth is", re.I)],
    "observation": [re.compile(r"\bnoticed\b", re.I), re.compile(r"seems like", re.I),
                    re.compile(r"people are", re.I), re.compile(r"interesting that", re.I)],
    "theory": [re.compile(r"\bframework\b", re.I), re.compile(r"mental model", re.I),
               re.compile(r"\bmy theory\b", re.I)],
    "advice": [re.compile(r"^(you should|don't|do not|never|always)\b", re.I),
               re.compile(r"\bmy advice\b", re.I)],
    "promotion": [re.compile(r"check out", re.I), re.compile(r"link in bio", re.I),
                  re.compile(r"sign up", re.I), re.compile(r"pre-order", re.I)],
    "announcement": [re.compile(r"announcing", re.I), re.compile(r"excited to", re.I),
                     re.compile(r"launching", re.I), re.compile(r"live now", re.I)],
    "hot-take": [re.compile(r"hot take", re.I), re.compile(r"unpopular opinion", re.I),
                 re.compile(r"controversial", re.I)],
    "engagement-bait": [re.compile(r"comment below", re.I), re.compile(r"tag someone", re.I),
                        re.compile(r"retweet if", re.I), re.compile(r"like if you", re.I),
                        re.compile(r"who else", re.I)],
    "dated-reference": [re.compile(r"\b20(0[89]|1\d|2[0-2])\b"),
                        re.compile(r"remember when", re.I), re.compile(r"throwback", re.I)],
}

_URL_RE = re.compile(r"https?://\S+")
_PUNCT_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
_SPACES_RE = re.compile(r"\s{2,}")


def normalize(text: str | None) -> str:
    """Lowercase, drop URLs and punctuation, collapse whitespace."""
    if not text:
        return ""
    text = _URL_RE.sub("", text.lower())
    text = _PUNCT_RE.sub(" ", text)
    return _SPACES_RE.sub(" ", text)


def score(text: str | None, definition: dict[str, list[str]]) -> int:
    """Keyword score of a text against one topic definition.

    Any negative phrase vetoes the topic outright.
    """
    normalized = normalize(text)
    for phrase in definition.get("negative", []):
        if phrase in normalized:
            return -100

    total = 0
    for phrase in definition.get("strict", []):
        if phrase in normalized:
            total += STRICT_POINTS
    for word in definition.get("broad", []):
        if re.search(rf"\b{re.escape(word)}\b", normalized):
            total += BROAD_POINTS
    return total


def topics_for(text: str | None) -> list[str]:
    return [
        topic for topic, definition in DEFINITIONS.items()
        if score(text, definition) >= SCORE_THRESHOLD
    ]


def patterns_for(text: str | None) -> list[str]:
    text = text or ""
    return [
        name for name, regexes in PATTERNS.items()
        if any(r.search(text) for r in regexes)
    ]


def auto_tag(db: Database) -> int:
    """Re-tag every tweet heuristically. Returns the number of links made.

    Previous `ai` tag links are cleared first; manual tags are kept.
    """
    repo = Repository(db)
    repo.clear_tags(source="ai")

    tag_ids = {name: repo.ensure_tag(name, "topic") for name in DEFINITIONS}
    tag_ids.update({name: repo.ensure_tag(name, "pattern") for name in PATTERNS})

    rows = db.conn.execute("SELECT id, full_text FROM tweets").fetchall()
    logger.info(f"Heuristic tagging {len(rows)} tweets")

    links = 0
    for row in rows:
        for name in topics_for(row["full_text"]) + patterns_for(row["full_text"]):
            cursor = db.conn.execute(
                """INSERT OR IGNORE INTO tweet_tags (tweet_id, tag_id, source)
                   VALUES (?, ?, 'ai')""",
                (row["id"], tag_ids[name]),
            )
            links += cursor.rowcount
    db.conn.commit()
    return links
