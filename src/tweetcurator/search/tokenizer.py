"""Split a free-text search string into phrase and word tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass

PHRASE_RE = re.compile(r'"([^"]+)"')

MIN_WORD_LENGTH = 2

STOP_WORDS = frozenset({
    "a", "an", "the",
    "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "must", "shall", "can",
    "to", "of", "in", "for", "on", "with", "at", "by", "from",
    "or", "and", "but", "if", "then", "so", "than",
    "that", "this", "these", "those", "it", "its",
})


@dataclass(frozen=True)
class SearchToken:
    kind: str  # "phrase" or "word"
    value: str

    @property
    def is_phrase(self) -> bool:
        return self.kind == "phrase"


def tokenize(query: str) -> list[SearchToken]:
    """Tokenize a search query.

    - "quoted text" becomes a single phrase token (exact substring match)
    - remaining words become word tokens, minus stop words and 1-char words

    Phrases come first in order of appearance, then words. Word tokens keep
    their original case.
    """
    tokens: list[SearchToken] = []
    remaining = query

    for match in PHRASE_RE.finditer(query):
        tokens.append(SearchToken("phrase", match.group(1)))
        remaining = remaining.replace(match.group(0), " ", 1)

    for word in remaining.split():
        if len(word) < MIN_WORD_LENGTH:
            continue
        if word.lower() in STOP_WORDS:
            continue
        tokens.append(SearchToken("word", word))

    return tokens
