"""Turn search tokens into SQL substring predicates over tweet text."""

from __future__ import annotations

from tweetcurator.search.stemmer import stem
from tweetcurator.search.tokenizer import SearchToken, tokenize

# Case-insensitive substring test; the parameter is already casefolded.
# casefold() is registered on every connection by Database.conn.
CONTAINS = "instr(casefold(t.full_text), ?) > 0"

MIN_STEM_LENGTH = 3


def token_predicate(token: SearchToken) -> tuple[str, list[str]]:
    """Return (clause, params) for a single token."""
    if token.is_phrase:
        return CONTAINS, [token.value.casefold()]

    word = token.value.casefold()
    stemmed = stem(word)
    if stemmed != word and len(stemmed) >= MIN_STEM_LENGTH:
        return f"({CONTAINS} OR {CONTAINS})", [word, stemmed]
    return CONTAINS, [word]


def build_predicates(tokens: list[SearchToken]) -> tuple[list[str], list[str]]:
    """Return (clauses, params) with params in the order the clauses use them."""
    clauses: list[str] = []
    params: list[str] = []
    for token in tokens:
        clause, token_params = token_predicate(token)
        clauses.append(clause)
        params.extend(token_params)
    return clauses, params


def text_predicate(query: str) -> tuple[str, list[str]]:
    """AND of every token predicate for a raw query.

    Returns ("", []) when the query has no usable tokens.
    """
    clauses, params = build_predicates(tokenize(query))
    if not clauses:
        return "", []
    return "(" + " AND ".join(clauses) + ")", params
