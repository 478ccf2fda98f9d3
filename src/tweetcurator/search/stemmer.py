"""Lightweight English stemmer used for search matching.

Maps a surface word to a matching key: irregular forms are looked up in a
fixed table, everything else goes through ordered suffix stripping. The
output is not guaranteed to be a dictionary word.
"""

from __future__ import annotations

# Words shorter than this are never stemmed
MIN_STEM_INPUT = 3

IRREGULARS = {
    "ran": "run", "running": "run", "runs": "run",
    "children": "child", "childs": "child",
    "men": "man", "women": "woman",
    "feet": "foot", "teeth": "tooth",
    "mice": "mouse", "geese": "goose",
    "was": "be", "were": "be", "been": "be", "being": "be",
    "is": "be", "are": "be", "am": "be",
    "had": "have", "has": "have", "having": "have",
    "did": "do", "does": "do", "doing": "do",
    "went": "go", "goes": "go", "going": "go", "gone": "go",
    "said": "say", "says": "say", "saying": "say",
    "made": "make", "makes": "make", "making": "make",
    "took": "take", "takes": "take", "taking": "take", "taken": "take",
    "came": "come", "comes": "come", "coming": "come",
    "saw": "see", "sees": "see", "seeing": "see", "seen": "see",
    "knew": "know", "knows": "know", "knowing": "know", "known": "know",
    "thought": "think", "thinks": "think", "thinking": "think",
    "got": "get", "gets": "get", "getting": "get", "gotten": "get",
    "gave": "give", "gives": "give", "giving": "give", "given": "give",
    "told": "tell", "tells": "tell", "telling": "tell",
    "felt": "feel", "feels": "feel", "feeling": "feel",
    "became": "become", "becomes": "become", "becoming": "become",
    "left": "leave", "leaves": "leave", "leaving": "leave",
    "brought": "bring", "brings": "bring", "bringing": "bring",
    "wrote": "write", "writes": "write", "writing": "write", "written": "write",
    "sat": "sit", "sits": "sit", "sitting": "sit",
    "stood": "stand", "stands": "stand", "standing": "stand",
    "lost": "lose", "loses": "lose", "losing": "lose",
    "paid": "pay", "pays": "pay", "paying": "pay",
    "met": "meet", "meets": "meet", "meeting": "meet",
    "set": "set", "sets": "set", "setting": "set",
    "learned": "learn", "learns": "learn", "learning": "learn", "learnt": "learn",
    "kept": "keep", "keeps": "keep", "keeping": "keep",
    "built": "build", "builds": "build", "building": "build",
    "sent": "send", "sends": "send", "sending": "send",
    "spent": "spend", "spends": "spend", "spending": "spend",
    "understood": "understand", "understands": "understand",
    "understanding": "understand",
    "began": "begin", "begins": "begin", "beginning": "begin", "begun": "begin",
    "held": "hold", "holds": "hold", "holding": "hold",
    "heard": "hear", "hears": "hear", "hearing": "hear",
    "found": "find", "finds": "find", "finding": "find",
    "read": "read", "reads": "read", "reading": "read",
    "meant": "mean", "means": "mean", "meaning": "mean",
    "led": "lead", "leads": "lead", "leading": "lead",
    "put": "put", "puts": "put", "putting": "put",
    "showed": "show", "shows": "show", "showing": "show", "shown": "show",
    "moved": "move", "moves": "move", "moving": "move",
    "lived": "live", "lives": "live", "living": "live",
    "believed": "believe", "believes": "believe", "believing": "believe",
    "loved": "love", "loves": "love", "loving": "love",
}

# (suffix, minimum word length before stripping, replacement)
PLURAL_RULES = [
    ("ies", 5, "y"),
    ("ied", 5, "y"),
    ("es", 5, ""),
    ("s", 4, ""),
]

# Checked in order, first match wins
SUFFIX_RULES = [
    ("ness", 7),
    ("ment", 7),
    ("ly", 5),
    ("ful", 6),
    ("less", 7),
    ("tion", 7),
    ("er", 5),
    ("est", 6),
    ("able", 7),
    ("ible", 7),
]


def _undouble(word: str) -> str:
    """running -> runn -> run, stopped -> stopp -> stop."""
    if len(word) > 2 and word[-1] == word[-2]:
        return word[:-1]
    return word


def _strip_plural(w: str) -> str:
    for suffix, min_len, replacement in PLURAL_RULES:
        if not w.endswith(suffix) or len(w) < min_len:
            continue
        # "-ss" words (class, happiness, address) are not plurals
        if suffix == "s" and w.endswith("ss"):
            continue
        return w[: -len(suffix)] + replacement
    return w


def stem(word: str) -> str:
    """Return the matching key for a single word."""
    w = word.lower()
    if len(w) < MIN_STEM_INPUT:
        return w

    if w in IRREGULARS:
        return IRREGULARS[w]

    w = _strip_plural(w)

    if w.endswith("ing") and len(w) > 5:
        return _undouble(w[:-3])
    if w.endswith("ed") and len(w) > 4:
        return _undouble(w[:-2])

    for suffix, min_len in SUFFIX_RULES:
        if w.endswith(suffix) and len(w) >= min_len:
            return w[: -len(suffix)]

    return w
