from __future__ import annotations

import re
from typing import Iterable

STOP_WORDS = frozenset(
    """
    a about after all also an and any are as at be been but by can could did do does
    for from had has have he her here his how i if in into is it its just may me more
    most my no not of on or our out over she should so some such than that the their
    them then there these they this those to too under up us was we were what when
    where which while who why will with would you your
    """.split()
)

_SPLIT_RE = re.compile(r"[\s\-.]+")
# `@` and `!` belong to Julia macro and mutating-function names
_LEAD_RE = re.compile(r"^[^\w@!]+")
_TRAIL_RE = re.compile(r"[^\w@!]+$")
_PADDING_RE = re.compile(r"\n{3,}")


def tokenize(text: str) -> list[str]:
    return [tok for tok in _SPLIT_RE.split(text) if tok]


def process_term(term: str) -> str | None:
    """Normalize one token; ``None`` for stop words and punctuation-only tokens."""
    word = _TRAIL_RE.sub("", _LEAD_RE.sub("", term)).lower()
    if not word or word in STOP_WORDS:
        return None
    return word


def analyze(text: str) -> list[str]:
    terms = []
    for tok in tokenize(text):
        word = process_term(tok)
        if word is not None:
            terms.append(word)
    return terms


def clean_text(text: str) -> str:
    """Drop the blank-line padding the generator appends to docstrings."""
    return _PADDING_RE.sub("\n\n", text).strip()


def edit_distance(a: str, b: str, max_distance: int | None = None) -> int:
    """Levenshtein distance, capped at ``max_distance + 1`` when a bound is given."""
    if max_distance is not None and abs(len(a) - len(b)) > max_distance:
        return max_distance + 1
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i]
        for j, cb in enumerate(b, start=1):
            cur.append(min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + (ca != cb)))
        if max_distance is not None and min(cur) > max_distance:
            return max_distance + 1
        prev = cur
    dist = prev[-1]
    if max_distance is not None and dist > max_distance:
        return max_distance + 1
    return dist


def make_snippet(text: str, terms: Iterable[str], *, width: int = 160) -> str:
    """Excerpt of ``text`` around the first occurrence of any of ``terms``."""
    flat = " ".join(clean_text(text).split())
    if len(flat) <= width:
        return flat
    lower = flat.lower()
    hits = [pos for pos in (lower.find(t.lower()) for t in terms if t) if pos >= 0]
    center = min(hits) if hits else 0
    start = max(0, min(center - width // 3, len(flat) - width))
    end = start + width
    snippet = flat[start:end].strip()
    if start > 0:
        snippet = "..." + snippet
    if end < len(flat):
        snippet = snippet + "..."
    return snippet


__all__ = [
    "STOP_WORDS",
    "analyze",
    "clean_text",
    "edit_distance",
    "make_snippet",
    "process_term",
    "tokenize",
]
