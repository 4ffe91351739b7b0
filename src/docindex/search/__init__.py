from __future__ import annotations

from .engine import SEARCH_FIELDS, SearchEngine, SearchHit, SearchOptions
from .vocabulary import TermMatch, Vocabulary

__all__ = [
    "SEARCH_FIELDS",
    "SearchEngine",
    "SearchHit",
    "SearchOptions",
    "TermMatch",
    "Vocabulary",
]
