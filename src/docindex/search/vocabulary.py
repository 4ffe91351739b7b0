from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

import numpy as np

from docindex.text import edit_distance

# Sorts after every term sharing a prefix.
_PREFIX_END = "\U0010ffff"


@dataclass(frozen=True)
class TermMatch:
    """A vocabulary term matched by a query term."""

    term_id: int
    term: str
    weight: float
    kind: Literal["exact", "prefix", "fuzzy"]


class Vocabulary:
    """Sorted term list supporting exact, prefix and bounded-fuzzy lookup."""

    def __init__(self, terms: Iterable[str]) -> None:
        ordered = sorted(set(terms))
        self.terms = np.array(ordered, dtype=str)
        self._ids = {t: i for i, t in enumerate(ordered)}
        self._lengths = np.array([len(t) for t in ordered], dtype=int)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, term: object) -> bool:
        return term in self._ids

    def id(self, term: str) -> int | None:
        return self._ids.get(term)

    def prefix_range(self, prefix: str) -> tuple[int, int]:
        lo = int(np.searchsorted(self.terms, prefix, side="left"))
        hi = int(np.searchsorted(self.terms, prefix + _PREFIX_END, side="left"))
        return lo, hi

    def expand(
        self,
        term: str,
        *,
        prefix: bool = True,
        max_distance: int = 0,
        prefix_weight: float = 0.375,
        fuzzy_weight: float = 0.45,
    ) -> list[TermMatch]:
        """Vocabulary terms matching ``term``, keeping the best weight per term.

        Prefix and fuzzy matches are down-weighted by how far they are from the
        query term, so longer completions and larger edits score lower.
        """
        found: dict[int, TermMatch] = {}
        exact = self.id(term)
        if exact is not None:
            found[exact] = TermMatch(exact, term, 1.0, "exact")

        n = len(term)
        if prefix and n:
            lo, hi = self.prefix_range(term)
            for i in range(lo, hi):
                if i in found:
                    continue
                extra = int(self._lengths[i]) - n
                w = prefix_weight * n / (n + 0.3 * extra)
                found[i] = TermMatch(i, str(self.terms[i]), w, "prefix")

        if max_distance > 0 and len(self):
            close = np.nonzero(np.abs(self._lengths - n) <= max_distance)[0]
            for i in close:
                i = int(i)
                cand = str(self.terms[i])
                dist = edit_distance(term, cand, max_distance)
                if dist == 0 or dist > max_distance:
                    continue
                w = fuzzy_weight * n / (n + dist)
                if i not in found or found[i].weight < w:
                    found[i] = TermMatch(i, cand, w, "fuzzy")

        return sorted(found.values(), key=lambda m: m.term_id)


__all__ = ["TermMatch", "Vocabulary"]
