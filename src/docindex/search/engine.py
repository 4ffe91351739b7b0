from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping

import numpy as np
from scipy import sparse

from docindex.records import DocPageFragment, SearchIndex
from docindex.search.vocabulary import Vocabulary
from docindex.text import analyze, make_snippet, process_term

SEARCH_FIELDS: tuple[str, ...] = ("title", "text")


@dataclass(frozen=True)
class SearchOptions:
    prefix: bool = True
    fuzzy: float = 0.2  # <1: fraction of term length, >=1: absolute edit distance
    title_boost: float = 100.0
    text_boost: float = 1.0
    combine: Literal["or", "and"] = "or"
    k1: float = 1.2
    b: float = 0.7
    delta: float = 0.5  # BM25+ lower bound for a matching term
    prefix_weight: float = 0.375
    fuzzy_weight: float = 0.45
    categories: tuple[str, ...] | None = None
    limit: int | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.combine not in {"or", "and"}:
            raise ValueError(f"combine must be 'or' or 'and', got {self.combine!r}")
        if self.fuzzy < 0:
            raise ValueError(f"fuzzy must be non-negative, got {self.fuzzy}")
        if not 0.0 <= self.b <= 1.0:
            raise ValueError(f"b must lie in [0, 1], got {self.b}")
        if self.k1 < 0:
            raise ValueError(f"k1 must be non-negative, got {self.k1}")
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        if self.categories is not None and not isinstance(self.categories, tuple):
            object.__setattr__(self, "categories", tuple(self.categories))

    def max_distance(self, term: str) -> int:
        if self.fuzzy <= 0:
            return 0
        if self.fuzzy < 1:
            return int(round(len(term) * self.fuzzy))
        return int(self.fuzzy)


@dataclass(frozen=True)
class SearchHit:
    fragment: DocPageFragment
    score: float
    position: int  # record index in the searched SearchIndex
    matches: Mapping[str, tuple[str, ...]]  # matched term -> fields

    def snippet(self, width: int = 160) -> str:
        return make_snippet(self.fragment.text, self.matches.keys(), width=width)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.fragment.to_dict(),
            "score": self.score,
            "position": self.position,
            "matches": {term: list(fields) for term, fields in self.matches.items()},
            "snippet": self.snippet(),
        }


class SearchEngine:
    """BM25+ ranking over the title and text of every fragment.

    Term frequencies are held per field in sparse (documents x terms) CSC
    matrices so a single term's postings are one column slice.
    """

    def __init__(self, index: SearchIndex, options: SearchOptions | None = None) -> None:
        self.index = index
        self.options = options or SearchOptions()
        analyzed = {f: [analyze(getattr(doc, f)) for doc in index.docs] for f in SEARCH_FIELDS}
        self.vocabulary = Vocabulary(t for f in SEARCH_FIELDS for terms in analyzed[f] for t in terms)

        self._tf: dict[str, sparse.csc_matrix] = {}
        self._lengths: dict[str, np.ndarray] = {}
        self._avg_length: dict[str, float] = {}
        for f in SEARCH_FIELDS:
            self._tf[f] = self._term_matrix(analyzed[f])
            lengths = np.array([len(terms) for terms in analyzed[f]], dtype=float)
            self._lengths[f] = lengths
            mean = float(lengths.mean()) if lengths.size else 0.0
            self._avg_length[f] = mean if mean > 0 else 1.0

        if self.options.verbose:
            print(
                f"[INDEX] records={len(index)}, vocabulary={len(self.vocabulary)}, "
                f"avg title terms={self._avg_length['title']:.2f}, avg text terms={self._avg_length['text']:.2f}"
            )

    @classmethod
    def from_index(cls, index: SearchIndex, options: SearchOptions | None = None) -> "SearchEngine":
        return cls(index, options)

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def _term_matrix(self, docs_terms: list[list[str]]) -> sparse.csc_matrix:
        rows: list[int] = []
        cols: list[int] = []
        for i, terms in enumerate(docs_terms):
            for t in terms:
                rows.append(i)
                cols.append(self._term_id(t))
        shape = (len(docs_terms), len(self.vocabulary))
        data = np.ones(len(rows), dtype=float)
        ij = (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))
        tf = sparse.coo_matrix((data, ij), shape=shape).tocsc()
        tf.sum_duplicates()
        return tf

    def _term_id(self, term: str) -> int:
        tid = self.vocabulary.id(term)
        if tid is None:  # pragma: no cover - vocabulary is built from the same terms
            raise KeyError(term)
        return tid

    def _field_scores(self, field: str, term_id: int, opts: SearchOptions) -> tuple[np.ndarray, np.ndarray]:
        """Rows containing the term and their BM25+ scores for one field."""
        tf = self._tf[field]
        start, end = tf.indptr[term_id], tf.indptr[term_id + 1]
        rows = tf.indices[start:end]
        if rows.size == 0:
            return rows, np.zeros(0)
        freqs = tf.data[start:end]
        n_docs = len(self.index)
        df = rows.size
        idf = np.log1p((n_docs - df + 0.5) / (df + 0.5))
        norm = opts.k1 * (1.0 - opts.b + opts.b * self._lengths[field][rows] / self._avg_length[field])
        return rows, idf * (opts.delta + freqs * (opts.k1 + 1.0) / (freqs + norm))

    def search(
        self,
        query: str,
        *,
        categories: Iterable[str] | None = None,
        limit: int | None = None,
        options: SearchOptions | None = None,
    ) -> list[SearchHit]:
        """Rank fragments against ``query``.

        Results are deduplicated on ``(location, title)`` keeping the best
        scoring fragment; ties keep index order.
        """
        opts = options or self.options
        max_hits = limit if limit is not None else opts.limit
        if max_hits is not None and max_hits < 0:
            raise ValueError(f"limit must be non-negative, got {max_hits}")
        q_terms = list(dict.fromkeys(analyze(query)))
        n_docs = len(self.index)
        if not q_terms or n_docs == 0 or max_hits == 0:
            return []

        boosts = {"title": opts.title_boost, "text": opts.text_boost}
        total = np.zeros(n_docs)
        n_matched = np.zeros(n_docs, dtype=int)
        matched: dict[int, dict[str, set[str]]] = {}

        for qt in q_terms:
            term_scores = np.zeros(n_docs)
            expansions = self.vocabulary.expand(
                qt,
                prefix=opts.prefix,
                max_distance=opts.max_distance(qt),
                prefix_weight=opts.prefix_weight,
                fuzzy_weight=opts.fuzzy_weight,
            )
            for m in expansions:
                for f in SEARCH_FIELDS:
                    if boosts[f] <= 0:
                        continue
                    rows, scores = self._field_scores(f, m.term_id, opts)
                    if rows.size == 0:
                        continue
                    term_scores[rows] += boosts[f] * m.weight * scores
                    for r in rows:
                        matched.setdefault(int(r), {}).setdefault(m.term, set()).add(f)
            n_matched += term_scores > 0
            total += term_scores

        if opts.combine == "and":
            keep = n_matched == len(q_terms)
        else:
            keep = n_matched > 0
            total = total * n_matched / len(q_terms)

        cats = categories if categories is not None else opts.categories
        if cats is not None:
            wanted = set(cats)
            keep &= np.array([doc.category in wanted for doc in self.index.docs], dtype=bool)

        candidates = np.nonzero(keep)[0]
        order = candidates[np.argsort(-total[candidates], kind="stable")]

        hits: list[SearchHit] = []
        seen: set[tuple[str, str]] = set()
        for i in order:
            i = int(i)
            doc = self.index.docs[i]
            key = (doc.location, doc.title)
            if key in seen:
                continue
            seen.add(key)
            terms = {t: tuple(sorted(fs)) for t, fs in sorted(matched.get(i, {}).items())}
            hits.append(SearchHit(fragment=doc, score=float(total[i]), position=i, matches=terms))
            if max_hits is not None and len(hits) >= max_hits:
                break

        if opts.verbose:
            print(f"[SEARCH] query={query!r}, terms={q_terms}, candidates={candidates.size}, hits={len(hits)}")
        return hits

    def suggest(self, prefix: str, limit: int = 10) -> list[str]:
        """Vocabulary completions of ``prefix``, most widespread first."""
        word = process_term(prefix)
        if word is None:
            return []
        lo, hi = self.vocabulary.prefix_range(word)
        if lo == hi:
            return []
        df = sum(np.diff(self._tf[f].indptr)[lo:hi] for f in SEARCH_FIELDS)
        order = np.argsort(-df, kind="stable")[:limit]
        return [str(self.vocabulary.terms[lo + int(j)]) for j in order]


__all__ = ["SEARCH_FIELDS", "SearchEngine", "SearchHit", "SearchOptions"]
