from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from docindex.search import SearchEngine, SearchHit, SearchOptions


@dataclass(frozen=True)
class LabelledQuery:
    """A query with the fragment locations that count as a correct answer."""

    query: str
    expected: tuple[str, ...]


@dataclass(frozen=True)
class EvaluationResult:
    queries: list[LabelledQuery]
    ranks: np.ndarray  # 1-based rank of the first relevant hit, 0 if missing
    k: int

    @property
    def mrr(self) -> float:
        if self.ranks.size == 0:
            return 0.0
        rr = np.where(self.ranks > 0, 1.0 / np.maximum(self.ranks, 1), 0.0)
        return float(np.mean(rr))

    @property
    def hit_rate(self) -> float:
        if self.ranks.size == 0:
            return 0.0
        return float(np.mean((self.ranks > 0) & (self.ranks <= self.k)))

    def to_dict(self) -> dict[str, object]:
        return {
            "n_queries": len(self.queries),
            "k": self.k,
            "mrr": self.mrr,
            "hit_rate": self.hit_rate,
            "ranks": [{"query": q.query, "rank": int(r)} for q, r in zip(self.queries, self.ranks)],
        }


def load_labelled_queries(path: str | Path) -> list[LabelledQuery]:
    """Read ``query,expected`` rows; several locations are separated by ``|``.

    Locations with commas (``...-NTuple{6,Any}``) must be quoted.
    """
    with Path(path).open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or not {"query", "expected"} <= set(reader.fieldnames):
            raise ValueError(f"Expected 'query' and 'expected' columns in {path}")
        out = []
        for row in reader:
            if None in row:
                raise ValueError(
                    f"{path}:{reader.line_num}: too many columns; quote locations that contain commas"
                )
            query = (row.get("query") or "").strip()
            if not query:
                continue
            expected = tuple(loc.strip() for loc in (row.get("expected") or "").split("|") if loc.strip())
            out.append(LabelledQuery(query=query, expected=expected))
    return out


def first_relevant_rank(hits: Sequence[SearchHit], expected: Iterable[str]) -> int:
    wanted = set(expected)
    for rank, hit in enumerate(hits, start=1):
        if hit.fragment.location in wanted:
            return rank
    return 0


def reciprocal_rank(hits: Sequence[SearchHit], expected: Iterable[str]) -> float:
    rank = first_relevant_rank(hits, expected)
    return 1.0 / rank if rank else 0.0


def evaluate_queries(
    engine: SearchEngine,
    queries: Sequence[LabelledQuery],
    *,
    k: int = 10,
    options: SearchOptions | None = None,
) -> EvaluationResult:
    """Rank of the first expected location within the top ``k`` hits of each query."""
    ranks = np.zeros(len(queries), dtype=int)
    for i, q in enumerate(queries):
        hits = engine.search(q.query, limit=k, options=options)
        ranks[i] = first_relevant_rank(hits, q.expected)
    return EvaluationResult(queries=list(queries), ranks=ranks, k=k)


__all__ = [
    "EvaluationResult",
    "LabelledQuery",
    "evaluate_queries",
    "first_relevant_rank",
    "load_labelled_queries",
    "reciprocal_rank",
]
