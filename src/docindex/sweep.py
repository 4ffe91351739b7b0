from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import product
from typing import Callable, Sequence

import numpy as np

from docindex.evaluation import LabelledQuery, evaluate_queries
from docindex.records import SearchIndex
from docindex.search import SearchEngine, SearchOptions

TUNABLE = frozenset({"fuzzy", "title_boost", "text_boost", "k1", "b", "delta", "prefix_weight", "fuzzy_weight"})


@dataclass(frozen=True)
class SweepRecord:
    params: dict[str, float]
    value: float
    level: int


@dataclass(frozen=True)
class SweepResult:
    records: list[SweepRecord]
    best_params: dict[str, float]
    best_value: float


def _refine_axis(values: list[float], best: float, refine_factor: int) -> list[float]:
    """Insert a finer grid between the neighbours of ``best``."""
    vals = np.asarray(values, dtype=float)
    idx = int(np.argmin(np.abs(vals - best)))
    lo = vals[max(idx - 1, 0)]
    hi = vals[min(idx + 1, len(vals) - 1)]
    if lo == hi:
        return list(values)
    fine = np.linspace(lo, hi, max(3, 2 * refine_factor + 1))
    return sorted(set(vals.tolist()) | set(fine.tolist()))


def coarse_to_fine_sweep(
    grid: dict[str, Sequence[float]],
    evaluate: Callable[[dict[str, float]], float],
    *,
    levels: int = 2,
    refine_factor: int = 2,
) -> SweepResult:
    """Minimise ``evaluate`` over a grid, refining around the best point each level."""
    if not grid:
        raise ValueError("grid must have at least one parameter")
    if levels < 1:
        raise ValueError(f"levels must be at least 1, got {levels}")
    names = list(grid)
    axes = {k: sorted(float(v) for v in grid[k]) for k in names}
    empty = [k for k in names if not axes[k]]
    if empty:
        raise ValueError(f"grid axes have no values: {empty}")
    records: list[SweepRecord] = []
    best: SweepRecord | None = None
    visited: dict[tuple[float, ...], float] = {}

    for level in range(levels):
        for combo in product(*(axes[k] for k in names)):
            if combo not in visited:
                visited[combo] = float(evaluate(dict(zip(names, combo))))
            rec = SweepRecord(params=dict(zip(names, combo)), value=visited[combo], level=level)
            records.append(rec)
            if best is None or rec.value < best.value:
                best = rec
        axes = {k: _refine_axis(axes[k], best.params[k], refine_factor) for k in names}

    return SweepResult(records=records, best_params=best.params, best_value=best.value)


def tune_search_options(
    index: SearchIndex,
    queries: Sequence[LabelledQuery],
    grid: dict[str, Sequence[float]],
    *,
    base: SearchOptions | None = None,
    levels: int = 2,
    refine_factor: int = 2,
    k: int = 10,
) -> tuple[SearchOptions, SweepResult]:
    """Pick ranking parameters that maximise mean reciprocal rank on ``queries``."""
    unknown = set(grid) - TUNABLE
    if unknown:
        raise ValueError(f"Cannot tune {sorted(unknown)}; tunable options are {sorted(TUNABLE)}")
    if not queries:
        raise ValueError("At least one labelled query is required")
    base = base or SearchOptions()
    engine = SearchEngine(index, base)

    def objective(params: dict[str, float]) -> float:
        result = evaluate_queries(engine, queries, k=k, options=replace(base, **params))
        return 1.0 - result.mrr

    sweep = coarse_to_fine_sweep(grid, objective, levels=levels, refine_factor=refine_factor)
    return replace(base, **sweep.best_params), sweep


__all__ = [
    "SweepRecord",
    "SweepResult",
    "TUNABLE",
    "coarse_to_fine_sweep",
    "tune_search_options",
]
