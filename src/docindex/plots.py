from __future__ import annotations

from typing import Sequence

import numpy as np

from docindex.records import CATEGORIES, SearchIndex
from docindex.search import SearchHit


def _require_matplotlib():
    try:
        import matplotlib.pyplot as plt  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise ImportError("matplotlib is required for plotting. Install with `pip install docindex[plots]`.") from exc
    return plt


def _category_matrix(index: SearchIndex) -> tuple[list[str], list[str], np.ndarray]:
    pages = index.pages()
    cats = list(CATEGORIES) + sorted({d.category for d in index.docs} - set(CATEGORIES))
    counts = np.zeros((len(pages), len(cats)), dtype=int)
    row = {p: i for i, p in enumerate(pages)}
    col = {c: j for j, c in enumerate(cats)}
    for doc in index.docs:
        counts[row[doc.page], col[doc.category]] += 1
    return pages, cats, counts


def plot_category_counts(index: SearchIndex, *, ax=None):
    """Bar chart of records per category."""
    plt = _require_matplotlib()
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))
    _, cats, counts = _category_matrix(index)
    totals = counts.sum(axis=0)
    ax.bar(np.arange(len(cats)), totals, color="C0")
    ax.set_xticks(np.arange(len(cats)))
    ax.set_xticklabels(cats, rotation=30, ha="right")
    ax.set_ylabel("records")
    ax.set_title("Records per category")
    return ax


def plot_page_composition(index: SearchIndex, *, ax=None):
    """Stacked bars of category counts for each page."""
    plt = _require_matplotlib()
    if ax is None:
        _, ax = plt.subplots(figsize=(7, 4))
    pages, cats, counts = _category_matrix(index)
    x = np.arange(len(pages))
    bottom = np.zeros(len(pages))
    for j, cat in enumerate(cats):
        if not counts[:, j].any():
            continue
        ax.bar(x, counts[:, j], bottom=bottom, label=cat)
        bottom += counts[:, j]
    ax.set_xticks(x)
    ax.set_xticklabels(pages, rotation=30, ha="right")
    ax.set_ylabel("records")
    ax.set_title("Page composition")
    ax.legend(fontsize="small")
    return ax


def plot_hit_scores(hits: Sequence[SearchHit], *, ax=None, max_label: int = 40):
    """Horizontal bars of hit scores, best hit on top."""
    plt = _require_matplotlib()
    if ax is None:
        _, ax = plt.subplots(figsize=(6, max(2.0, 0.35 * len(hits) + 1.0)))
    scores = np.array([h.score for h in hits], dtype=float)
    labels = [(h.fragment.title or h.fragment.location)[:max_label] for h in hits]
    y = np.arange(len(hits))[::-1]
    ax.barh(y, scores, color="C1")
    ax.set_yticks(y)
    ax.set_yticklabels(labels)
    ax.set_xlabel("score")
    ax.set_title("Search hits")
    return ax


__all__ = ["plot_category_counts", "plot_hit_scores", "plot_page_composition"]
