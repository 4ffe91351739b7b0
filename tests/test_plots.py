from pathlib import Path

import pytest

from docindex.io import load_search_index
from docindex.search import SearchEngine

DATA = Path(__file__).parent / "data" / "search_index.js"


@pytest.fixture(autouse=True)
def _agg_backend():
    mpl = pytest.importorskip("matplotlib")
    mpl.use("Agg")
    yield
    import matplotlib.pyplot as plt

    plt.close("all")


def test_category_and_page_plots():
    from docindex.plots import plot_category_counts, plot_page_composition

    index = load_search_index(DATA)
    ax = plot_category_counts(index)
    heights = [p.get_height() for p in ax.patches]
    assert sum(heights) == 80

    ax = plot_page_composition(index)
    assert [t.get_text() for t in ax.get_xticklabels()] == ["Analytic Fields", "Home", "Modules"]


def test_hit_scores_plot():
    from docindex.plots import plot_hit_scores

    hits = SearchEngine(load_search_index(DATA)).search("tokamak", limit=4)
    ax = plot_hit_scores(hits)
    assert len(ax.patches) == 4
