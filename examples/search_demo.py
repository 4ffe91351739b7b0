#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from docindex import SearchEngine, SearchOptions, index_summary, load_search_index


def main() -> None:
    p = argparse.ArgumentParser(description="Load a Documenter search index and run a few queries.")
    p.add_argument("--input", required=True, help="search_index.js from a built documentation site.")
    p.add_argument("--query", action="append", default=None, help="Query to run (repeatable).")
    p.add_argument("--limit", type=int, default=5)
    p.add_argument("--plot", default=None, help="Write a page-composition figure to this path.")
    args = p.parse_args()

    index = load_search_index(args.input, verbose=True)
    summary = index_summary(index)
    print(f"pages={list(summary['pages'])}")
    print("categories=" + ", ".join(f"{k}:{v}" for k, v in summary["categories"].items() if v))

    engine = SearchEngine(index, SearchOptions(limit=args.limit, verbose=True))
    for query in args.query or ["tokamak", "christoffel symbol"]:
        print(f"\n== {query}")
        for hit in engine.search(query):
            print(f"  {hit.score:8.2f}  [{hit.fragment.category}] {hit.fragment.title}  -> {hit.fragment.location}")

    if args.plot:
        import matplotlib.pyplot as plt

        from docindex.plots import plot_page_composition

        ax = plot_page_composition(index)
        ax.figure.tight_layout()
        ax.figure.savefig(Path(args.plot), dpi=150)
        plt.close(ax.figure)
        print(f"\n[OK] Wrote {args.plot}")


if __name__ == "__main__":
    main()
