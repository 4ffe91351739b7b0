from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from docindex.evaluation import evaluate_queries, load_labelled_queries
from docindex.io import FORMATS, load_payload, load_search_index, save_search_index
from docindex.pipeline import run_pipeline
from docindex.records import CATEGORIES, SearchIndex
from docindex.search import SearchEngine, SearchOptions
from docindex.validation import index_summary, validate_payload


def _cmd_validate(args: argparse.Namespace) -> None:
    try:
        name, payload = load_payload(args.input, format=args.format)
    except ValueError as exc:
        print(f"[FAIL] {args.input}: {exc}")
        raise SystemExit(1) from exc
    report = validate_payload(payload)
    if args.json:
        print(json.dumps({"global_name": name, **report.to_dict()}, indent=2, ensure_ascii=False))
        if not report.ok:
            raise SystemExit(1)
        return
    for issue in report.warnings():
        print(f"[WARN] {issue}")
    if not report.ok:
        print(f"[FAIL] {args.input}: {len(report.errors())} errors in {report.n_records} records")
        for issue in report.errors():
            print(" -", issue)
        raise SystemExit(1)
    print(f"[OK] {args.input}: {report.n_records} records, global={name}")


def _cmd_stats(args: argparse.Namespace) -> None:
    index = load_search_index(args.input, format=args.format, on_error=args.on_error)
    stats = index_summary(index)
    if args.outdir:
        outdir = Path(args.outdir)
        outdir.mkdir(parents=True, exist_ok=True)
        with (outdir / "summary.json").open("w", encoding="utf-8") as f:
            json.dump(stats, f, indent=2, ensure_ascii=False)
    print(json.dumps(stats, indent=2, ensure_ascii=False))


def _cmd_search(args: argparse.Namespace) -> None:
    index = load_search_index(args.input, format=args.format, on_error=args.on_error)
    options = SearchOptions(
        prefix=not args.no_prefix,
        fuzzy=args.fuzzy,
        title_boost=args.title_boost,
        combine=args.combine,
        categories=tuple(args.category) if args.category else None,
        limit=args.limit,
        verbose=args.verbose,
    )
    hits = SearchEngine(index, options).search(args.query)
    if args.json:
        print(json.dumps([h.to_dict() for h in hits], indent=2, ensure_ascii=False))
        return
    if not hits:
        print(f"[SEARCH] no results for {args.query!r}")
        return
    for rank, hit in enumerate(hits, start=1):
        doc = hit.fragment
        print(f"{rank:3d}. [{doc.category}] {doc.title or doc.page}  ({doc.location})  score={hit.score:.3f}")
        snippet = hit.snippet(width=args.snippet_width)
        if snippet:
            print(f"     {snippet}")


def _cmd_convert(args: argparse.Namespace) -> None:
    index = load_search_index(args.input, format=args.from_format, on_error=args.on_error)
    if args.global_name:
        index = SearchIndex(docs=index.docs, global_name=args.global_name)
    out = save_search_index(index, args.output, format=args.to_format)
    print(f"[OK] Wrote {len(index)} records to {out}")


def _cmd_evaluate(args: argparse.Namespace) -> None:
    index = load_search_index(args.input, format=args.format)
    queries = load_labelled_queries(args.queries)
    result = evaluate_queries(SearchEngine(index), queries, k=args.k)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


def _cmd_pipeline(args: argparse.Namespace) -> None:
    result = run_pipeline(args.config)
    print(f"[OK] Pipeline complete: {result.metadata['n_queries']} queries, outdir={result.metadata['outdir']}")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="docindex", description="Inspect, validate and search documentation search indexes.")
    sub = p.add_subparsers(dest="command", required=True)

    def _input(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("input", help="Search index file (.js/.json/.jsonl).")
        sp.add_argument("--format", choices=FORMATS, default=None, help="Override input format.")

    def _on_error(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--on-error", choices=["raise", "skip", "fill"], default="raise")

    sp = sub.add_parser("validate", help="Check records against the schema.")
    _input(sp)
    sp.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    sp.set_defaults(func=_cmd_validate)

    sp = sub.add_parser("stats", help="Summarize categories, pages and text lengths.")
    _input(sp)
    _on_error(sp)
    sp.add_argument("--outdir", default=None, help="Also write summary.json here.")
    sp.set_defaults(func=_cmd_stats)

    sp = sub.add_parser("search", help="Rank fragments against a query.")
    _input(sp)
    _on_error(sp)
    sp.add_argument("query")
    sp.add_argument("--limit", type=int, default=10)
    sp.add_argument("--category", action="append", choices=CATEGORIES, help="Restrict to a category (repeatable).")
    sp.add_argument("--no-prefix", action="store_true", help="Disable prefix matching.")
    sp.add_argument("--fuzzy", type=float, default=0.2)
    sp.add_argument("--combine", choices=["or", "and"], default="or")
    sp.add_argument("--title-boost", type=float, default=100.0)
    sp.add_argument("--snippet-width", type=int, default=120)
    sp.add_argument("--json", action="store_true")
    sp.add_argument("--verbose", action="store_true")
    sp.set_defaults(func=_cmd_search)

    sp = sub.add_parser("convert", help="Rewrite an index in another format.")
    sp.add_argument("input")
    sp.add_argument("output")
    sp.add_argument("--from", dest="from_format", choices=FORMATS, default=None)
    sp.add_argument("--to", dest="to_format", choices=FORMATS, default=None)
    sp.add_argument("--global-name", default=None, help="Variable name for .js output.")
    _on_error(sp)
    sp.set_defaults(func=_cmd_convert)

    sp = sub.add_parser("evaluate", help="Score ranking against labelled queries.")
    _input(sp)
    sp.add_argument("--queries", required=True, help="CSV with query,expected columns.")
    sp.add_argument("--k", type=int, default=10)
    sp.set_defaults(func=_cmd_evaluate)

    sp = sub.add_parser("pipeline", help="Run a TOML-configured batch.")
    sp.add_argument("config")
    sp.set_defaults(func=_cmd_pipeline)
    return p


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
