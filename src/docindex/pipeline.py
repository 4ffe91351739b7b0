from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docindex.evaluation import evaluate_queries, load_labelled_queries
from docindex.io import load_search_index
from docindex.search import SearchEngine, SearchOptions
from docindex.validation import index_summary, validate_index


@dataclass(frozen=True)
class PipelineResult:
    stats: dict[str, Any]
    metadata: dict[str, Any]
    results: dict[str, list[dict[str, Any]]]


__all__ = ["PipelineResult", "run_pipeline", "search_options_from_config"]


def _load_config(path: str | Path) -> dict[str, Any]:
    try:
        import tomllib
    except Exception as exc:  # pragma: no cover
        raise ImportError("Python 3.11+ is required for TOML configs.") from exc
    with open(path, "rb") as f:
        return tomllib.load(f)


def search_options_from_config(search_cfg: dict[str, Any]) -> SearchOptions:
    categories = search_cfg.get("categories")
    limit = search_cfg.get("limit")
    return SearchOptions(
        prefix=bool(search_cfg.get("prefix", True)),
        fuzzy=float(search_cfg.get("fuzzy", 0.2)),
        title_boost=float(search_cfg.get("title_boost", 100.0)),
        text_boost=float(search_cfg.get("text_boost", 1.0)),
        combine=str(search_cfg.get("combine", "or")),
        k1=float(search_cfg.get("k1", 1.2)),
        b=float(search_cfg.get("b", 0.7)),
        delta=float(search_cfg.get("delta", 0.5)),
        prefix_weight=float(search_cfg.get("prefix_weight", 0.375)),
        fuzzy_weight=float(search_cfg.get("fuzzy_weight", 0.45)),
        categories=tuple(categories) if categories is not None else None,
        limit=int(limit) if limit is not None else None,
        verbose=bool(search_cfg.get("verbose", False)),
    )


def run_pipeline(config_path: str | Path) -> PipelineResult:
    cfg = _load_config(config_path)
    index_cfg = cfg.get("index", {})
    search_cfg = cfg.get("search", {})
    eval_cfg = cfg.get("evaluate", {})
    output_cfg = cfg.get("output", {})
    verbose = bool(cfg.get("verbose", False))

    if "input" not in index_cfg:
        raise ValueError("Pipeline config needs [index] input = <path>")
    # relative paths in the config are resolved next to the config file
    base = Path(config_path).resolve().parent
    input_path = base / index_cfg["input"]

    index = load_search_index(
        input_path,
        format=index_cfg.get("format"),
        on_error=index_cfg.get("on_error", "raise"),
        verbose=verbose,
    )
    report = validate_index(index)
    stats: dict[str, Any] = {
        "summary": index_summary(index),
        "validation": report.to_dict(),
    }

    options = search_options_from_config(search_cfg)
    engine = SearchEngine(index, options)
    results: dict[str, list[dict[str, Any]]] = {}
    for query in search_cfg.get("queries", []):
        results[str(query)] = [hit.to_dict() for hit in engine.search(str(query))]

    queries_path = eval_cfg.get("queries")
    if queries_path is not None:
        labelled = load_labelled_queries(base / queries_path)
        evaluation = evaluate_queries(engine, labelled, k=int(eval_cfg.get("k", 10)))
        stats["evaluation"] = evaluation.to_dict()

    outdir = base / output_cfg.get("dir", "outputs/pipeline")
    outdir.mkdir(parents=True, exist_ok=True)
    with (outdir / "summary.json").open("w", encoding="utf-8") as f:
        json.dump(stats, f, indent=2, ensure_ascii=False)
    with (outdir / "results.json").open("w", encoding="utf-8") as f:
        json.dump(results, f, indent=2, ensure_ascii=False)
    if verbose:
        print(f"[PIPELINE] records={len(index)}, queries={len(results)}, outdir={outdir}")

    metadata = {
        "input": str(input_path),
        "format": index_cfg.get("format") or input_path.suffix.lstrip("."),
        "global_name": index.global_name,
        "n_queries": len(results),
        "outdir": str(outdir),
    }
    return PipelineResult(stats=stats, metadata=metadata, results=results)
