import json
import shutil
from pathlib import Path

from docindex.pipeline import run_pipeline, search_options_from_config
from docindex.search import SearchOptions

DATA = Path(__file__).parent / "data" / "search_index.js"


def test_pipeline_runs(tmp_path: Path) -> None:
    shutil.copy(DATA, tmp_path / "search_index.js")
    (tmp_path / "labelled.csv").write_text(
        "query,expected\nchristoffel,\"modules/#ElectromagneticFields.Γ-NTuple{6,Any}\"\n",
        encoding="utf-8",
    )
    cfg = tmp_path / "pipeline.toml"
    cfg.write_text(
        "\n".join(
            [
                "[index]",
                "input = \"search_index.js\"",
                "",
                "[search]",
                "queries = [\"tokamak\", \"christoffel\"]",
                "limit = 5",
                "categories = [\"module\", \"method\"]",
                "",
                "[evaluate]",
                "queries = \"labelled.csv\"",
                "k = 5",
                "",
                "[output]",
                "dir = \"out\"",
                "",
            ]
        ),
        encoding="utf-8",
    )

    result = run_pipeline(cfg)
    assert result.stats["summary"]["n_records"] == 80
    assert result.stats["validation"]["ok"] is True
    assert result.stats["evaluation"]["mrr"] == 1.0
    assert result.metadata["global_name"] == "documenterSearchIndex"

    tokamak = result.results["tokamak"]
    assert 0 < len(tokamak) <= 5
    assert {hit["category"] for hit in tokamak} <= {"module", "method"}

    summary = json.loads((tmp_path / "out" / "summary.json").read_text(encoding="utf-8"))
    assert summary["summary"]["categories"]["section"] == 15
    saved = json.loads((tmp_path / "out" / "results.json").read_text(encoding="utf-8"))
    assert saved["christoffel"][0]["location"] == "modules/#ElectromagneticFields.Γ-NTuple{6,Any}"


def test_pipeline_fill_mode(tmp_path: Path) -> None:
    (tmp_path / "index.json").write_text(
        json.dumps({"docs": [{"location": "a/", "page": "A", "category": "page"}]}),
        encoding="utf-8",
    )
    cfg = tmp_path / "pipeline.toml"
    cfg.write_text(
        "[index]\ninput = \"index.json\"\non_error = \"fill\"\n\n[output]\ndir = \"out\"\n",
        encoding="utf-8",
    )
    result = run_pipeline(cfg)
    assert result.stats["summary"]["n_empty_text"] == 1
    assert result.metadata["global_name"] is None
    assert result.results == {}


def test_search_options_from_config_reads_tunable_weights():
    opts = search_options_from_config(
        {"delta": 0.0, "prefix_weight": 0.9, "fuzzy_weight": 0.1, "k1": 2.0, "b": 0.5, "limit": 3}
    )
    assert (opts.delta, opts.prefix_weight, opts.fuzzy_weight) == (0.0, 0.9, 0.1)
    assert (opts.k1, opts.b, opts.limit) == (2.0, 0.5, 3)

    defaults = search_options_from_config({})
    assert defaults == SearchOptions()
