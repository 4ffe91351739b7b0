from pathlib import Path

import numpy as np
import pytest

from docindex.io import load_payload, load_search_index
from docindex.records import CATEGORIES, SearchIndex
from docindex.validation import (
    duplicate_keys,
    index_summary,
    summary_stats,
    validate_index,
    validate_payload,
)

DATA = Path(__file__).parent / "data" / "search_index.js"

GOOD = {"location": "a/", "page": "A", "title": "A", "text": "", "category": "page"}


def test_documenter_index_is_valid():
    _, payload = load_payload(DATA)
    report = validate_payload(payload)
    assert report.ok
    assert report.n_records == 80
    assert report.issues == ()
    for rec in payload["docs"]:
        assert all(isinstance(rec[f], str) for f in ("location", "page", "title", "text", "category"))
        assert rec["category"] in CATEGORIES


def test_structural_errors_are_reported():
    payload = {
        "docs": [
            GOOD,
            {"location": "b/", "page": "B", "title": "B", "category": "page"},
            {**GOOD, "text": None},
            {**GOOD, "category": "keyword"},
            "not a record",
        ]
    }
    report = validate_payload(payload)
    assert not report.ok
    codes = [(i.index, i.field, i.code) for i in report.errors()]
    assert codes == [
        (1, "text", "missing_field"),
        (2, "text", "not_string"),
        (3, "category", "unknown_category"),
        (4, "", "not_object"),
    ]
    with pytest.raises(ValueError, match="failed validation"):
        report.raise_for_issues()


def test_empty_and_malformed_payloads():
    empty = validate_payload({"docs": []})
    assert [i.code for i in empty.issues] == ["empty"]
    assert not empty.ok

    bad = validate_payload(["docs"])
    assert [i.code for i in bad.issues] == ["payload"]


def test_extra_fields_are_warnings():
    report = validate_payload({"docs": [{**GOOD, "score": "1"}]})
    assert report.ok
    assert [i.code for i in report.warnings()] == ["extra_field"]
    assert "docs[0].score" in str(report.warnings()[0])


def test_validate_parsed_index():
    index = SearchIndex.from_payload({"docs": [GOOD, {**GOOD, "category": "widget"}]})
    report = validate_index(index)
    assert [i.code for i in report.errors()] == ["unknown_category"]


def test_duplicate_keys_on_documenter_index():
    index = load_search_index(DATA)
    dups = duplicate_keys(index)
    assert len(dups) == 2
    analytic = dups[("analytic/", "Analytic Fields", "Analytic Fields", "page")]
    assert len(analytic) == 40
    assert analytic == sorted(analytic)


def test_index_summary_counts():
    index = load_search_index(DATA)
    summary = index_summary(index)
    assert summary["n_records"] == 80
    assert summary["categories"]["page"] == 44
    assert summary["categories"]["section"] == 15
    assert summary["categories"]["module"] == 10
    assert summary["categories"]["method"] == 9
    assert summary["categories"]["function"] == 2
    assert summary["categories"]["macro"] == 0
    assert summary["pages"] == {"Analytic Fields": 61, "Home": 6, "Modules": 13}
    assert summary["n_empty_text"] == 15
    assert summary["text_length"]["min"] == 0.0
    assert summary["text_length"]["max"] > summary["text_length"]["median"]


def test_summary_stats():
    stats = summary_stats(np.array([3.0, 4.0]))
    assert stats["min"] == 3.0
    assert stats["max"] == 4.0
    assert stats["mean"] == pytest.approx(3.5)
    assert stats["rms"] == pytest.approx(np.sqrt(12.5))
    assert summary_stats(np.array([]))["max"] == 0.0
