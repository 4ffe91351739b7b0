from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np

from docindex.records import CATEGORIES, FIELDS, SearchIndex

ERROR_CODES = frozenset({"payload", "empty", "not_object", "missing_field", "not_string", "unknown_category"})


@dataclass(frozen=True)
class ValidationIssue:
    """A single structural problem; ``index`` is the record position or -1."""

    index: int
    field: str
    code: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.code in ERROR_CODES

    def __str__(self) -> str:
        where = "payload" if self.index < 0 else f"docs[{self.index}]"
        if self.field:
            where = f"{where}.{self.field}"
        return f"{where}: {self.message} ({self.code})"


@dataclass(frozen=True)
class ValidationReport:
    n_records: int
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors()

    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    def raise_for_issues(self) -> None:
        errs = self.errors()
        if errs:
            head = "; ".join(str(e) for e in errs[:5])
            more = f" (+{len(errs) - 5} more)" if len(errs) > 5 else ""
            raise ValueError(f"Search index failed validation: {head}{more}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "n_records": self.n_records,
            "issues": [
                {"index": i.index, "field": i.field, "code": i.code, "message": i.message}
                for i in self.issues
            ],
        }


def _check_record(i: int, rec: Any) -> list[ValidationIssue]:
    if not isinstance(rec, Mapping):
        return [ValidationIssue(i, "", "not_object", f"expected an object, got {type(rec).__name__}")]
    issues: list[ValidationIssue] = []
    for name in FIELDS:
        if name not in rec:
            issues.append(ValidationIssue(i, name, "missing_field", "field is missing"))
        elif not isinstance(rec[name], str):
            issues.append(ValidationIssue(i, name, "not_string", f"expected a string, got {type(rec[name]).__name__}"))
    cat = rec.get("category")
    if isinstance(cat, str) and cat not in CATEGORIES:
        issues.append(ValidationIssue(i, "category", "unknown_category", f"unknown category {cat!r}"))
    for extra in sorted(set(rec) - set(FIELDS)):
        issues.append(ValidationIssue(i, str(extra), "extra_field", "field is not part of the record schema"))
    return issues


def validate_payload(payload: Any) -> ValidationReport:
    """Check a decoded ``{"docs": [...]}`` object against the record schema."""
    if not isinstance(payload, Mapping) or not isinstance(payload.get("docs"), list):
        issue = ValidationIssue(-1, "docs", "payload", "expected an object with a 'docs' list")
        return ValidationReport(n_records=0, issues=(issue,))
    docs = payload["docs"]
    issues: list[ValidationIssue] = []
    if not docs:
        issues.append(ValidationIssue(-1, "docs", "empty", "index has no records"))
    for i, rec in enumerate(docs):
        issues.extend(_check_record(i, rec))
    return ValidationReport(n_records=len(docs), issues=tuple(issues))


def validate_index(index: SearchIndex) -> ValidationReport:
    return validate_payload(index.to_payload())


def duplicate_keys(index: SearchIndex) -> dict[tuple[str, str, str, str], list[int]]:
    """Positions of records sharing a (location, page, title, category) key."""
    seen: dict[tuple[str, str, str, str], list[int]] = {}
    for i, doc in enumerate(index.docs):
        seen.setdefault(doc.key, []).append(i)
    return {key: pos for key, pos in seen.items() if len(pos) > 1}


def summary_stats(values: np.ndarray) -> dict[str, float]:
    """Summary statistics for a scalar sample (zeros for an empty sample)."""
    vals = np.asarray(values, dtype=float).ravel()
    if vals.size == 0:
        return {"min": 0.0, "median": 0.0, "mean": 0.0, "p95": 0.0, "max": 0.0, "rms": 0.0}
    return {
        "min": float(np.min(vals)),
        "median": float(np.median(vals)),
        "mean": float(np.mean(vals)),
        "p95": float(np.percentile(vals, 95.0)),
        "max": float(np.max(vals)),
        "rms": float(np.sqrt(np.mean(vals**2))),
    }


def index_summary(index: SearchIndex) -> dict[str, Any]:
    """Record counts by category and page, plus text-length statistics."""
    categories = {cat: 0 for cat in CATEGORIES}
    pages: dict[str, int] = {}
    for doc in index.docs:
        categories[doc.category] = categories.get(doc.category, 0) + 1
        pages[doc.page] = pages.get(doc.page, 0) + 1
    lengths = np.fromiter((len(doc.text) for doc in index.docs), dtype=float, count=len(index))
    return {
        "n_records": len(index),
        "global_name": index.global_name,
        "categories": categories,
        "pages": pages,
        "n_empty_text": int(np.count_nonzero(lengths == 0)),
        "n_duplicate_keys": len(duplicate_keys(index)),
        "text_length": summary_stats(lengths),
    }


__all__ = [
    "ValidationIssue",
    "ValidationReport",
    "duplicate_keys",
    "index_summary",
    "summary_stats",
    "validate_index",
    "validate_payload",
]
