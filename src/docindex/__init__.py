"""docindex: read, validate and search Documenter search indexes.

Primary user-facing API: :func:`load_search_index` and :class:`SearchEngine`.
"""

from __future__ import annotations

from ._version import __version__
from .records import CATEGORIES, DocPageFragment, FragmentLocation, SearchIndex
from .io import dumps_search_index, load_search_index, parse_search_index, save_search_index
from .validation import ValidationReport, index_summary, validate_index, validate_payload
from .search import SearchEngine, SearchHit, SearchOptions
from .evaluation import LabelledQuery, evaluate_queries
from .pipeline import PipelineResult, run_pipeline

__all__ = [
    "__version__",
    "CATEGORIES",
    "DocPageFragment",
    "FragmentLocation",
    "SearchIndex",
    "parse_search_index",
    "dumps_search_index",
    "load_search_index",
    "save_search_index",
    "ValidationReport",
    "validate_payload",
    "validate_index",
    "index_summary",
    "SearchEngine",
    "SearchHit",
    "SearchOptions",
    "LabelledQuery",
    "evaluate_queries",
    "PipelineResult",
    "run_pipeline",
]
