from __future__ import annotations

from .search_index import (
    FORMATS,
    decode_search_index,
    dumps_search_index,
    load_payload,
    load_search_index,
    parse_search_index,
    save_search_index,
)

__all__ = [
    "FORMATS",
    "decode_search_index",
    "dumps_search_index",
    "load_payload",
    "load_search_index",
    "parse_search_index",
    "save_search_index",
]
