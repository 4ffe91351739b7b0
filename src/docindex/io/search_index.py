from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from docindex.records import DEFAULT_GLOBAL_NAME, DocPageFragment, OnError, SearchIndex

FORMATS = ("js", "json", "jsonl")

# `var NAME = `, `const NAME = `, `window.NAME = ` ...
_ASSIGN_RE = re.compile(
    r"^\s*(?:(?:var|let|const)\s+)?"
    r"(?P<name>[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*=\s*"
)


def _resolve_format(path: Path, format: str | None) -> str:
    fmt = (format or path.suffix.lstrip(".")).lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported search index format: {fmt}")
    return fmt


def _split_assignment(text: str) -> tuple[str | None, str]:
    text = text.lstrip("\ufeff")
    m = _ASSIGN_RE.match(text)
    if m is None:
        return None, text.strip()
    name = m["name"].rsplit(".", 1)[-1]
    body = text[m.end():].strip()
    if body.endswith(";"):
        body = body[:-1].rstrip()
    return name, body


def _record_json(doc: DocPageFragment) -> str:
    return json.dumps(doc.to_dict(), ensure_ascii=False, separators=(",", ":"))


def decode_search_index(text: str, *, format: str = "js") -> tuple[str | None, Any]:
    """Decode raw text into ``(global_name, payload)`` without checking records."""
    fmt = format.lower()
    if fmt == "js":
        name, body = _split_assignment(text)
        if not body.startswith("{"):
            raise ValueError("Search index does not contain a JSON object")
        try:
            return name, json.loads(body)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Malformed search index JSON: {exc}") from exc
    if fmt == "json":
        try:
            return None, json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Malformed search index JSON: {exc}") from exc
    if fmt == "jsonl":
        docs = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                docs.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise ValueError(f"Malformed JSON on line {lineno}: {exc}") from exc
        return None, {"docs": docs}
    raise ValueError(f"Unsupported search index format: {format}")


def parse_search_index(text: str, *, format: str = "js", on_error: OnError = "raise") -> SearchIndex:
    """Parse search index text into a :class:`SearchIndex`.

    The ``js`` form is the generator's ``var documenterSearchIndex = {...}``
    assignment; a bare JSON object is accepted too and yields
    ``global_name=None``.
    """
    name, payload = decode_search_index(text, format=format)
    return SearchIndex.from_payload(payload, on_error=on_error, global_name=name)


def dumps_search_index(
    index: SearchIndex,
    *,
    format: str = "js",
    global_name: str | None = None,
) -> str:
    """Serialize an index. ``js`` output matches the generator's layout exactly."""
    fmt = format.lower()
    if fmt == "js":
        name = global_name or index.global_name or DEFAULT_GLOBAL_NAME
        body = ",".join(_record_json(doc) for doc in index.docs)
        return f'var {name} = {{"docs":\n[{body}]\n}}\n'
    if fmt == "json":
        return json.dumps(index.to_payload(), ensure_ascii=False, indent=2) + "\n"
    if fmt == "jsonl":
        return "".join(_record_json(doc) + "\n" for doc in index.docs)
    raise ValueError(f"Unsupported search index format: {format}")


def load_payload(path: str | Path, *, format: str | None = None) -> tuple[str | None, Any]:
    path = Path(path)
    fmt = _resolve_format(path, format)
    return decode_search_index(path.read_text(encoding="utf-8"), format=fmt)


def load_search_index(
    path: str | Path,
    *,
    format: str | None = None,
    on_error: OnError = "raise",
    verbose: bool = False,
) -> SearchIndex:
    """Load a search index file with format autodetection."""
    path = Path(path)
    fmt = _resolve_format(path, format)
    name, payload = decode_search_index(path.read_text(encoding="utf-8"), format=fmt)
    index = SearchIndex.from_payload(payload, on_error=on_error, global_name=name)
    if verbose:
        raw = payload.get("docs") if isinstance(payload, dict) else None
        n_raw = len(raw) if isinstance(raw, list) else 0
        print(f"[LOAD] {path}: format={fmt}, global={name}, records={len(index)}")
        if n_raw != len(index):
            print(f"[LOAD] dropped {n_raw - len(index)} malformed records (on_error={on_error})")
    return index


def save_search_index(
    index: SearchIndex,
    path: str | Path,
    *,
    format: str | None = None,
    global_name: str | None = None,
) -> Path:
    path = Path(path)
    fmt = _resolve_format(path, format)
    path.write_text(dumps_search_index(index, format=fmt, global_name=global_name), encoding="utf-8", newline="\n")
    return path
