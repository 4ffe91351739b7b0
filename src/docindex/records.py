from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Literal, Mapping

CATEGORIES: tuple[str, ...] = (
    "page",
    "section",
    "module",
    "method",
    "function",
    "constant",
    "type",
    "macro",
)
FIELDS: tuple[str, ...] = ("location", "page", "title", "text", "category")
DEFAULT_GLOBAL_NAME = "documenterSearchIndex"

OnError = Literal["raise", "skip", "fill"]

_SIGNATURE_RE = re.compile(r"^(?P<symbol>.+?)-(?P<signature>N?Tuple\{.*\})$")


@dataclass(frozen=True)
class FragmentLocation:
    """A fragment location split into page path and in-page anchor."""

    path: str
    anchor: str
    symbol: str
    signature: str

    @classmethod
    def parse(cls, location: str) -> "FragmentLocation":
        path, _, anchor = location.partition("#")
        m = _SIGNATURE_RE.match(anchor)
        if m is not None:
            return cls(path=path, anchor=anchor, symbol=m["symbol"], signature=m["signature"])
        return cls(path=path, anchor=anchor, symbol=anchor, signature="")

    def url(self, base: str = "") -> str:
        loc = self.path if not self.anchor else f"{self.path}#{self.anchor}"
        if not base:
            return loc
        return base.rstrip("/") + "/" + loc


@dataclass(frozen=True)
class DocPageFragment:
    """One indexed unit of rendered documentation."""

    location: str
    page: str
    title: str
    text: str
    category: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, fill_missing: bool = False) -> "DocPageFragment":
        """Build a fragment from a decoded JSON object.

        With ``fill_missing=False`` every field must be present and a string.
        With ``fill_missing=True`` absent or null fields become ``""`` and
        scalars are converted with ``str``; nested containers still raise.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a JSON object for a record, got {type(data).__name__}")
        values: dict[str, str] = {}
        for name in FIELDS:
            value = data.get(name)
            if isinstance(value, str):
                values[name] = value
                continue
            if not fill_missing:
                if name not in data:
                    raise ValueError(f"Record is missing field '{name}'")
                raise ValueError(f"Field '{name}' must be a string, got {type(value).__name__}")
            if value is None:
                values[name] = ""
            elif isinstance(value, (int, float, bool)):
                values[name] = str(value)
            else:
                raise ValueError(f"Field '{name}' cannot be blank-filled from {type(value).__name__}")
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in FIELDS}

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self.location, self.page, self.title, self.category)

    @property
    def parsed_location(self) -> FragmentLocation:
        return FragmentLocation.parse(self.location)


@dataclass(frozen=True)
class SearchIndex:
    """Ordered, immutable collection of documentation fragments."""

    docs: tuple[DocPageFragment, ...]
    global_name: str | None = DEFAULT_GLOBAL_NAME

    @classmethod
    def from_records(
        cls,
        records: Iterable[DocPageFragment],
        *,
        global_name: str | None = DEFAULT_GLOBAL_NAME,
    ) -> "SearchIndex":
        return cls(docs=tuple(records), global_name=global_name)

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        on_error: OnError = "raise",
        global_name: str | None = DEFAULT_GLOBAL_NAME,
    ) -> "SearchIndex":
        """Build an index from a decoded ``{"docs": [...]}`` object.

        ``on_error`` controls malformed records: ``"raise"`` stops at the first
        one, ``"skip"`` drops it and ``"fill"`` blank-fills missing fields.
        """
        if on_error not in {"raise", "skip", "fill"}:
            raise ValueError(f"Unknown on_error mode: {on_error}")
        if not isinstance(payload, Mapping):
            raise ValueError(f"Expected a JSON object at top level, got {type(payload).__name__}")
        if "docs" not in payload:
            raise ValueError("Search index payload has no 'docs' field")
        raw = payload["docs"]
        if not isinstance(raw, list):
            raise ValueError(f"'docs' must be a list, got {type(raw).__name__}")

        docs: list[DocPageFragment] = []
        for i, item in enumerate(raw):
            try:
                docs.append(DocPageFragment.from_mapping(item, fill_missing=on_error == "fill"))
            except ValueError as exc:
                if on_error == "raise":
                    raise ValueError(f"docs[{i}]: {exc}") from exc
                # "skip", or a record "fill" could not repair
                continue
        return cls(docs=tuple(docs), global_name=global_name)

    def to_payload(self) -> dict[str, list[dict[str, str]]]:
        return {"docs": [doc.to_dict() for doc in self.docs]}

    def __len__(self) -> int:
        return len(self.docs)

    def __iter__(self) -> Iterator[DocPageFragment]:
        return iter(self.docs)

    def __getitem__(self, i: int | slice) -> DocPageFragment | tuple[DocPageFragment, ...]:
        """A fragment by position, or a tuple of fragments for a slice."""
        return self.docs[i]

    def pages(self) -> list[str]:
        """Page titles in first-seen order."""
        return list(dict.fromkeys(doc.page for doc in self.docs))

    def by_page(self) -> dict[str, list[DocPageFragment]]:
        out: dict[str, list[DocPageFragment]] = {}
        for doc in self.docs:
            out.setdefault(doc.page, []).append(doc)
        return out

    def filter(
        self,
        *,
        categories: Iterable[str] | None = None,
        pages: Iterable[str] | None = None,
    ) -> "SearchIndex":
        cats = set(categories) if categories is not None else None
        pgs = set(pages) if pages is not None else None
        kept = (
            doc
            for doc in self.docs
            if (cats is None or doc.category in cats) and (pgs is None or doc.page in pgs)
        )
        return SearchIndex(docs=tuple(kept), global_name=self.global_name)


__all__ = [
    "CATEGORIES",
    "DEFAULT_GLOBAL_NAME",
    "FIELDS",
    "DocPageFragment",
    "FragmentLocation",
    "OnError",
    "SearchIndex",
]
