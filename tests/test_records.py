import pytest

from docindex.records import FIELDS, DocPageFragment, FragmentLocation, SearchIndex

SAMPLE = {
    "location": "analytic/#Analytic-Fields",
    "page": "Analytic Fields",
    "title": "Analytic Fields",
    "text": "",
    "category": "section",
}


def _frag(location: str, page: str, title: str = "", text: str = "", category: str = "page") -> DocPageFragment:
    return DocPageFragment(location=location, page=page, title=title, text=text, category=category)


def test_sample_record_parses():
    frag = DocPageFragment.from_mapping(SAMPLE)
    assert frag.category == "section"
    assert frag.text == ""
    assert frag.to_dict() == SAMPLE
    assert list(frag.to_dict()) == list(FIELDS)


def test_missing_field_raises():
    data = {k: v for k, v in SAMPLE.items() if k != "text"}
    with pytest.raises(ValueError, match="missing field 'text'"):
        DocPageFragment.from_mapping(data)


def test_non_string_field_raises():
    with pytest.raises(ValueError, match="'title' must be a string"):
        DocPageFragment.from_mapping({**SAMPLE, "title": 3})


def test_fill_missing_blank_fills():
    frag = DocPageFragment.from_mapping(
        {"location": "x/", "page": 3, "title": None, "category": "page"},
        fill_missing=True,
    )
    assert frag.page == "3"
    assert frag.title == ""
    assert frag.text == ""


def test_fill_missing_rejects_containers():
    with pytest.raises(ValueError, match="cannot be blank-filled"):
        DocPageFragment.from_mapping({**SAMPLE, "text": ["a", "b"]}, fill_missing=True)


def test_location_with_method_signature():
    loc = FragmentLocation.parse("modules/#ElectromagneticFields.normalize-Tuple{Any,Any}")
    assert loc.path == "modules/"
    assert loc.symbol == "ElectromagneticFields.normalize"
    assert loc.signature == "Tuple{Any,Any}"

    loc = FragmentLocation.parse("modules/#ElectromagneticFields.Γ-NTuple{6,Any}")
    assert loc.symbol == "ElectromagneticFields.Γ"
    assert loc.signature == "NTuple{6,Any}"


def test_location_section_and_empty():
    loc = FragmentLocation.parse("analytic/#Arnold-Beltrami-Childress-(ABC)-Field")
    assert loc.anchor == "Arnold-Beltrami-Childress-(ABC)-Field"
    assert loc.symbol == loc.anchor
    assert loc.signature == ""

    empty = FragmentLocation.parse("")
    assert empty.path == ""
    assert empty.anchor == ""
    assert _frag("analytic/", "Analytic Fields").parsed_location.anchor == ""


def test_location_url():
    loc = FragmentLocation.parse("analytic/#Theta-Pinch")
    assert loc.url() == "analytic/#Theta-Pinch"
    assert loc.url("https://example.org/dev/") == "https://example.org/dev/analytic/#Theta-Pinch"


def test_from_payload_error_modes():
    bad = {k: v for k, v in SAMPLE.items() if k != "text"}
    payload = {"docs": [SAMPLE, bad]}

    with pytest.raises(ValueError, match=r"docs\[1\]"):
        SearchIndex.from_payload(payload)

    skipped = SearchIndex.from_payload(payload, on_error="skip")
    assert len(skipped) == 1

    filled = SearchIndex.from_payload(payload, on_error="fill")
    assert len(filled) == 2
    assert filled[1].text == ""
    assert filled[1].location == SAMPLE["location"]


def test_from_payload_rejects_bad_shapes():
    with pytest.raises(ValueError, match="no 'docs'"):
        SearchIndex.from_payload({"pages": []})
    with pytest.raises(ValueError, match="must be a list"):
        SearchIndex.from_payload({"docs": {"a": 1}})
    with pytest.raises(ValueError, match="top level"):
        SearchIndex.from_payload([SAMPLE])
    with pytest.raises(ValueError, match="on_error"):
        SearchIndex.from_payload({"docs": []}, on_error="ignore")


def test_grouping_and_filter_keep_order():
    index = SearchIndex.from_records(
        [
            _frag("b/", "B", "B"),
            _frag("a/#x", "A", "x", category="section"),
            _frag("b/#f", "B", "f", category="function"),
            _frag("a/", "A", "A"),
        ]
    )
    assert index.pages() == ["B", "A"]
    assert [d.location for d in index.by_page()["B"]] == ["b/", "b/#f"]

    sub = index.filter(categories=["page", "function"], pages=["B"])
    assert [d.location for d in sub] == ["b/", "b/#f"]
    assert sub.global_name == index.global_name

    assert index[1].title == "x"
    assert [d.location for d in index[1:3]] == ["a/#x", "b/#f"]


def test_structural_equality():
    a = SearchIndex.from_payload({"docs": [SAMPLE]})
    b = SearchIndex.from_payload({"docs": [dict(SAMPLE)]})
    assert a == b
    assert a.to_payload() == {"docs": [SAMPLE]}
