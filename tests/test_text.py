from docindex.text import analyze, clean_text, edit_distance, make_snippet, process_term, tokenize


def test_tokenize_splits_on_space_dash_dot():
    assert tokenize("ElectromagneticFields.AxisymmetricTokamakCartesian") == [
        "ElectromagneticFields",
        "AxisymmetricTokamakCartesian",
    ]
    assert tokenize("Arnold-Beltrami-Childress (ABC)  Field") == ["Arnold", "Beltrami", "Childress", "(ABC)", "Field"]
    assert tokenize("  ") == []


def test_process_term_trims_and_keeps_julia_sigils():
    assert process_term("(ABC)") == "abc"
    assert process_term("@time") == "@time"
    assert process_term("push!") == "push!"
    assert process_term("get_vector_component") == "get_vector_component"
    assert process_term("The") is None
    assert process_term("---") is None
    assert process_term("Γ") == "γ"


def test_analyze_drops_stop_words():
    assert analyze("Returns the length of the vector v") == ["returns", "length", "vector", "v"]


def test_clean_text_removes_docstring_padding():
    assert clean_text("Returns the length\n\n\n\n\n\n") == "Returns the length"
    assert clean_text("a\n\n\n\nb") == "a\n\nb"


def test_edit_distance():
    assert edit_distance("tokamak", "tokamak") == 0
    assert edit_distance("tokamac", "tokamak") == 1
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("kitten", "sitting", max_distance=1) == 2
    assert edit_distance("a", "abcdef", max_distance=2) == 3
    assert edit_distance("", "abc") == 3


def test_make_snippet_centers_on_match():
    text = " ".join(["filler"] * 60) + " Christoffel symbol " + " ".join(["tail"] * 60)
    snip = make_snippet(text, ["christoffel"], width=80)
    assert "Christoffel" in snip
    assert snip.startswith("...")
    assert snip.endswith("...")

    short = make_snippet("Returns the Christoffel symbol\n\n\n\n\n\n", ["christoffel"])
    assert short == "Returns the Christoffel symbol"
