import re

import pytest

from pact_consumer.core.matchers import (
    EachLike,
    Like,
    SomethingLike,
    Term,
    is_matcher,
    render,
    rule_sections,
    to_json,
)


def test_something_like_renders_contents():
    assert render(SomethingLike(12345)) == {
        "json_class": "Pact::SomethingLike",
        "contents": 12345,
    }


def test_like_is_something_like():
    assert Like is SomethingLike
    assert render(Like("abc")) == render(SomethingLike("abc"))


def test_each_like_renders_nested_rule_and_min():
    assert render(EachLike(SomethingLike("x"), minimum=2)) == {
        "json_class": "Pact::ArrayLike",
        "contents": {"json_class": "Pact::SomethingLike", "contents": "x"},
        "min": 2,
    }


@pytest.mark.parametrize("minimum", [0, 1, 5])
def test_each_like_min_and_contents(minimum):
    element = Term(r"^\d+$", "42")
    rendered = render(EachLike(element, minimum=minimum))
    assert rendered["min"] == minimum
    assert rendered["contents"] == render(element)


def test_each_like_defaults_to_one_element():
    assert render(EachLike({"id": 1}))["min"] == 1


def test_term_renders_generate_and_regexp_data():
    rendered = render(Term(r"^[SIR]$", "S"))
    assert rendered == {
        "json_class": "Pact::Term",
        "generate": "S",
        "data": {
            "generate": "S",
            "matcher": {"json_class": "Regexp", "o": 0, "s": r"^[SIR]$"},
        },
    }


@pytest.mark.parametrize("pattern, example", [
    (r"\d{4}-\d{2}-\d{2}", "2020-04-15"),
    (r"^[a-z]+$", "account"),
    (r".*", ""),
])
def test_term_carries_pattern_with_zero_options(pattern, example):
    rendered = render(Term(pattern, example))
    assert rendered["generate"] == example
    assert rendered["data"]["matcher"]["s"] == pattern
    assert rendered["data"]["matcher"]["o"] == 0


def test_render_is_pure():
    rule = EachLike({"name": Like("Jane"), "tags": EachLike(Term(r"\w+", "tag"))}, minimum=3)
    first = render(rule)
    render(SomethingLike(1))
    second = render(EachLike({"name": Like("Jane"), "tags": EachLike(Term(r"\w+", "tag"))}, minimum=3))
    assert first == second


@pytest.mark.parametrize("rule", [
    Term(r"^\d+$", "1"),
    EachLike(SomethingLike(1), minimum=2),
    SomethingLike({"a": 1}),
])
def test_rule_sections_never_share_keys(rule):
    json_class, value, extra = rule_sections(rule)
    sections = [set(json_class), set(value)] + ([set(extra)] if extra is not None else [])

    for i, keys in enumerate(sections):
        for other in sections[i + 1:]:
            assert not keys & other

    assert set(render(rule)) == set().union(*sections)


def test_section_key_sets_per_rule_kind():
    assert [sorted(s) if s is not None else None for s in rule_sections(Term("a", "a"))] == [
        ["json_class"], ["generate"], ["data"]
    ]
    assert [sorted(s) if s is not None else None for s in rule_sections(EachLike(1))] == [
        ["json_class"], ["contents"], ["min"]
    ]
    assert [sorted(s) if s is not None else None for s in rule_sections(SomethingLike(1))] == [
        ["json_class"], ["contents"], None
    ]


def test_each_like_rejects_negative_minimum():
    with pytest.raises(AssertionError):
        EachLike(1, minimum=-1)


def test_term_rejects_invalid_pattern():
    with pytest.raises(re.error):
        Term("([unclosed", "x")


def test_to_json_renders_matchers_in_nested_structures():
    body = {
        "account": {"id": Like(1), "roles": [Term("admin|user", "user"), "static"]},
        "items": (Like("a"),),
        "count": 2,
    }
    assert to_json(body) == {
        "account": {
            "id": {"json_class": "Pact::SomethingLike", "contents": 1},
            "roles": [render(Term("admin|user", "user")), "static"],
        },
        "items": [{"json_class": "Pact::SomethingLike", "contents": "a"}],
        "count": 2,
    }


def test_something_like_renders_nested_matchers_in_contents():
    rendered = render(SomethingLike({"id": Term(r"\d+", "7")}))
    assert rendered["contents"]["id"]["json_class"] == "Pact::Term"


def test_is_matcher():
    assert is_matcher(Like(1))
    assert is_matcher(EachLike(1))
    assert is_matcher(Term("a", "a"))
    assert not is_matcher({"json_class": "Pact::SomethingLike"})
