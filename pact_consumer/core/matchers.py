"""
Matching rules for Pact contracts.

A matching rule describes what counts as a match for a value in a request or
response, instead of the literal value itself. Three rule kinds exist:

- Term: any string matching a regular expression
- EachLike: an array whose every element matches a shape
- SomethingLike: any value of the same type as the example

Rules render into the ``json_class`` keyed structure understood by the Pact
mock service and by provider-side verifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from typing_extensions import assert_never


JSON_CLASS = "json_class"
PACT_PREFIX = "Pact::"


@dataclass(frozen=True)
class Term:
    """
    Any string matching ``matcher``; ``generate`` is the canonical example.

    Precondition: ``matcher`` compiles as a regular expression.
    """
    matcher: str
    generate: Any

    def __post_init__(self) -> None:
        assert re.compile(self.matcher) is not None


@dataclass(frozen=True)
class EachLike:
    """
    An array of at least ``minimum`` elements, each one like ``value``.

    ``value`` may itself be a matcher, or a dict/list containing matchers.
    Precondition: ``minimum >= 0``.
    """
    value: Any
    minimum: int = 1

    def __post_init__(self) -> None:
        assert self.minimum >= 0, "EachLike minimum must not be negative"


@dataclass(frozen=True)
class SomethingLike:
    """Any value with the same type as ``value``; the value itself is not compared."""
    value: Any


Like = SomethingLike

Matcher = Union[Term, EachLike, SomethingLike]

RuleSection = Dict[str, Any]


def _json_class(rule: Matcher) -> RuleSection:
    if isinstance(rule, Term):
        kind = "Term"
    elif isinstance(rule, EachLike):
        kind = "ArrayLike"
    elif isinstance(rule, SomethingLike):
        kind = "SomethingLike"
    else:
        assert_never(rule)
    return {JSON_CLASS: PACT_PREFIX + kind}


def _value(rule: Matcher) -> RuleSection:
    if isinstance(rule, Term):
        return {"generate": rule.generate}
    elif isinstance(rule, (EachLike, SomethingLike)):
        return {"contents": to_json(rule.value)}
    else:
        assert_never(rule)


def _extra(rule: Matcher) -> Optional[RuleSection]:
    if isinstance(rule, Term):
        return {
            "data": {
                "generate": rule.generate,
                "matcher": {JSON_CLASS: "Regexp", "o": 0, "s": rule.matcher},
            }
        }
    elif isinstance(rule, EachLike):
        return {"min": rule.minimum}
    elif isinstance(rule, SomethingLike):
        return None
    else:
        assert_never(rule)


def rule_sections(rule: Matcher) -> Tuple[RuleSection, RuleSection, Optional[RuleSection]]:
    """Return the (json_class, value, extra) sections a rule is rendered from."""
    return _json_class(rule), _value(rule), _extra(rule)


def _merge(base: RuleSection, section: RuleSection) -> RuleSection:
    overlap = base.keys() & section.keys()
    assert not overlap, f"Matcher rule sections overlap on {sorted(overlap)}"
    merged = dict(base)
    merged.update(section)
    return merged


def render(rule: Matcher) -> Dict[str, Any]:
    """
    Render a matching rule into its canonical Pact representation.

    Examples:
        >>> render(SomethingLike(12345))
        {'json_class': 'Pact::SomethingLike', 'contents': 12345}
        >>> render(EachLike(SomethingLike("x"), minimum=2))["min"]
        2
    """
    json_class, value, extra = rule_sections(rule)
    rendered = _merge(json_class, value)
    if extra is not None:
        rendered = _merge(rendered, extra)
    return rendered


def is_matcher(value: Any) -> bool:
    return isinstance(value, (Term, EachLike, SomethingLike))


def to_json(value: Any) -> Any:
    """Recursively render any matchers nested in ``value``."""
    if is_matcher(value):
        return render(value)
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value
