"""Data-driven relevance and confidence scoring.

A scoring policy is an ordered tuple of ``ScoringRule``; the first rule whose
predicate holds decides the score.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ScoringRule:
    """A named ``(predicate, score)`` pair."""

    name: str
    predicate: Callable[..., bool]
    score: float

    def __post_init__(self) -> None:
        if not (0 <= self.score <= 1):
            msg = f"rule {self.name!r} score must be between 0 and 1, got {self.score}"
            raise ValueError(msg)


def first_match(rules: Iterable[ScoringRule], *args: Any, default: float | None = None) -> float | None:
    """Evaluate rules in order and return the score of the first one that applies."""
    for rule in rules:
        if rule.predicate(*args):
            return rule.score
    return default


# Name matching: (candidate, query) -> bool, both already lower-cased.
NAME_MATCH_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("exact", lambda name, query: name == query, 1.0),
    ScoringRule("prefix", lambda name, query: name.startswith(query), 0.9),
    ScoringRule("substring", lambda name, query: query in name, 0.7),
)


def _address_values(address: Any) -> list[str]:
    if not isinstance(address, Mapping):
        return []
    return [str(v).lower() for v in address.values() if v is not None]


# External geocoder confidence: (display_name, address, query) -> bool, strings lower-cased.
EXTERNAL_CONFIDENCE_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("display_name_contains", lambda display, _address, query: query in display, 0.9),
    ScoringRule(
        "component_equals",
        lambda _display, address, query: any(v == query for v in _address_values(address)),
        0.8,
    ),
    ScoringRule(
        "component_contains",
        lambda _display, address, query: any(query in v for v in _address_values(address)),
        0.7,
    ),
)
EXTERNAL_CONFIDENCE_FLOOR = 0.6

# Resolver confidence for a static match: (canonical_name, query) -> bool.
STATIC_CONFIDENCE_RULES: tuple[ScoringRule, ...] = (ScoringRule("exact", lambda name, query: name == query, 1.0),)
STATIC_PARTIAL_CONFIDENCE = 0.8


def score_name(names: Iterable[str], query: str) -> tuple[float, str] | None:
    """Score a record's names against a query; the best-scoring name wins.

    Args:
        names: Canonical name first, then variants (original casing).
        query: Normalized (trimmed, lower-cased) query.

    Returns:
        ``(score, matched_name)`` or None when no name matches.
    """
    best: tuple[float, str] | None = None
    for name in names:
        score = first_match(NAME_MATCH_RULES, name.lower(), query)
        if score is not None and (best is None or score > best[0]):
            best = (score, name)
    return best
