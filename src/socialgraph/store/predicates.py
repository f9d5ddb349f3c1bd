"""Structured filter predicates understood by the store.

Predicates name model attributes, never SQL. The relational store compiles
them to SQLAlchemy expressions; fakes used in tests can evaluate them in
memory with :func:`matches`.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Eq:
    """``field == value``"""

    field: str
    value: Any


@dataclass(frozen=True)
class In:
    """``field in values``"""

    field: str
    values: Sequence[Any]


@dataclass(frozen=True)
class RelatedExists:
    """At least one record reachable through ``relation`` matches ``where``."""

    relation: str
    where: "Predicate"


@dataclass(frozen=True)
class And:
    """Every nested predicate holds."""

    predicates: tuple["Predicate", ...]

    def __init__(self, *predicates: "Predicate"):
        object.__setattr__(self, "predicates", tuple(predicates))


Predicate = Eq | In | RelatedExists | And


def matches(record: Any, predicate: Predicate) -> bool:
    """Evaluate a predicate against an in-memory record."""
    if isinstance(predicate, Eq):
        return getattr(record, predicate.field) == predicate.value
    if isinstance(predicate, In):
        return getattr(record, predicate.field) in predicate.values
    if isinstance(predicate, RelatedExists):
        related = getattr(record, predicate.relation) or []
        if not isinstance(related, list | tuple):
            related = [related]
        return any(matches(item, predicate.where) for item in related)
    if isinstance(predicate, And):
        return all(matches(record, p) for p in predicate.predicates)
    raise TypeError(f"Unsupported predicate: {predicate!r}")
