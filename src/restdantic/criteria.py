"""
Structural criteria used by :meth:`HasManyProxy.where`.

Plain Python data is parsed into a small tagged union before matching:

* a mapping becomes :class:`Nested` and is matched recursively,
* a list, tuple, set or frozenset becomes :class:`OneOf` (any listed value
  satisfies it),
* anything else becomes :class:`Scalar` and must compare equal.

Every pair of a criteria mapping must hold for a value to match, so an empty
mapping matches everything.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Hashable, Tuple, Union


class _Missing:
    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return False

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class OneOf:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Nested:
    criteria: Mapping[Hashable, "Criterion"]


Criterion = Union[Scalar, OneOf, Nested]

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def parse_criterion(raw: Any) -> Criterion:
    if isinstance(raw, (Scalar, OneOf, Nested)):
        return raw
    if isinstance(raw, Mapping):
        return Nested(parse_criteria(raw))
    if isinstance(raw, _SEQUENCE_TYPES):
        return OneOf(tuple(raw))
    return Scalar(raw)


def parse_criteria(raw: Mapping[Hashable, Any]) -> dict[Hashable, Criterion]:
    return {key: parse_criterion(value) for key, value in raw.items()}


def equal(found: Any, expected: Any) -> bool:
    """Equality without bool/int coercion (``True`` does not equal ``1``)."""
    if isinstance(found, bool) is not isinstance(expected, bool):
        return False
    return found == expected


def lookup(value: Any, key: Hashable) -> Any:
    if not isinstance(value, Mapping):
        return MISSING
    return value.get(key, MISSING)


def matches(value: Any, criteria: Mapping[Hashable, Criterion]) -> bool:
    """Return whether ``value`` satisfies every criterion in ``criteria``."""
    for key, criterion in criteria.items():
        if not _matches_one(value, key, criterion):
            return False
    return True


def _matches_one(value: Any, key: Hashable, criterion: Criterion) -> bool:
    if isinstance(criterion, Nested):
        # criteria nested deeper than the data never match
        if not isinstance(value, Mapping):
            return False
        return matches(lookup(value, key), criterion.criteria)
    if isinstance(criterion, OneOf):
        found = lookup(value, key)
        return found is not MISSING and any(equal(found, candidate) for candidate in criterion.values)
    if isinstance(criterion, Scalar):
        found = lookup(value, key)
        return found is not MISSING and equal(found, criterion.value)
    raise TypeError(f"Unsupported criterion {criterion!r}")
