from __future__ import annotations

import pytest

from restdantic.criteria import MISSING, Nested, OneOf, Scalar, matches, parse_criteria

RECORD = {"foo": {"bar": 1}, "bla": 2}


@pytest.mark.parametrize(
    "criteria, expected",
    [
        ({"bla": 2}, True),
        ({"bla": [1, 2]}, True),
        ({"foo": {"bar": 1}}, True),
        ({"foo": {"bar": [1, 2]}}, True),
        ({"foo": {"bar": 2}}, False),
        ({"foo": {"bar": 2}, "bla": 2}, False),
        ({"bla": 3}, False),
        ({}, True),
    ],
)
def test_matches_documented_examples(criteria: dict, expected: bool) -> None:
    assert matches(RECORD, parse_criteria(criteria)) is expected


def test_parse_criteria_builds_tagged_values() -> None:
    parsed = parse_criteria({"a": 1, "b": [1, 2], "c": {"d": "x"}, "e": "text", "f": (3,)})

    assert parsed["a"] == Scalar(1)
    assert parsed["b"] == OneOf((1, 2))
    assert parsed["c"] == Nested({"d": Scalar("x")})
    # strings are scalars, not sequences of characters
    assert parsed["e"] == Scalar("text")
    assert parsed["f"] == OneOf((3,))


def test_parse_criteria_keeps_prebuilt_criteria() -> None:
    criterion = OneOf(("open", "closed"))
    assert parse_criteria({"status": criterion})["status"] is criterion


def test_missing_key_never_matches() -> None:
    assert not matches(RECORD, parse_criteria({"absent": None}))
    assert not matches(RECORD, parse_criteria({"absent": [None, 1]}))
    assert not matches(RECORD, parse_criteria({"foo": {"absent": 1}}))


def test_criteria_nested_deeper_than_data_fails() -> None:
    assert not matches(RECORD, parse_criteria({"bla": {"deeper": 2}}))
    assert not matches(RECORD, parse_criteria({"foo": {"bar": {"baz": 1}}}))


def test_equality_is_not_coerced() -> None:
    assert not matches(RECORD, parse_criteria({"bla": "2"}))
    assert not matches({"flag": None}, parse_criteria({"flag": False}))
    assert not matches({"active": True}, parse_criteria({"active": 1}))
    assert not matches({"active": 0}, parse_criteria({"active": False}))
    assert not matches({"visibility": 1}, parse_criteria({"visibility": [True]}))
    assert matches({"active": True}, parse_criteria({"active": [True, 1]}))
    assert matches({"ratio": 1.0}, parse_criteria({"ratio": 1}))


def test_missing_sentinel_equals_nothing() -> None:
    assert MISSING != MISSING
    assert MISSING not in (None, 0, "")
