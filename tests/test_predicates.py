"""Tests for the primitive predicates."""

from __future__ import annotations

import pytest

from sqlcontract import predicates


@pytest.mark.parametrize("value", ["accounts", "public.accounts", "user/name", "created-at", "_id", "amount$"])
def test_is_identifier_accepts_keyword_like_names(value: str) -> None:
    assert predicates.is_identifier(value)


@pytest.mark.parametrize("value", ["", "1st", "where name = ?", "a..b", "count(*)", 42, None])
def test_is_identifier_rejects_other_values(value: object) -> None:
    assert not predicates.is_identifier(value)


def test_is_simple_identifier_rejects_keywords_and_qualified_names() -> None:
    assert predicates.is_simple_identifier("tx")
    assert not predicates.is_simple_identifier("class")
    assert not predicates.is_simple_identifier("public.tx")


def test_is_pos_int_excludes_bools_and_non_positive() -> None:
    assert predicates.is_pos_int(5432)
    assert not predicates.is_pos_int(0)
    assert not predicates.is_pos_int(-1)
    assert not predicates.is_pos_int(True)
    assert not predicates.is_pos_int(1.0)


def test_jdbc_url_requires_prefix() -> None:
    assert predicates.is_jdbc_url("jdbc:postgres://host/db")
    assert predicates.is_jdbc_url("jdbc:sqlite:test.db")
    assert not predicates.is_jdbc_url("postgres://host/db")
    assert not predicates.is_jdbc_url("jdbc:sqlite")
    assert not predicates.is_jdbc_url(None)


def test_sequential_excludes_text() -> None:
    assert predicates.is_sequential([1])
    assert predicates.is_sequential(range(3))
    assert not predicates.is_sequential("abc")
    assert not predicates.is_sequential(b"abc")
    assert not predicates.is_sequential({1, 2})


def test_ordered_is_list_or_tuple() -> None:
    assert predicates.is_ordered([])
    assert predicates.is_ordered(())
    assert not predicates.is_ordered(range(2))


def test_accepts_arity() -> None:
    assert predicates.accepts_arity(lambda: None, (0, 1))
    assert predicates.accepts_arity(lambda tx: tx, (0, 1))
    assert predicates.accepts_arity(lambda *args: args, (0, 1))
    assert not predicates.accepts_arity(lambda a, b: a, (0, 1))
    assert not predicates.accepts_arity("not callable", (0, 1))
    assert predicates.accepts_arity(print, (0, 1))
