"""Atomic, total shape predicates."""

from __future__ import annotations

import inspect
import keyword
import re
from collections.abc import Mapping, Sequence

_JDBC_URL = re.compile(r"^jdbc:[^:]+:")
_IDENTIFIER = re.compile(r"^[^\W\d][\w$-]*(?:[./][^\W\d][\w$-]*)*$")
_TEXT_TYPES = (str, bytes, bytearray)


def is_string(value: object) -> bool:
    return isinstance(value, str)


def is_pos_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_boolean(value: object) -> bool:
    return isinstance(value, bool)


def is_identifier(value: object) -> bool:
    """Keyword-like name for tables, columns and option keys.

    Segments may be qualified with ``.`` or ``/`` (``public.accounts``).
    """

    return isinstance(value, str) and _IDENTIFIER.match(value) is not None


def is_simple_identifier(value: object) -> bool:
    """Unqualified name usable as a Python binding."""

    return isinstance(value, str) and value.isidentifier() and not keyword.iskeyword(value)


def is_jdbc_url(value: object) -> bool:
    """JDBC URLs begin with ``jdbc:``, the dbtype and a second colon.

    The ``jdbc:`` prefix is mandatory: ``postgres://host/db`` is not a
    JDBC URL.
    """

    return isinstance(value, str) and _JDBC_URL.search(value) is not None


def is_callable(value: object) -> bool:
    return callable(value)


def is_class(value: object) -> bool:
    return inspect.isclass(value)


def is_mapping(value: object) -> bool:
    return isinstance(value, Mapping)


def is_ordered(value: object) -> bool:
    """Concrete indexed collection (list or tuple)."""

    return isinstance(value, (list, tuple))


def is_sequential(value: object) -> bool:
    """Any sequence that is not text."""

    return isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES)


def accepts_arity(value: object, counts: Sequence[int]) -> bool:
    """Whether ``value`` can be called with any of ``counts`` positional args.

    Callables whose signature cannot be introspected are given the benefit
    of the doubt.
    """

    if not callable(value):
        return False
    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        return True
    for count in counts:
        try:
            signature.bind(*range(count))
        except TypeError:
            continue
        return True
    return False


__all__ = [
    "accepts_arity",
    "is_boolean",
    "is_callable",
    "is_class",
    "is_identifier",
    "is_jdbc_url",
    "is_mapping",
    "is_ordered",
    "is_pos_int",
    "is_sequential",
    "is_simple_identifier",
    "is_string",
]
