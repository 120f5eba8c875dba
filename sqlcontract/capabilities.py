"""Boundary checks supplied by the data-access layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

import asyncpg
from asyncpg.prepared_stmt import PreparedStatement

CapabilityCheck = Callable[[object], bool]


@runtime_checkable
class Connectable(Protocol):
    """Objects that can hand out a live connection."""

    def get_connection(self, opts: Mapping[str, Any]) -> Any: ...


@runtime_checkable
class Sourceable(Protocol):
    """Objects that can produce a datasource."""

    def get_datasource(self) -> Any: ...


def _is_connection(value: object) -> bool:
    return isinstance(value, asyncpg.Connection)


def _is_datasource(value: object) -> bool:
    return isinstance(value, asyncpg.Pool)


def _is_prepared_statement(value: object) -> bool:
    return isinstance(value, PreparedStatement)


def _is_connectable(value: object) -> bool:
    return _is_connection(value) or _is_datasource(value) or isinstance(value, Connectable)


def _is_sourceable(value: object) -> bool:
    return isinstance(value, Sourceable)


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Identity/capability predicates the schemas delegate to.

    Nothing here is structural: each check asks the data-access layer
    whether a value *is* a connection, datasource, statement and so on.
    """

    is_connection: CapabilityCheck = _is_connection
    is_datasource: CapabilityCheck = _is_datasource
    is_prepared_statement: CapabilityCheck = _is_prepared_statement
    is_statement: CapabilityCheck = _is_prepared_statement
    is_connectable: CapabilityCheck = _is_connectable
    is_sourceable: CapabilityCheck = _is_sourceable


def default_capabilities() -> Capabilities:
    """Capabilities recognising asyncpg objects and the protocols above."""

    return Capabilities()


__all__ = [
    "Capabilities",
    "CapabilityCheck",
    "Connectable",
    "Sourceable",
    "default_capabilities",
]
