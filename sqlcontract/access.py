"""Data-access entry points delegating to a pluggable backend.

These functions are what instrumentation wraps. They carry no behaviour of
their own: every call is forwarded unchanged to the installed
:class:`DataAccessBackend`, which owns SQL execution, connections and
transactions.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol, runtime_checkable


class BackendNotConfigured(RuntimeError):
    """Raised when an entry point is called before a backend is installed."""


@runtime_checkable
class DataAccessBackend(Protocol):
    """Protocol implemented by data-access backends."""

    def get_datasource(self, spec: Any) -> Any: ...

    def get_connection(self, spec: Any, *args: Any) -> Any: ...

    def prepare(self, connection: Any, sql_params: Any, *args: Any) -> Any: ...

    def plan(self, *args: Any) -> Any: ...

    def execute(self, *args: Any) -> Any: ...

    def execute_one(self, *args: Any) -> Any: ...

    def execute_batch(self, *args: Any) -> Any: ...

    def transact(self, transactable: Any, f: Any, *args: Any) -> Any: ...

    def with_transaction(self, binding: Any, *body: Any) -> Any: ...

    def with_options(self, connectable: Any, opts: Any) -> Any: ...

    def to_pool(self, clazz: Any, db_spec: Any, *args: Any) -> Any: ...

    def component(self, clazz: Any, db_spec: Any, *args: Any) -> Any: ...

    def set_parameters(self, ps: Any, params: Any) -> Any: ...

    def statement(self, connection: Any, *args: Any) -> Any: ...

    def insert(self, connectable: Any, table: Any, key_map: Any, *args: Any) -> Any: ...

    def insert_multi(self, connectable: Any, table: Any, *args: Any) -> Any: ...

    def query(self, connectable: Any, sql_params: Any, *args: Any) -> Any: ...

    def find_by_keys(self, connectable: Any, table: Any, key_map: Any, *args: Any) -> Any: ...

    def get_by_id(self, connectable: Any, table: Any, pk: Any, *args: Any) -> Any: ...

    def update(self, connectable: Any, table: Any, key_map: Any, where_params: Any, *args: Any) -> Any: ...

    def delete(self, connectable: Any, table: Any, where_params: Any, *args: Any) -> Any: ...


_LOCK = threading.Lock()
_BACKEND: DataAccessBackend | None = None


def use_backend(backend: DataAccessBackend | None) -> DataAccessBackend | None:
    """Install ``backend`` for every entry point; returns the previous one."""

    global _BACKEND
    with _LOCK:
        previous, _BACKEND = _BACKEND, backend
    return previous


def current_backend() -> DataAccessBackend:
    backend = _BACKEND
    if backend is None:
        raise BackendNotConfigured("No data-access backend installed; call use_backend() first.")
    return backend


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


def _supplied(*args: Any) -> tuple[Any, ...]:
    """Drop trailing parameters the caller left at their ``_UNSET`` default.

    Optional parameters are positional: skipping one while supplying a later
    one raises :class:`TypeError` instead of forwarding the sentinel.
    """

    values = list(args)
    while values and values[-1] is _UNSET:
        values.pop()
    if any(value is _UNSET for value in values):
        raise TypeError("Optional arguments must be supplied in order; a later one was given without an earlier one")
    return tuple(values)


def get_datasource(spec: Any) -> Any:
    """Return a datasource for a connection descriptor or capability object."""

    return current_backend().get_datasource(spec)


def get_connection(spec: Any, opts: Any = _UNSET) -> Any:
    return current_backend().get_connection(*_supplied(spec, opts))


def prepare(connection: Any, sql_params: Any, opts: Any = _UNSET) -> Any:
    return current_backend().prepare(*_supplied(connection, sql_params, opts))


def plan(connectable: Any, sql_params: Any = _UNSET, opts: Any = _UNSET) -> Any:
    """Reducible plan over either a prepared statement or ``(connectable, sql_params)``."""

    return current_backend().plan(*_supplied(connectable, sql_params, opts))


def execute(connectable: Any, sql_params: Any = _UNSET, opts: Any = _UNSET) -> Any:
    return current_backend().execute(*_supplied(connectable, sql_params, opts))


def execute_one(connectable: Any, sql_params: Any = _UNSET, opts: Any = _UNSET) -> Any:
    return current_backend().execute_one(*_supplied(connectable, sql_params, opts))


def execute_batch(target: Any, *args: Any) -> Any:
    """Either ``(ps, param_groups, opts?)`` or ``(connectable, sql, param_groups, opts)``."""

    return current_backend().execute_batch(target, *args)


def transact(transactable: Any, f: Any, opts: Any = _UNSET) -> Any:
    return current_backend().transact(*_supplied(transactable, f, opts))


def with_transaction(binding: Any, *body: Any) -> Any:
    """Run ``body`` callables inside a transaction.

    ``binding`` is ``(name, transactable)`` or ``(name, transactable, opts)``;
    each body callable receives the transaction as the keyword ``name``.
    """

    return current_backend().with_transaction(binding, *body)


def with_options(connectable: Any, opts: Any) -> Any:
    return current_backend().with_options(connectable, opts)


def to_pool(clazz: Any, db_spec: Any, close_fn: Any = _UNSET) -> Any:
    return current_backend().to_pool(*_supplied(clazz, db_spec, close_fn))


def component(clazz: Any, db_spec: Any, close_fn: Any = _UNSET) -> Any:
    return current_backend().component(*_supplied(clazz, db_spec, close_fn))


def set_parameters(ps: Any, params: Any) -> Any:
    return current_backend().set_parameters(ps, params)


def statement(connection: Any, opts: Any = _UNSET) -> Any:
    return current_backend().statement(*_supplied(connection, opts))


def insert(connectable: Any, table: Any, key_map: Any, opts: Any = _UNSET) -> Any:
    return current_backend().insert(*_supplied(connectable, table, key_map, opts))


def insert_multi(connectable: Any, table: Any, *args: Any) -> Any:
    """Either ``(cols, rows, opts?)`` or ``(hash_maps, opts?)`` after the table."""

    return current_backend().insert_multi(connectable, table, *args)


def query(connectable: Any, sql_params: Any, opts: Any = _UNSET) -> Any:
    return current_backend().query(*_supplied(connectable, sql_params, opts))


def find_by_keys(connectable: Any, table: Any, key_map: Any, opts: Any = _UNSET) -> Any:
    return current_backend().find_by_keys(*_supplied(connectable, table, key_map, opts))


def get_by_id(connectable: Any, table: Any, pk: Any, *args: Any) -> Any:
    """``(pk, opts?)`` with the default key name, or ``(pk, pk_name, opts)``."""

    return current_backend().get_by_id(connectable, table, pk, *args)


def update(connectable: Any, table: Any, key_map: Any, where_params: Any, opts: Any = _UNSET) -> Any:
    return current_backend().update(*_supplied(connectable, table, key_map, where_params, opts))


def delete(connectable: Any, table: Any, where_params: Any, opts: Any = _UNSET) -> Any:
    return current_backend().delete(*_supplied(connectable, table, where_params, opts))


__all__ = [
    "BackendNotConfigured",
    "DataAccessBackend",
    "component",
    "current_backend",
    "delete",
    "execute",
    "execute_batch",
    "execute_one",
    "find_by_keys",
    "get_by_id",
    "get_connection",
    "get_datasource",
    "insert",
    "insert_multi",
    "plan",
    "prepare",
    "query",
    "set_parameters",
    "statement",
    "to_pool",
    "transact",
    "update",
    "use_backend",
    "with_options",
    "with_transaction",
]
