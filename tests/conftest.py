"""Shared fakes standing in for the data-access layer's objects."""

from __future__ import annotations

from typing import Any, Mapping

import pytest

from sqlcontract import Capabilities, Connectable, Contract, SchemaSet, Sourceable, build_contracts


class FakeConnection:
    """Stands in for a live connection."""


class FakeDataSource:
    """Stands in for a datasource / pool."""


class FakePreparedStatement:
    """Stands in for a prepared statement."""


class FakeConnectable:
    def get_connection(self, opts: Mapping[str, Any]) -> FakeConnection:
        return FakeConnection()


class FakeSourceable:
    def get_datasource(self) -> FakeDataSource:
        return FakeDataSource()


FAKE_CAPABILITIES = Capabilities(
    is_connection=lambda value: isinstance(value, FakeConnection),
    is_datasource=lambda value: isinstance(value, FakeDataSource),
    is_prepared_statement=lambda value: isinstance(value, FakePreparedStatement),
    is_statement=lambda value: isinstance(value, FakePreparedStatement),
    is_connectable=lambda value: isinstance(value, Connectable),
    is_sourceable=lambda value: isinstance(value, Sourceable),
)


@pytest.fixture
def schemas() -> SchemaSet:
    return SchemaSet(FAKE_CAPABILITIES)


@pytest.fixture
def contracts(schemas: SchemaSet) -> dict[str, Contract]:
    return build_contracts(schemas)


@pytest.fixture
def conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def ds() -> FakeDataSource:
    return FakeDataSource()


@pytest.fixture
def ps() -> FakePreparedStatement:
    return FakePreparedStatement()


@pytest.fixture
def connectable() -> FakeConnectable:
    return FakeConnectable()


@pytest.fixture
def sourceable() -> FakeSourceable:
    return FakeSourceable()
