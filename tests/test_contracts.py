"""Tests for the entry-point argument contracts."""

from __future__ import annotations

import pytest

from sqlcontract import (
    ALL,
    ENTRY_POINTS,
    AlternationExhausted,
    ConsistencyViolation,
    Contract,
    ShapeMismatch,
    Tagged,
)

SPEC = {"dbtype": "postgresql", "dbname": "app"}


class PoolClass:
    """Stand-in for a pooled datasource class."""


def test_every_entry_point_has_a_contract(contracts: dict[str, Contract]) -> None:
    assert tuple(contracts) == ENTRY_POINTS


def test_get_datasource_accepts_descriptor_or_capability(contracts, connectable, sourceable) -> None:
    contract = contracts["get_datasource"]

    assert contract.conform((SPEC,)).arguments["spec"].label == "db_spec"
    assert contract.conform((connectable,)).arguments["spec"].label == "connectable"
    assert contract.conform((sourceable,)).arguments["spec"].label == "sourceable"


def test_get_datasource_rejects_negative_port(contracts) -> None:
    problem = contracts["get_datasource"].explain(({**SPEC, "port": -5432},))

    assert isinstance(problem, AlternationExhausted)
    assert problem.path == ("spec",)
    assert problem.position == 0


def test_get_connection_opts_are_optional(contracts) -> None:
    contract = contracts["get_connection"]

    assert contract.explain(("jdbc:h2:mem:test",)) is None
    assert contract.explain(("jdbc:h2:mem:test", {"auto_commit": False})) is None
    assert isinstance(contract.explain(("jdbc:h2:mem:test", "opts")), ShapeMismatch)


def test_prepare_requires_live_connection(contracts, conn, ds) -> None:
    contract = contracts["prepare"]

    assert contract.explain((conn, ["select 1"])) is None
    problem = contract.explain((ds, ["select 1"]))
    assert isinstance(problem, ShapeMismatch)
    assert problem.path == ("connection",)


@pytest.mark.parametrize("name", ["plan", "execute", "execute_one"])
def test_sql_entry_points_prefer_prepared_form(contracts, ps, ds, name: str) -> None:
    contract = contracts[name]

    assert contract.conform((ps,)).label == "prepared"
    assert contract.conform((ds, ["select 1"])).label == "sql"
    assert contract.conform((ds, None)).label == "sql"
    assert contract.conform((ds, ["select 1"], {"timeout": 5})).label == "sql"


@pytest.mark.parametrize("name", ["plan", "execute", "execute_one"])
def test_sql_entry_points_report_both_forms(contracts, ds, name: str) -> None:
    problem = contracts[name].explain((ds,))

    assert isinstance(problem, AlternationExhausted)
    assert problem.labels == ("prepared", "sql")
    missing = problem.reasons["sql"]
    assert isinstance(missing, ShapeMismatch)
    assert missing.missing
    assert missing.path == ("sql", "sql_params")


def test_prepared_statement_with_sql_params_falls_through_to_sql_form(contracts, ps) -> None:
    assert contracts["execute"].conform((ps, ["select 1"])).label == "sql"


def test_execute_batch_prepared_form_makes_opts_optional(contracts, ps) -> None:
    contract = contracts["execute_batch"]

    assert contract.conform((ps, [[1, "a"], [2, "b"]])).label == "prepared"
    assert contract.conform((ps, [[1, "a"]], {"batch_size": 500})).label == "prepared"


def test_execute_batch_sql_form_requires_opts(contracts, ds) -> None:
    contract = contracts["execute_batch"]
    args = (ds, "insert into t (id, name) values (?, ?)", [[1, "a"], [2, "b"]])

    problem = contract.explain(args)

    assert isinstance(problem, AlternationExhausted)
    reason = problem.reasons["sql"]
    assert isinstance(reason, ShapeMismatch)
    assert reason.missing
    assert reason.path == ("sql", "opts")
    assert reason.position == 3
    assert contract.conform(args + ({},)).label == "sql"
    assert contract.conform(args + ({"large": True},)).label == "sql"


def test_transact_requires_small_arity_callable(contracts, ds) -> None:
    contract = contracts["transact"]

    assert contract.explain((ds, lambda tx: tx)) is None
    assert contract.explain((ds, lambda: None, {"isolation": "serializable"})) is None
    assert contract.explain((ds, lambda a, b: a)) is not None
    assert contract.explain((ds, "not callable")) is not None


def test_with_transaction_binding_form(contracts, ds) -> None:
    contract = contracts["with_transaction"]

    bound = contract.conform((("tx", ds), lambda tx: tx))
    assert bound.arguments["binding"] == {"name": "tx", "transactable": ds}
    assert contract.explain((["tx", ds, {"read_only": True}],)) is None
    assert contract.explain((("1tx", ds),)) is not None
    assert contract.explain((("tx",),)) is not None
    assert contract.explain(("tx", ds)) is not None


def test_with_options_requires_opts(contracts, ds) -> None:
    contract = contracts["with_options"]

    assert contract.explain((ds, {"builder_fn": dict})) is None
    problem = contract.explain((ds,))
    assert isinstance(problem, ShapeMismatch)
    assert problem.missing
    assert problem.path == ("opts",)


@pytest.mark.parametrize("name", ["to_pool", "component"])
def test_connection_factories(contracts, name: str) -> None:
    contract = contracts[name]

    assert contract.explain((PoolClass, SPEC)) is None
    assert contract.explain((PoolClass, {"jdbcUrl": "jdbc:postgresql://db/app"}, lambda pool: None)) is None
    assert contract.explain((PoolClass(), SPEC)) is not None
    assert contract.explain((PoolClass, "jdbc:postgresql://db/app")) is not None
    assert contract.explain((PoolClass, SPEC, "close")) is not None


def test_set_parameters_and_statement(contracts, ps, conn) -> None:
    assert contracts["set_parameters"].explain((ps, [1, "a"])) is None
    assert contracts["set_parameters"].explain((ps, "1a")) is not None
    assert contracts["set_parameters"].explain((conn, [1])) is not None
    assert contracts["statement"].explain((conn,)) is None
    assert contracts["statement"].explain((conn, {"order_by": []})) is not None


def test_insert_requires_identifier_table(contracts, ds) -> None:
    contract = contracts["insert"]

    assert contract.explain((ds, "accounts", {"email": "a@example.com"})) is None
    problem = contract.explain((ds, "bad table!", {"email": "a@example.com"}))
    assert isinstance(problem, ShapeMismatch)
    assert problem.path == ("table",)
    assert problem.position == 1


def test_insert_multi_rows_must_match_columns(contracts, ds) -> None:
    contract = contracts["insert_multi"]

    assert contract.conform((ds, "accounts", ["a", "b"], [[1, 2], [3, 4]])).label == "with_rows_and_columns"
    problem = contract.explain((ds, "accounts", ["a", "b"], [[1, 2], [3]]))

    assert isinstance(problem, AlternationExhausted)
    violation = problem.reasons["with_rows_and_columns"]
    assert isinstance(violation, ConsistencyViolation)
    assert violation.details == {"columns": 2, "rows": {1: 1}}
    assert "rows" in str(violation)


def test_insert_multi_hash_maps_form(contracts, ds) -> None:
    contract = contracts["insert_multi"]

    assert contract.conform((ds, "accounts", [{"a": 1}, {"a": 2}])).label == "with_hash_maps"
    assert contract.explain((ds, "accounts", [])) is not None
    assert contract.explain((ds, "accounts", [], [])) is not None


def test_query_requires_sql_params(contracts, ds) -> None:
    contract = contracts["query"]

    assert contract.explain((ds, ["select * from accounts"], {"columns": []})) is None
    with pytest.raises(ShapeMismatch) as excinfo:
        contract.check((ds, "select * from accounts"))
    message = str(excinfo.value)
    assert "Call to 'query' did not conform" in message
    assert "sql_params" in message
    assert "argument 2" in message


@pytest.mark.parametrize(
    ("key_map", "label"),
    [
        ({"name": "x"}, "example"),
        (["where name = ?", "x"], "where"),
        (ALL, "all"),
    ],
)
def test_find_by_keys_forms(contracts, ds, key_map: object, label: str) -> None:
    arguments = contracts["find_by_keys"].conform((ds, "accounts", key_map)).arguments

    assert isinstance(arguments["key_map"], Tagged)
    assert arguments["key_map"].label == label


def test_find_by_keys_rejects_empty_example(contracts, ds) -> None:
    problem = contracts["find_by_keys"].explain((ds, "accounts", {}))

    assert isinstance(problem, AlternationExhausted)
    assert problem.path == ("key_map",)
    assert problem.labels == ("example", "where", "all")
    assert isinstance(problem.reasons["example"], ShapeMismatch)


def test_get_by_id_arity_depends_on_pk_name(contracts, ds) -> None:
    contract = contracts["get_by_id"]

    assert contract.conform((ds, "accounts", 1)).label == "with_id"
    assert contract.conform((ds, "accounts", 1, {"columns": ["id"]})).label == "with_id"
    assert contract.conform((ds, "accounts", 1, "account_id", {})).label == "pk_name"

    problem = contract.explain((ds, "accounts", 1, "account_id"))
    assert isinstance(problem, AlternationExhausted)
    assert problem.reasons["with_id"].path == ("with_id", "opts")
    pk_name = problem.reasons["pk_name"]
    assert isinstance(pk_name, ShapeMismatch)
    assert pk_name.missing
    assert pk_name.path == ("pk_name", "opts")


def test_update_and_delete_where_params(contracts, ds) -> None:
    assert contracts["update"].explain((ds, "accounts", {"status": "x"}, {"id": 1})) is None
    assert contracts["update"].explain((ds, "accounts", {"status": "x"}, ["id = ?", 1])) is None
    assert contracts["update"].explain((ds, "accounts", {"status": "x"}, {})) is not None
    assert contracts["delete"].explain((ds, "accounts", {"id": 1})) is None
    assert contracts["delete"].explain((ds, "accounts", ALL)) is not None


def test_describe_lists_alternatives(contracts) -> None:
    assert contracts["get_by_id"].describe() == (
        "get_by_id with_id: (connectable, table, pk, opts?) | pk_name: (connectable, table, pk, pk_name, opts)"
    )
    assert contracts["get_connection"].describe() == "get_connection (spec, opts?)"


def test_violation_to_dict_nests_reasons(contracts, ds) -> None:
    problem = contracts["execute"].explain((ds,))

    assert problem is not None
    data = problem.to_dict()
    assert data["kind"] == "alternation_exhausted"
    assert set(data["reasons"]) == {"prepared", "sql"}
    assert data["reasons"]["sql"]["missing"] is True
