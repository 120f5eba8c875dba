"""Argument-list contracts for every instrumentable entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .errors import AlternationExhausted, ContractViolation
from .predicates import accepts_arity
from .schemas import SchemaSet
from .shapes import (
    ANYTHING,
    CALLABLE,
    CLASS,
    IDENTIFIER,
    SIMPLE_IDENTIFIER,
    STRING,
    Cat,
    ConsistencyCheck,
    Consistent,
    Kind,
    MatchResult,
    Nilable,
    Param,
    Predicate,
    Shape,
    opt,
    req,
    rest,
)

ENTRY_POINTS: tuple[str, ...] = (
    "get_datasource",
    "get_connection",
    "prepare",
    "plan",
    "execute",
    "execute_one",
    "execute_batch",
    "transact",
    "with_transaction",
    "with_options",
    "to_pool",
    "component",
    "set_parameters",
    "statement",
    "insert",
    "insert_multi",
    "query",
    "find_by_keys",
    "get_by_id",
    "update",
    "delete",
)


class ArgumentAlternative:
    """One acceptable call form: an ordered list of positional parameters."""

    def __init__(
        self,
        label: str,
        *params: Param,
        consistency: Sequence[tuple[str, ConsistencyCheck]] = (),
    ) -> None:
        self.label = label
        self.params = params
        shape: Shape = Cat(*params, kind=None, track_position=True)
        for description, check in consistency:
            shape = Consistent(shape, check, description)
        self.shape = shape

    def signature(self) -> str:
        return "(" + ", ".join(param.render() for param in self.params) + ")"

    def match(self, args: Sequence[Any], path: tuple[str, ...] = ()) -> MatchResult:
        return self.shape.match(tuple(args), path)


@dataclass(frozen=True, slots=True)
class CallMatch:
    """Conformed call: which alternative matched and the bound arguments."""

    label: str | None
    arguments: Mapping[str, Any]


class Contract:
    """Immutable argument contract for one entry point.

    Alternatives are tried in declared order and the first full match wins,
    so ambiguous calls always resolve the same way.
    """

    def __init__(self, name: str, *alternatives: ArgumentAlternative) -> None:
        if not alternatives:
            raise ValueError(f"Contract '{name}' needs at least one alternative")
        self.name = name
        self.alternatives = alternatives

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(alternative.label for alternative in self.alternatives)

    def match(self, args: Sequence[Any]) -> MatchResult:
        if len(self.alternatives) == 1:
            alternative = self.alternatives[0]
            result = alternative.match(args)
            if result.ok:
                return MatchResult(CallMatch(None, result.value))
            return result
        reasons: dict[str, ContractViolation] = {}
        for alternative in self.alternatives:
            result = alternative.match(args, (alternative.label,))
            if result.ok:
                return MatchResult(CallMatch(alternative.label, result.value))
            assert result.problem is not None
            reasons[alternative.label] = result.problem
        return MatchResult(problem=AlternationExhausted((), reasons, tuple(args)))

    def explain(self, args: Sequence[Any]) -> ContractViolation | None:
        return self.match(args).problem

    def conform(self, args: Sequence[Any]) -> CallMatch:
        result = self.match(args)
        if result.problem is not None:
            result.problem.entry_point = self.name
            raise result.problem
        return result.value

    def check(self, args: Sequence[Any]) -> None:
        """Raise the violation report if ``args`` do not conform."""

        self.conform(args)

    def describe(self) -> str:
        forms = [
            f"{alternative.label}: {alternative.signature()}" if len(self.alternatives) > 1 else alternative.signature()
            for alternative in self.alternatives
        ]
        return f"{self.name} " + " | ".join(forms)

    def __repr__(self) -> str:
        return f"<Contract {self.describe()}>"


def _rows_match_columns(arguments: Mapping[str, Any]) -> dict[str, Any]:
    width = len(arguments["cols"])
    offending = {
        index: len(row)
        for index, row in enumerate(arguments["rows"])
        if len(row) != width
    }
    if not offending:
        return {}
    return {"columns": width, "rows": offending}


def build_contracts(schemas: SchemaSet | None = None) -> dict[str, Contract]:
    """Build the contract of every entry point, keyed by entry point name."""

    s = schemas or SchemaSet()
    opts = opt("opts", s.opts_map)
    transact_fn = Predicate(lambda value: accepts_arity(value, (0, 1)), "a callable taking zero or one argument")

    def sql_forms(name: str) -> Contract:
        return Contract(
            name,
            ArgumentAlternative("prepared", req("stmt", s.statement)),
            ArgumentAlternative(
                "sql",
                req("connectable", s.connectable),
                req("sql_params", Nilable(s.sql_params)),
                opts,
            ),
        )

    def factory(name: str) -> Contract:
        return Contract(
            name,
            ArgumentAlternative(
                "args",
                req("clazz", CLASS),
                req("db_spec", s.db_spec_or_jdbc),
                opt("close_fn", CALLABLE),
            ),
        )

    contracts = [
        Contract("get_datasource", ArgumentAlternative("args", req("spec", s.proto_connectable))),
        Contract("get_connection", ArgumentAlternative("args", req("spec", s.proto_connectable), opts)),
        Contract(
            "prepare",
            ArgumentAlternative("args", req("connection", s.connection), req("sql_params", s.sql_params), opts),
        ),
        sql_forms("plan"),
        sql_forms("execute"),
        sql_forms("execute_one"),
        Contract(
            "execute_batch",
            ArgumentAlternative(
                "prepared",
                req("ps", s.prepared_statement),
                req("param_groups", s.param_groups),
                opt("opts", s.batch_opts),
            ),
            ArgumentAlternative(
                "sql",
                req("connectable", s.connectable),
                req("sql", STRING),
                req("param_groups", s.param_groups),
                req("opts", s.batch_opts),
            ),
        ),
        Contract(
            "transact",
            ArgumentAlternative("args", req("transactable", s.transactable), req("f", transact_fn), opts),
        ),
        Contract(
            "with_transaction",
            ArgumentAlternative(
                "args",
                req(
                    "binding",
                    Cat(
                        req("name", SIMPLE_IDENTIFIER),
                        req("transactable", s.transactable),
                        opts,
                        kind=Kind.ORDERED,
                    ),
                ),
                rest("body", ANYTHING),
            ),
        ),
        Contract(
            "with_options",
            ArgumentAlternative("args", req("connectable", s.connectable), req("opts", s.opts_map)),
        ),
        factory("to_pool"),
        factory("component"),
        Contract(
            "set_parameters",
            ArgumentAlternative("args", req("ps", s.prepared_statement), req("params", s.params)),
        ),
        Contract("statement", ArgumentAlternative("args", req("connection", s.connection), opts)),
        Contract(
            "insert",
            ArgumentAlternative(
                "args",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("key_map", s.key_map),
                opts,
            ),
        ),
        Contract(
            "insert_multi",
            ArgumentAlternative(
                "with_rows_and_columns",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("cols", s.column_names),
                req("rows", s.rows),
                opts,
                consistency=[("every row must have one value per column", _rows_match_columns)],
            ),
            ArgumentAlternative(
                "with_hash_maps",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("hash_maps", s.hash_maps),
                opts,
            ),
        ),
        Contract(
            "query",
            ArgumentAlternative("args", req("connectable", s.connectable), req("sql_params", s.sql_params), opts),
        ),
        Contract(
            "find_by_keys",
            ArgumentAlternative(
                "args",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("key_map", s.key_map_or_all),
                opts,
            ),
        ),
        Contract(
            "get_by_id",
            ArgumentAlternative(
                "with_id",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("pk", ANYTHING),
                opts,
            ),
            ArgumentAlternative(
                "pk_name",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("pk", ANYTHING),
                req("pk_name", IDENTIFIER),
                req("opts", s.opts_map),
            ),
        ),
        Contract(
            "update",
            ArgumentAlternative(
                "args",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("key_map", s.key_map),
                req("where_params", s.where_params),
                opts,
            ),
        ),
        Contract(
            "delete",
            ArgumentAlternative(
                "args",
                req("connectable", s.connectable),
                req("table", IDENTIFIER),
                req("where_params", s.where_params),
                opts,
            ),
        ),
    ]
    return {contract.name: contract for contract in contracts}


__all__ = [
    "ArgumentAlternative",
    "CallMatch",
    "Contract",
    "ENTRY_POINTS",
    "build_contracts",
]
