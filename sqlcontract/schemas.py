"""Named, reusable argument schemas shared by the entry-point contracts."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

from . import predicates
from .capabilities import Capabilities, default_capabilities
from .shapes import (
    ANYTHING,
    IDENTIFIER,
    JDBC_URL,
    MAPPING,
    STRING,
    AllOf,
    Cat,
    Kind,
    Literal,
    MapOf,
    Keys,
    Model,
    OneOf,
    Predicate,
    SeqOf,
    req,
    rest,
)

ALL = "all"
DIRECTIONS = ("asc", "desc")

PositivePort = Annotated[StrictInt, Field(gt=0)]


class DbSpecMap(BaseModel):
    """Structured connection descriptor."""

    model_config = ConfigDict(strict=True, extra="ignore")

    dbtype: StrictStr = Field(description="a database type name")
    dbname: StrictStr = Field(description="a database name")
    # Optional keys may be omitted but not set to None; only host has a "no host" value.
    classname: StrictStr = Field(default=None)
    user: StrictStr = Field(default=None)
    password: StrictStr = Field(default=None)
    host: StrictStr | None = None
    port: PositivePort = Field(default=None)
    dbname_separator: StrictStr = Field(default=None)
    host_prefix: StrictStr = Field(default=None)


class JdbcUrlMap(BaseModel):
    """Connection descriptor wrapping a JDBC URL."""

    model_config = ConfigDict(strict=True, extra="ignore")

    jdbc_url: StrictStr = Field(alias="jdbcUrl", description="a JDBC URL starting with 'jdbc:<dbtype>:'")

    @field_validator("jdbc_url")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if not predicates.is_jdbc_url(value):
            raise ValueError("a JDBC URL starting with 'jdbc:<dbtype>:'")
        return value


class BatchOpts(BaseModel):
    """Options accepted by batch execution."""

    model_config = ConfigDict(strict=True, extra="ignore")

    batch_size: Annotated[StrictInt, Field(gt=0)] = Field(default=None)
    large: StrictBool = Field(default=None)


class SchemaSet:
    """Every named schema, bound to one set of capability checks."""

    def __init__(self, capabilities: Capabilities | None = None) -> None:
        caps = capabilities or default_capabilities()
        self.capabilities = caps

        self.connection = Predicate(caps.is_connection, "a live connection")
        self.datasource = Predicate(caps.is_datasource, "a datasource")
        self.prepared_statement = Predicate(caps.is_prepared_statement, "a prepared statement")
        self.statement = Predicate(caps.is_statement, "a statement")
        self.connectable = ANYTHING
        self.transactable = ANYTHING

        self.jdbc_url = JDBC_URL
        self.db_spec_map = Model(DbSpecMap, "db-spec mapping with dbtype and dbname")
        self.jdbc_url_map = Model(JdbcUrlMap, "mapping with a jdbcUrl")
        self.db_spec = OneOf(
            "connection descriptor",
            db_spec=self.db_spec_map,
            jdbc_url=self.jdbc_url_map,
            string=self.jdbc_url,
            ds=self.datasource,
        )
        self.db_spec_or_jdbc = OneOf(
            "db-spec or jdbcUrl mapping",
            db_spec=self.db_spec_map,
            jdbc_url=self.jdbc_url_map,
        )
        self.proto_connectable = OneOf(
            "connectable reference",
            db_spec=self.db_spec,
            connectable=Predicate(caps.is_connectable, "a Connectable"),
            sourceable=Predicate(caps.is_sourceable, "a Sourceable"),
        )

        self.key_map = MapOf(IDENTIFIER, ANYTHING)
        self.example_map = MapOf(IDENTIFIER, ANYTHING, min_count=1)

        # (expr, alias): expr is a column name or raw SQL taken on trust
        self.column_spec = OneOf(
            "column or (expression, alias) pair",
            column=IDENTIFIER,
            alias=Cat(
                req("expr", OneOf(col=IDENTIFIER, str=STRING)),
                req("column", IDENTIFIER),
                kind=Kind.ORDERED,
            ),
        )
        self.columns = SeqOf(self.column_spec, kind=Kind.ORDERED)

        self.order_by_col = OneOf(
            "column or (column, direction) pair",
            col=IDENTIFIER,
            dir=Cat(req("col", IDENTIFIER), req("dir", Literal(*DIRECTIONS))),
        )
        self.order_by = SeqOf(self.order_by_col, kind=Kind.ORDERED, min_count=1)
        self.opts_map = AllOf(
            MapOf(IDENTIFIER, ANYTHING),
            Keys(optional={"columns": self.columns, "order_by": self.order_by}),
            description="options mapping",
        )

        self.sql_params = Cat(req("sql", STRING), rest("params", ANYTHING), kind=Kind.ORDERED)
        self.params = SeqOf(ANYTHING)
        self.param_groups = SeqOf(self.params)
        self.batch_opts = Model(BatchOpts, "batch options mapping")

        self.where_params = OneOf(example=self.example_map, where=self.sql_params)
        self.key_map_or_all = OneOf(
            example=self.example_map,
            where=self.sql_params,
            all=Literal(ALL),
        )
        self.hash_maps = SeqOf(MAPPING, min_count=1)
        self.column_names = SeqOf(IDENTIFIER, min_count=1)
        self.rows = SeqOf(SeqOf(ANYTHING))


__all__ = [
    "ALL",
    "BatchOpts",
    "DIRECTIONS",
    "DbSpecMap",
    "JdbcUrlMap",
    "SchemaSet",
]
