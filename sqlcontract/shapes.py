"""Small combinator library for declaring argument shapes.

Every shape answers ``match(value, path)`` with a :class:`MatchResult`
holding either the conformed value or a :class:`ContractViolation`.
Matching never raises; :meth:`Shape.conform` is the raising variant.

Conformed values:

* :class:`OneOf` tags the value with the label that matched (:class:`Tagged`).
* :class:`Cat` produces a ``dict`` of parameter name to conformed value;
  variadic parameters collect a ``list``.
* Everything else conforms to the (possibly conformed) value itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, NamedTuple, Sequence

from pydantic import BaseModel, ValidationError

from . import predicates
from .errors import (
    MISSING,
    AlternationExhausted,
    ConsistencyViolation,
    ContractViolation,
    Path,
    PathElement,
    ShapeMismatch,
)


class Tagged(NamedTuple):
    """Value conformed by a tagged alternation."""

    label: str
    value: Any


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching one value against one shape."""

    value: Any = None
    problem: ContractViolation | None = None

    @property
    def ok(self) -> bool:
        return self.problem is None


def _fail(problem: ContractViolation) -> MatchResult:
    return MatchResult(problem=problem)


class Shape:
    """Declarative description of acceptable values."""

    description = "value"

    def match(self, value: object, path: Path = ()) -> MatchResult:
        raise NotImplementedError

    def conform(self, value: object) -> Any:
        """Return the conformed value or raise the violation."""

        result = self.match(value)
        if result.problem is not None:
            raise result.problem
        return result.value

    def explain(self, value: object) -> ContractViolation | None:
        return self.match(value).problem

    def is_valid(self, value: object) -> bool:
        return self.match(value).ok

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description}>"


class Predicate(Shape):
    """Wraps a total ``(value) -> bool`` check."""

    def __init__(self, check: Callable[[object], bool], description: str) -> None:
        self._check = check
        self.description = description

    def match(self, value: object, path: Path = ()) -> MatchResult:
        try:
            ok = bool(self._check(value))
        except Exception:
            ok = False
        if ok:
            return MatchResult(value)
        return _fail(ShapeMismatch(path, self.description, value))


class Literal(Shape):
    """Value equal to one of a fixed set of constants (same type)."""

    def __init__(self, *choices: object) -> None:
        self._choices = choices
        self.description = "one of " + ", ".join(repr(choice) for choice in choices)

    def match(self, value: object, path: Path = ()) -> MatchResult:
        for choice in self._choices:
            if type(value) is type(choice) and value == choice:
                return MatchResult(value)
        return _fail(ShapeMismatch(path, self.description, value))


class AllOf(Shape):
    """Conjunction: every sub-shape must hold on the same value."""

    def __init__(self, *shapes: Shape, description: str | None = None) -> None:
        self._shapes = shapes
        self.description = description or " and ".join(shape.description for shape in shapes)

    def match(self, value: object, path: Path = ()) -> MatchResult:
        result = MatchResult(value)
        for shape in self._shapes:
            result = shape.match(value, path)
            if not result.ok:
                return result
        return result


class OneOf(Shape):
    """Tagged alternation tried in declared order; first match wins."""

    def __init__(self, description: str | None = None, **alternatives: Shape) -> None:
        if not alternatives:
            raise ValueError("OneOf needs at least one alternative")
        self._alternatives = tuple(alternatives.items())
        self.description = description or " | ".join(label for label, _ in self._alternatives)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(label for label, _ in self._alternatives)

    def match(self, value: object, path: Path = ()) -> MatchResult:
        reasons: dict[str, ContractViolation] = {}
        for label, shape in self._alternatives:
            result = shape.match(value, path)
            if result.ok:
                return MatchResult(Tagged(label, result.value))
            assert result.problem is not None
            reasons[label] = result.problem
        return _fail(AlternationExhausted(path, reasons, value))


class Nilable(Shape):
    """``None`` or the wrapped shape."""

    def __init__(self, shape: Shape) -> None:
        self._shape = shape
        self.description = f"None or {shape.description}"

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if value is None:
            return MatchResult(None)
        return self._shape.match(value, path)


class Kind(str, Enum):
    """Collection kinds a sequence shape can insist on."""

    ORDERED = "ordered"
    SEQUENTIAL = "sequential"

    def accepts(self, value: object) -> bool:
        if self is Kind.ORDERED:
            return predicates.is_ordered(value)
        return predicates.is_sequential(value)

    @property
    def noun(self) -> str:
        return "list or tuple" if self is Kind.ORDERED else "sequence"


class SeqOf(Shape):
    """Homogeneous collection with an optional minimum length."""

    def __init__(self, item: Shape, *, kind: Kind = Kind.SEQUENTIAL, min_count: int = 0) -> None:
        self._item = item
        self._kind = kind
        self._min_count = min_count
        description = f"{kind.noun} of {item.description}"
        if min_count:
            description += f" (at least {min_count})"
        self.description = description

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if not self._kind.accepts(value):
            return _fail(ShapeMismatch(path, self.description, value))
        items = list(value)  # type: ignore[call-overload]
        if len(items) < self._min_count:
            return _fail(ShapeMismatch(path, self.description, value))
        conformed: list[Any] = []
        for index, item in enumerate(items):
            result = self._item.match(item, path + (index,))
            if not result.ok:
                return result
            conformed.append(result.value)
        return MatchResult(conformed)


def _key_element(key: object) -> PathElement:
    return key if isinstance(key, str) else repr(key)


class MapOf(Shape):
    """Mapping whose keys and values each satisfy a shape."""

    def __init__(self, key: Shape, value: Shape, *, min_count: int = 0) -> None:
        self._key = key
        self._value = value
        self._min_count = min_count
        description = f"mapping of {key.description} to {value.description}"
        if min_count:
            description += f" (at least {min_count} entr{'y' if min_count == 1 else 'ies'})"
        self.description = description

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if not isinstance(value, Mapping):
            return _fail(ShapeMismatch(path, self.description, value))
        if len(value) < self._min_count:
            return _fail(ShapeMismatch(path, self.description, value))
        for key, item in value.items():
            element = path + (_key_element(key),)
            key_result = self._key.match(key, element)
            if not key_result.ok:
                return _fail(ShapeMismatch(element, f"key that is {self._key.description}", key))
            item_result = self._value.match(item, element)
            if not item_result.ok:
                return item_result
        return MatchResult(value)


class Keys(Shape):
    """Mapping with specific keys whose values must satisfy sub-shapes.

    Keys that are not mentioned are left alone.
    """

    def __init__(
        self,
        *,
        required: Mapping[str, Shape] | None = None,
        optional: Mapping[str, Shape] | None = None,
    ) -> None:
        self._required = dict(required or {})
        self._optional = dict(optional or {})
        names = [*self._required, *(f"{name}?" for name in self._optional)]
        self.description = "mapping with keys " + ", ".join(names) if names else "mapping"

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if not isinstance(value, Mapping):
            return _fail(ShapeMismatch(path, self.description, value))
        for name, shape in self._required.items():
            if name not in value:
                return _fail(ShapeMismatch(path + (name,), shape.description, MISSING))
            result = shape.match(value[name], path + (name,))
            if not result.ok:
                return result
        for name, shape in self._optional.items():
            if name in value:
                result = shape.match(value[name], path + (name,))
                if not result.ok:
                    return result
        return MatchResult(value)


_PYDANTIC_PREFIXES = ("Input should be ", "Value error, ")


def _expected_from(error: Mapping[str, Any]) -> str:
    message = str(error.get("msg", "valid value"))
    for prefix in _PYDANTIC_PREFIXES:
        if message.startswith(prefix):
            message = message[len(prefix):]
    return message


class Model(Shape):
    """Mapping validated by a strict pydantic model.

    The mapping itself is the conformed value; the model only checks it.
    """

    def __init__(self, model: type[BaseModel], description: str | None = None) -> None:
        self._model = model
        self.description = description or model.__doc__ or model.__name__

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if not isinstance(value, Mapping):
            return _fail(ShapeMismatch(path, self.description, value))
        try:
            self._model.model_validate(dict(value))
        except ValidationError as exc:
            error = exc.errors()[0]
            location = path + tuple(error.get("loc", ()))
            if error.get("type") == "missing":
                key = location[-1] if location else ""
                return _fail(ShapeMismatch(location, self._field_description(key), MISSING))
            return _fail(ShapeMismatch(location, _expected_from(error), error.get("input")))
        return MatchResult(value)

    def _field_description(self, key: PathElement) -> str:
        for name, field in self._model.model_fields.items():
            if key in (name, field.alias):
                return field.description or f"a value for '{key}'"
        return f"a value for '{key}'"


class Arity(str, Enum):
    """How many values a positional parameter consumes."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    VARIADIC = "variadic"


@dataclass(frozen=True, slots=True)
class Param:
    """Named positional slot inside a :class:`Cat`."""

    name: str
    shape: Shape
    arity: Arity = Arity.REQUIRED

    def render(self) -> str:
        if self.arity is Arity.OPTIONAL:
            return f"{self.name}?"
        if self.arity is Arity.VARIADIC:
            return f"{self.name}*"
        return self.name


def req(name: str, shape: Shape) -> Param:
    return Param(name, shape, Arity.REQUIRED)


def opt(name: str, shape: Shape) -> Param:
    return Param(name, shape, Arity.OPTIONAL)


def rest(name: str, shape: Shape) -> Param:
    return Param(name, shape, Arity.VARIADIC)


_Binding = tuple[dict[str, Any] | None, ContractViolation | None]


class Cat(Shape):
    """Positional concatenation of named parameters.

    Optional parameters are consumed when they match and skipped otherwise;
    variadic parameters consume as many matching values as the remaining
    parameters allow. With ``kind=None`` any sequence is accepted (argument
    tuples); otherwise the collection kind is checked first. With
    ``track_position`` each violation records the index of the offending
    element, which argument lists use to name the failing position.
    """

    def __init__(
        self,
        *params: Param,
        kind: Kind | None = Kind.SEQUENTIAL,
        track_position: bool = False,
    ) -> None:
        self.params = params
        self._kind = kind
        self._track_position = track_position
        rendered = ", ".join(param.render() for param in params)
        self.description = f"({rendered})" if kind is None else f"{kind.noun} ({rendered})"

    def match(self, value: object, path: Path = ()) -> MatchResult:
        if self._kind is not None and not self._kind.accepts(value):
            return _fail(ShapeMismatch(path, self.description, value))
        if self._kind is None and not predicates.is_sequential(value):
            return _fail(ShapeMismatch(path, self.description, value))
        items = list(value)  # type: ignore[call-overload]
        bound, problem = self._bind(items, 0, 0, path)
        if problem is not None:
            return _fail(problem)
        assert bound is not None
        return MatchResult({param.name: bound[param.name] for param in self.params if param.name in bound})

    def _located(self, problem: ContractViolation, index: int) -> ContractViolation:
        if self._track_position and problem.position is None:
            problem.position = index
        return problem

    def _bind(self, items: Sequence[Any], pi: int, ai: int, path: Path) -> _Binding:
        if pi == len(self.params):
            if ai == len(items):
                return {}, None
            extra = ShapeMismatch(path, f"at most {ai} item(s)", items[ai])
            return None, self._located(extra, ai)
        param = self.params[pi]
        element = path + (param.name,)
        if param.arity is Arity.REQUIRED:
            if ai >= len(items):
                missing = ShapeMismatch(element, param.shape.description, MISSING)
                return None, self._located(missing, ai)
            result = param.shape.match(items[ai], element)
            if result.problem is not None:
                return None, self._located(result.problem, ai)
            bound, problem = self._bind(items, pi + 1, ai + 1, path)
            if bound is not None:
                bound[param.name] = result.value
            return bound, problem
        if param.arity is Arity.OPTIONAL:
            consumed_problem: ContractViolation | None = None
            if ai < len(items):
                result = param.shape.match(items[ai], element)
                if result.problem is None:
                    bound, consumed_problem = self._bind(items, pi + 1, ai + 1, path)
                    if bound is not None:
                        bound[param.name] = result.value
                        return bound, None
                else:
                    consumed_problem = self._located(result.problem, ai)
            bound, problem = self._bind(items, pi + 1, ai, path)
            if bound is not None:
                return bound, None
            return None, consumed_problem or problem
        return self._bind_variadic(items, param, pi, ai, path)

    def _bind_variadic(self, items: Sequence[Any], param: Param, pi: int, ai: int, path: Path) -> _Binding:
        conformed: list[Any] = []
        element_problem: ContractViolation | None = None
        for index in range(ai, len(items)):
            result = param.shape.match(items[index], path + (param.name, index - ai))
            if result.problem is not None:
                element_problem = self._located(result.problem, index)
                break
            conformed.append(result.value)
        first_problem: ContractViolation | None = None
        for end in range(ai + len(conformed), ai - 1, -1):
            bound, problem = self._bind(items, pi + 1, end, path)
            if bound is not None:
                bound[param.name] = conformed[: end - ai]
                return bound, None
            first_problem = first_problem or problem
        return None, element_problem or first_problem


ConsistencyCheck = Callable[[Any], Mapping[str, Any]]


class Consistent(Shape):
    """Sub-shape plus a post-hoc check across its conformed parts.

    ``check`` receives the conformed value and returns the offending
    details; an empty mapping means the parts agree.
    """

    def __init__(self, shape: Shape, check: ConsistencyCheck, description: str) -> None:
        self._shape = shape
        self._check = check
        self.consistency = description
        self.description = f"{shape.description} where {description}"

    @property
    def shape(self) -> Shape:
        return self._shape

    def match(self, value: object, path: Path = ()) -> MatchResult:
        result = self._shape.match(value, path)
        if not result.ok:
            return result
        details = self._check(result.value)
        if details:
            return _fail(ConsistencyViolation(path, self.consistency, details))
        return result


ANYTHING = Predicate(lambda _: True, "any value")
STRING = Predicate(predicates.is_string, "a string")
POS_INT = Predicate(predicates.is_pos_int, "a positive integer")
BOOLEAN = Predicate(predicates.is_boolean, "a boolean")
IDENTIFIER = Predicate(predicates.is_identifier, "an identifier")
SIMPLE_IDENTIFIER = Predicate(predicates.is_simple_identifier, "an unqualified name")
CALLABLE = Predicate(predicates.is_callable, "a callable")
CLASS = Predicate(predicates.is_class, "a class")
MAPPING = Predicate(predicates.is_mapping, "a mapping")
JDBC_URL = Predicate(predicates.is_jdbc_url, "a JDBC URL starting with 'jdbc:<dbtype>:'")


__all__ = [
    "ANYTHING",
    "AllOf",
    "Arity",
    "BOOLEAN",
    "CALLABLE",
    "CLASS",
    "Cat",
    "Consistent",
    "IDENTIFIER",
    "JDBC_URL",
    "Kind",
    "Literal",
    "MAPPING",
    "MapOf",
    "MatchResult",
    "Model",
    "Nilable",
    "OneOf",
    "POS_INT",
    "Param",
    "Predicate",
    "SIMPLE_IDENTIFIER",
    "STRING",
    "SeqOf",
    "Shape",
    "Tagged",
    "opt",
    "req",
    "rest",
]
