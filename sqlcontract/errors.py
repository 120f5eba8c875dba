"""Violation reports raised when arguments do not match a contract."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

PathElement = str | int
Path = tuple[PathElement, ...]


class _Missing:
    """Marker for an argument that was required but not supplied."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def format_path(path: Sequence[PathElement]) -> str:
    """Render a path like ``sql > opts > columns[0]``."""

    if not path:
        return "<value>"
    parts: list[str] = []
    for element in path:
        if isinstance(element, int) and parts:
            parts[-1] = f"{parts[-1]}[{element}]"
        elif isinstance(element, int):
            parts.append(f"[{element}]")
        else:
            parts.append(element)
    return " > ".join(parts)


def _describe_value(value: object) -> str:
    if value is MISSING:
        return "nothing (argument missing)"
    text = repr(value)
    if len(text) > 80:
        text = text[:77] + "..."
    return f"{text} ({type(value).__name__})"


class ContractViolation(ValueError):
    """Base class for every argument-shape failure."""

    kind = "violation"

    def __init__(self, path: Sequence[PathElement] = ()) -> None:
        self.path: Path = tuple(path)
        self.position: int | None = None
        self.entry_point: str | None = None
        super().__init__(self.path)

    @property
    def location(self) -> str:
        text = format_path(self.path)
        if self.position is not None:
            text = f"{text} (argument {self.position + 1})"
        return text

    def describe(self) -> str:
        """One-paragraph explanation without the entry point prefix."""

        return f"{self.location}: invalid"

    def to_dict(self) -> dict[str, Any]:
        """Structured report of the violation tree."""

        data: dict[str, Any] = {"kind": self.kind, "path": list(self.path)}
        if self.position is not None:
            data["position"] = self.position
        return data

    def __str__(self) -> str:
        text = self.describe()
        if self.entry_point:
            return f"Call to '{self.entry_point}' did not conform: {text}"
        return text


class ShapeMismatch(ContractViolation):
    """A single predicate failed on a single value."""

    kind = "shape_mismatch"

    def __init__(self, path: Sequence[PathElement], expected: str, value: object) -> None:
        super().__init__(path)
        self.expected = expected
        self.value = value

    @property
    def missing(self) -> bool:
        return self.value is MISSING

    def describe(self) -> str:
        return f"{self.location}: expected {self.expected}, got {_describe_value(self.value)}"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["expected"] = self.expected
        data["value"] = None if self.value is MISSING else self.value
        data["missing"] = self.missing
        return data


class AlternationExhausted(ContractViolation):
    """Every labelled alternative failed."""

    kind = "alternation_exhausted"

    def __init__(
        self,
        path: Sequence[PathElement],
        reasons: Mapping[str, ContractViolation],
        value: object = MISSING,
    ) -> None:
        super().__init__(path)
        self.reasons: dict[str, ContractViolation] = dict(reasons)
        self.value = value

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self.reasons)

    def describe(self) -> str:
        lines = [f"{self.location}: no alternative matched ({', '.join(self.labels)})"]
        for label, reason in self.reasons.items():
            lines.append(f"  [{label}] {reason.describe()}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["reasons"] = {label: reason.to_dict() for label, reason in self.reasons.items()}
        return data


class ConsistencyViolation(ContractViolation):
    """Structurally valid parts disagree with each other."""

    kind = "consistency_violation"

    def __init__(
        self,
        path: Sequence[PathElement],
        description: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(path)
        self.description = description
        self.details: dict[str, Any] = dict(details or {})

    def describe(self) -> str:
        text = f"{self.location}: {self.description}"
        if self.details:
            extras = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
            text = f"{text} ({extras})"
        return text

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["description"] = self.description
        data["details"] = dict(self.details)
        return data


__all__ = [
    "AlternationExhausted",
    "ConsistencyViolation",
    "ContractViolation",
    "MISSING",
    "Path",
    "PathElement",
    "ShapeMismatch",
    "format_path",
]
