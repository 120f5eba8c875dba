"""Toggleable pre-call validation for the entry-point catalog."""

from __future__ import annotations

import functools
import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from . import access
from .contracts import ENTRY_POINTS, Contract, build_contracts
from .errors import ContractViolation, ShapeMismatch

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EntryPoint:
    """Location of an instrumentable callable (``getattr(owner, attribute)``)."""

    name: str
    owner: Any
    attribute: str

    @property
    def qualified_name(self) -> str:
        owner = getattr(self.owner, "__name__", type(self.owner).__name__)
        return f"{owner}.{self.attribute}"

    def resolve(self) -> Callable[..., Any]:
        return getattr(self.owner, self.attribute)


def catalog_for(owner: Any, names: Iterable[str] = ENTRY_POINTS) -> tuple[EntryPoint, ...]:
    """Entry points named ``names`` found as attributes of ``owner``."""

    return tuple(EntryPoint(name, owner, name) for name in names)


def positional_arguments(signature: inspect.Signature | None, args: Sequence[Any], kwargs: Mapping[str, Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """Fold keyword arguments into positions where the signature allows.

    Returns the explicitly supplied positional arguments plus any keyword
    arguments that could not be placed.
    """

    if signature is None or not kwargs:
        return tuple(args), dict(kwargs)
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return tuple(args), dict(kwargs)
    return tuple(bound.args), dict(bound.kwargs)


class ValidationRegistry:
    """Wraps a fixed catalog of entry points with contract checks.

    Wrappers for the whole catalog are installed before the single active
    flag is raised and stay in place until after it is lowered, so a call
    in flight sees either every entry point checked or none of them.
    """

    def __init__(
        self,
        catalog: Iterable[EntryPoint],
        contracts: Mapping[str, Contract] | None = None,
    ) -> None:
        self._catalog = tuple(catalog)
        self._entries = {entry.name: entry for entry in self._catalog}
        self._contracts = dict(contracts) if contracts is not None else build_contracts()
        unknown = [entry.name for entry in self._catalog if entry.name not in self._contracts]
        if unknown:
            raise ValueError(f"No contract for entry point(s): {', '.join(unknown)}")
        absent = [entry.qualified_name for entry in self._catalog if not hasattr(entry.owner, entry.attribute)]
        if absent:
            raise ValueError(f"Entry point(s) not found: {', '.join(absent)}")
        self._lock = threading.RLock()
        self._active = False
        self._originals: dict[str, Callable[..., Any]] = {}

    @property
    def catalog(self) -> tuple[EntryPoint, ...]:
        return self._catalog

    @property
    def active(self) -> bool:
        return self._active

    @property
    def instrumented(self) -> tuple[str, ...]:
        """Names of entry points currently wrapped."""

        return tuple(self._originals)

    def contract(self, name: str) -> Contract:
        return self._contracts[name]

    def instrument(self) -> None:
        """Start validating every call to the catalog; no-op when active."""

        with self._lock:
            if self._active:
                return
            originals = {entry.name: entry.resolve() for entry in self._catalog}
            installed: list[EntryPoint] = []
            try:
                for entry in self._catalog:
                    setattr(entry.owner, entry.attribute, self._wrap(entry, originals[entry.name]))
                    installed.append(entry)
            except Exception:
                for entry in installed:
                    setattr(entry.owner, entry.attribute, originals[entry.name])
                raise
            self._originals = originals
            self._active = True
        LOG.info("Instrumented entry points", extra={"count": len(self._catalog)})

    def unstrument(self) -> None:
        """Stop validating and restore the original callables; idempotent."""

        with self._lock:
            if not self._active:
                return
            self._active = False
            for entry in self._catalog:
                original = self._originals.pop(entry.name, None)
                if original is not None:
                    setattr(entry.owner, entry.attribute, original)
        LOG.info("Unstrumented entry points", extra={"count": len(self._catalog)})

    def check(self, name: str, args: Sequence[Any], kwargs: Mapping[str, Any] | None = None) -> None:
        """Validate one call to ``name`` regardless of the active flag."""

        if name not in self._contracts:
            raise ValueError(f"No contract for entry point '{name}'")
        original = self._originals.get(name)
        if original is None and name in self._entries:
            original = self._entries[name].resolve()
        signature = _signature_of(original) if original is not None else None
        self._check(name, signature, args, kwargs or {})

    def _check(
        self,
        name: str,
        signature: inspect.Signature | None,
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> None:
        positional, leftover = positional_arguments(signature, args, kwargs)
        violation: ContractViolation | None
        if leftover:
            violation = ShapeMismatch((name,), "positional arguments only", leftover)
        else:
            violation = self._contracts[name].explain(positional)
        if violation is None:
            return
        violation.entry_point = name
        LOG.debug("Rejected call", extra={"entry_point": name, "violation": violation.to_dict()})
        raise violation

    def _wrap(self, entry: EntryPoint, original: Callable[..., Any]) -> Callable[..., Any]:
        signature = _signature_of(original)
        registry = self

        @functools.wraps(original)
        def checked(*args: Any, **kwargs: Any) -> Any:
            if registry._active:
                registry._check(entry.name, signature, args, kwargs)
            return original(*args, **kwargs)

        return checked


def _signature_of(func: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None


_DEFAULT: ValidationRegistry | None = None
_DEFAULT_LOCK = threading.Lock()


def default_registry() -> ValidationRegistry:
    """Process-wide registry over :mod:`sqlcontract.access`."""

    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = ValidationRegistry(catalog_for(access))
        return _DEFAULT


def set_default_registry(registry: ValidationRegistry) -> ValidationRegistry | None:
    """Replace the process-wide registry, unstrumenting the previous one."""

    global _DEFAULT
    with _DEFAULT_LOCK:
        previous, _DEFAULT = _DEFAULT, registry
    if previous is not None and previous is not registry:
        previous.unstrument()
    return previous


def instrument() -> None:
    """Validate every call to the data-access entry points."""

    default_registry().instrument()


def unstrument() -> None:
    """Stop validating calls to the data-access entry points."""

    default_registry().unstrument()


__all__ = [
    "EntryPoint",
    "ValidationRegistry",
    "catalog_for",
    "default_registry",
    "instrument",
    "positional_arguments",
    "set_default_registry",
    "unstrument",
]
