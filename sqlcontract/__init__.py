"""Argument contracts and toggleable call validation for a data-access API."""

from __future__ import annotations

from .capabilities import Capabilities, Connectable, Sourceable, default_capabilities
from .contracts import ENTRY_POINTS, ArgumentAlternative, CallMatch, Contract, build_contracts
from .errors import (
    MISSING,
    AlternationExhausted,
    ConsistencyViolation,
    ContractViolation,
    ShapeMismatch,
)
from .instrument import (
    EntryPoint,
    ValidationRegistry,
    catalog_for,
    default_registry,
    instrument,
    set_default_registry,
    unstrument,
)
from .schemas import ALL, SchemaSet
from .shapes import Tagged

__version__ = "0.1.0"

__all__ = [
    "ALL",
    "AlternationExhausted",
    "ArgumentAlternative",
    "CallMatch",
    "Capabilities",
    "Connectable",
    "ConsistencyViolation",
    "Contract",
    "ContractViolation",
    "ENTRY_POINTS",
    "EntryPoint",
    "MISSING",
    "SchemaSet",
    "ShapeMismatch",
    "Sourceable",
    "Tagged",
    "ValidationRegistry",
    "__version__",
    "build_contracts",
    "catalog_for",
    "default_capabilities",
    "default_registry",
    "instrument",
    "set_default_registry",
    "unstrument",
]
