"""Instrumentation configuration loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import tomllib

from pydantic import BaseModel, Field

from . import access
from .contracts import ENTRY_POINTS
from .instrument import ValidationRegistry, catalog_for, set_default_registry

CONFIG_FILE = Path.home() / ".config" / "sqlcontract" / "config.toml"


class ContractConfig(BaseModel):
    """Shape of the configuration file."""

    instrument: bool = False
    entry_points: dict[str, bool] = Field(default_factory=dict)

    def selected(self, names: Iterable[str] = ENTRY_POINTS) -> tuple[str, ...]:
        """Entry points from ``names`` that should be instrumented.

        A single true flag makes ``entry_points`` an allowlist. Otherwise
        every name is selected except those flagged false.
        """

        flags = self.entry_points
        if any(flags.values()):
            return tuple(name for name in names if flags.get(name, False))
        return tuple(name for name in names if flags.get(name, True))


def load_config() -> ContractConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return ContractConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return ContractConfig()

    return ContractConfig(
        instrument=data.get("instrument", ContractConfig.model_fields["instrument"].default),
        entry_points=data.get("entry_points", {}),
    )


def save_config(config: ContractConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [f"instrument = {str(config.instrument).lower()}"]
    if config.entry_points:
        lines.append("")
        lines.append("[entry_points]")
        for name in sorted(config.entry_points):
            flag = "true" if config.entry_points[name] else "false"
            lines.append(f"{name} = {flag}")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def configure(config: ContractConfig | None = None) -> ValidationRegistry:
    """Install a process-wide registry built from ``config``.

    The registry covers the selected entry points and is instrumented when
    the config asks for it.
    """

    if config is None:
        config = load_config()
    registry = ValidationRegistry(catalog_for(access, config.selected()))
    set_default_registry(registry)
    if config.instrument:
        registry.instrument()
    return registry


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    if isinstance(raw, dict):
        instrument = raw.get("instrument")
        if isinstance(instrument, bool):
            data["instrument"] = instrument
        entry_points = raw.get("entry_points")
        if isinstance(entry_points, dict):
            parsed: dict[str, bool] = {}
            for name, enabled in entry_points.items():
                if str(name) in ENTRY_POINTS:
                    parsed[str(name)] = bool(enabled)
            data["entry_points"] = parsed
    return data
