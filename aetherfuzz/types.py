"""Shared type definitions for aetherfuzz.

This module defines the fuzzing configuration, the preset record and the
diagnostic record reported by a shader validator. Keeping them in one place
avoids circular imports between the engine, the validator and the campaign.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Literal

PresetName = Literal["Triangle", "Gradient", "Plasma", "Grid"]
Severity = Literal["error", "warning"]

# Keys used by configurations exported from the original web UI.
CAMEL_CASE_KEYS = {
    "mutateNumbers": "mutate_numbers",
    "mutateOperators": "mutate_operators",
    "mutateBuiltins": "mutate_builtins",
    "mutateGeometry": "mutate_geometry",
    "mutateColor": "mutate_color",
    "mutateChaos": "mutate_chaos",
    "mutateStructure": "mutate_structure",
}


@dataclass
class FuzzConfig:
    """Which passes are enabled and how hard they mutate.

    Enabling a structural pass (structure, geometry, color, chaos) only makes
    it eligible: each run it fires with probability `intensity`. Token-level
    passes always run once enabled and use `intensity` as their per-token
    probability.
    """

    mutate_numbers: bool = True
    mutate_operators: bool = False
    mutate_builtins: bool = False
    mutate_geometry: bool = True
    mutate_color: bool = True
    mutate_chaos: bool = False
    mutate_structure: bool = False
    intensity: float = 0.2

    def __post_init__(self) -> None:
        if not 0.0 < self.intensity <= 1.0:
            raise ValueError(f"intensity must be in (0, 1], got {self.intensity!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FuzzConfig:
        """Build a config from snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown fuzz config option: {key!r}")
            kwargs[name] = float(value) if name == "intensity" else bool(value)
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def with_all(self, enabled: bool) -> FuzzConfig:
        """Return a copy with every pass flag set to `enabled`."""
        flags = {name: enabled for name in CAMEL_CASE_KEYS.values()}
        return FuzzConfig(intensity=self.intensity, **flags)


@dataclass(frozen=True)
class ShaderPreset:
    """A named, built-in fragment program."""

    name: PresetName
    code: str


@dataclass(frozen=True)
class Diagnostic:
    """A single message reported by a shader validator."""

    line: int
    message: str
    severity: Severity = "error"

    def __str__(self) -> str:
        return f"{self.severity}: line {self.line}: {self.message}"
