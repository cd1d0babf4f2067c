"""Typed dataclasses describing transcript designer settings."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

DEFAULT_STORAGE_PATH = Path("~/.local/share/transcript-designer/storage.json")
DEFAULT_PROGRAMS = (
    "PGP TBM",
    "PGP Rise",
    "UG Programme",
    "Masters Union",
    "Executive MBA",
)
DEFAULT_COHORTS = (
    "Class of 2023",
    "Class of 2024",
    "Class of 2025",
    "Class of 2026",
    "Cohort 1",
    "Cohort 2",
)
DEFAULT_TERMS = ("Term I", "Term II", "Term III")


class DesignerConfigError(ValueError):
    """Raised when the designer configuration is invalid."""


@dc.dataclass(slots=True)
class StorageConfig:
    """Location of the JSON storage file."""

    path: Path = DEFAULT_STORAGE_PATH


@dc.dataclass(slots=True)
class SimulationConfig:
    """Actor name and artificial delays used by the workflow simulator."""

    actor: str = "Admin"
    calculation_delay: float = 1.5
    generation_delay: float = 2.0


@dc.dataclass(slots=True)
class PreviewConfig:
    """Default destination for rendered preview pages."""

    output: Path = Path("public/preview.html")


@dc.dataclass(slots=True)
class DesignerConfig:
    """Top-level settings consumed by the CLI."""

    storage: StorageConfig = dc.field(default_factory=StorageConfig)
    programs: tuple[str, ...] = DEFAULT_PROGRAMS
    cohorts: tuple[str, ...] = DEFAULT_COHORTS
    terms: tuple[str, ...] = DEFAULT_TERMS
    simulation: SimulationConfig = dc.field(default_factory=SimulationConfig)
    preview: PreviewConfig = dc.field(default_factory=PreviewConfig)


__all__ = [
    "DEFAULT_COHORTS",
    "DEFAULT_PROGRAMS",
    "DEFAULT_STORAGE_PATH",
    "DEFAULT_TERMS",
    "DesignerConfig",
    "DesignerConfigError",
    "PreviewConfig",
    "SimulationConfig",
    "StorageConfig",
]
