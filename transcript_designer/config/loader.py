"""Load designer settings YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .models import (
    DEFAULT_COHORTS,
    DEFAULT_PROGRAMS,
    DEFAULT_TERMS,
    DesignerConfig,
    DesignerConfigError,
    PreviewConfig,
    SimulationConfig,
    StorageConfig,
)


def load_designer_config(path: Path) -> DesignerConfig:
    """Load the YAML settings file used by the ``transcripts`` command.

    Parameters
    ----------
    path : Path
        Filesystem path to the settings file (for example,
        ``config/designer.yaml``).

    Returns
    -------
    DesignerConfig
        Parsed settings. Sections missing from the file keep their defaults.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    DesignerConfigError
        If the top-level structure is not a mapping, a section has the wrong
        shape, or a value cannot be converted.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_designer_config(Path("config/designer.yaml"))  # doctest: +SKIP
    >>> config.terms  # doctest: +SKIP
    ('Term I', 'Term II', 'Term III')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise DesignerConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    storage_raw = _section(raw, "storage")
    simulation_raw = _section(raw, "simulation")
    preview_raw = _section(raw, "preview")

    storage = StorageConfig()
    if storage_raw.get("path"):
        storage = StorageConfig(path=Path(str(storage_raw["path"])))

    defaults = SimulationConfig()
    simulation = SimulationConfig(
        actor=str(simulation_raw.get("actor") or defaults.actor),
        calculation_delay=_delay(
            simulation_raw, "calculation_delay", defaults.calculation_delay
        ),
        generation_delay=_delay(
            simulation_raw, "generation_delay", defaults.generation_delay
        ),
    )

    preview = PreviewConfig()
    if preview_raw.get("output"):
        preview = PreviewConfig(output=Path(str(preview_raw["output"])))

    return DesignerConfig(
        storage=storage,
        programs=_names(raw, "programs", DEFAULT_PROGRAMS),
        cohorts=_names(raw, "cohorts", DEFAULT_COHORTS),
        terms=_names(raw, "terms", DEFAULT_TERMS),
        simulation=simulation,
        preview=preview,
    )


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    value = raw.get(key)
    match value:
        case None:
            return {}
        case dict():
            return value
        case _:
            msg = f"'{key}' must be a mapping."
            raise DesignerConfigError(msg)


def _names(
    raw: typ.Mapping[str, typ.Any], key: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    """Return a de-duplicated tuple of non-empty names from ``raw[key]``."""
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, list):
        msg = f"'{key}' must be a list of names."
        raise DesignerConfigError(msg)
    names: list[str] = []
    for item in value:
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    if not names:
        msg = f"'{key}' must name at least one entry."
        raise DesignerConfigError(msg)
    return tuple(names)


def _delay(raw: typ.Mapping[str, typ.Any], key: str, default: float) -> float:
    value = raw.get(key)
    if value is None:
        return default
    try:
        delay = float(value)
    except (TypeError, ValueError) as exc:
        msg = f"'simulation.{key}' must be a number of seconds."
        raise DesignerConfigError(msg) from exc
    if delay < 0:
        msg = f"'simulation.{key}' cannot be negative."
        raise DesignerConfigError(msg)
    return delay


__all__ = ["load_designer_config"]
