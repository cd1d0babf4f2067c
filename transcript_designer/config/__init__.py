"""Load and validate the transcript designer settings file.

The settings file (``config/designer.yaml`` by default) names where templates
and workflow state are stored, the programs, cohorts, and terms offered by the
CLI, the simulated workflow delays, and the default preview destination.
:func:`load_designer_config` applies defaults for any missing section and
returns a :class:`DesignerConfig`.

Examples
--------
>>> from pathlib import Path
>>> from transcript_designer.config import load_designer_config
>>> config = load_designer_config(Path("config/designer.yaml"))  # doctest: +SKIP
>>> config.simulation.actor  # doctest: +SKIP
'Admin'
"""

from .loader import load_designer_config
from .models import (
    DesignerConfig,
    DesignerConfigError,
    PreviewConfig,
    SimulationConfig,
    StorageConfig,
)

__all__ = [
    "DesignerConfig",
    "DesignerConfigError",
    "PreviewConfig",
    "SimulationConfig",
    "StorageConfig",
    "load_designer_config",
]
