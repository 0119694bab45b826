# wwnet/utils/__init__.py

from .load_files import load_config, default_config, DEFAULT_SETTINGS
from .units import (ureg, LoadUnit, mass_rate, concentration,
                    FLOW_UNIT, CONCENTRATION_UNIT, LOAD_UNIT)

__all__ = [
    "load_config",
    "default_config",
    "DEFAULT_SETTINGS",
    "ureg",
    "LoadUnit",
    "mass_rate",
    "concentration",
    "FLOW_UNIT",
    "CONCENTRATION_UNIT",
    "LOAD_UNIT"
]
