from enum import Enum
from typing import Union

import pint
import pint_pandas

ureg = pint.get_application_registry()
pint_pandas.PintType.ureg = ureg

FLOW_UNIT = 'meter^3/day'
CONCENTRATION_UNIT = 'milligram/liter'
LOAD_UNIT = 'kilogram/day'


class LoadUnit(Enum):
    """Mass rate units for stream loadings"""
    KG_PER_DAY = 'kilogram/day'
    G_PER_DAY = 'gram/day'
    LB_PER_DAY = 'pound/day'

    @staticmethod
    def convert(value: float, from_unit: Union['LoadUnit', str], to_unit: Union['LoadUnit', str]) -> float:
        """Convert a mass rate between units"""
        if isinstance(from_unit, str):
            from_unit = LoadUnit(from_unit)
        if isinstance(to_unit, str):
            to_unit = LoadUnit(to_unit)
        if from_unit == to_unit:
            return value
        return ureg.Quantity(value, from_unit.value).to(to_unit.value).magnitude


def mass_rate(concentration: float, flow: float, unit: Union[LoadUnit, str] = LoadUnit.KG_PER_DAY) -> float:
    """Mass rate of a constituent given its concentration [mg/L] and the stream flow [m³/d]"""
    unit = LoadUnit(unit)
    quantity = ureg.Quantity(concentration, CONCENTRATION_UNIT) * ureg.Quantity(flow, FLOW_UNIT)
    return quantity.to(unit.value).magnitude


def concentration(mass: float, flow: float, unit: Union[LoadUnit, str] = LoadUnit.KG_PER_DAY) -> float:
    """Concentration [mg/L] of a mass rate carried by a stream flow [m³/d]"""
    unit = LoadUnit(unit)
    if flow == 0:
        raise ValueError("Flow is zero. Cannot convert a mass rate to concentration")
    quantity = ureg.Quantity(mass, unit.value) / ureg.Quantity(flow, FLOW_UNIT)
    return quantity.to(CONCENTRATION_UNIT).magnitude
