"""
Constituent loadings carried by a stream.

There are base constituents (soluble BOD, particulate BOD, ...) and aggregate
loadings (total BOD, total nitrogen, ...). Every base constituent must be
passed to the constructor so new constituents cannot be silently left out.
When only some constituents matter, start from Load.empty() and override:

    only_bod = Load.empty().replace(sol_bod=200.0, part_bod=100.0)
    only_bod.tot_bod  # 300.0

Aggregates are properties computed from the base fields and never stored.
"""
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping

import numpy as np

from wwnet.exceptions import ModelingFault
from wwnet.parameters import BaseParameter, ProcessParameter

# Smallest loading. A tiny non-zero value keeps fractions and ratios between
# loadings defined before real values are set.
MIN_VALUE = float(np.finfo(np.float32).smallest_subnormal)

# Largest loading, caps arithmetic before it overflows
MAX_VALUE = float(np.finfo(np.float32).max)

AGGREGATES = ('tot_ss', 'tot_bod', 'tot_org_n', 'tot_kn', 'tot_n', 'tot_org_p', 'tot_p')


def _clamp(value: float) -> float:
    return min(MAX_VALUE, max(-MAX_VALUE, value))


def sanitize_fraction(fraction: float, name: str = 'fraction') -> float:
    """Reject fractions outside the open interval (0, 1)"""
    if not 0.0 < fraction < 1.0:
        raise ModelingFault(f"{name} must be within (0, 1), got {fraction}")
    return fraction


@dataclass(frozen=True)
class Load:
    """Mass loadings of constituents, one value per BaseParameter"""
    vol_ss: float
    inert_ss: float
    sol_bod: float
    part_bod: float
    amm_n: float
    sol_org_n: float
    part_org_n: float
    nox: float
    sol_org_p: float
    part_org_p: float
    chem_p: float
    ort_p: float
    alk: float
    other: float

    @classmethod
    def empty(cls) -> 'Load':
        """A load with every constituent set to MIN_VALUE"""
        return cls(**{bp.field_name: MIN_VALUE for bp in BaseParameter})

    @classmethod
    def from_parameters(cls, values: Mapping[BaseParameter, float]) -> 'Load':
        """Build a load from a BaseParameter mapping, unspecified constituents at MIN_VALUE"""
        return cls.empty().replace(**{BaseParameter(bp).field_name: float(v) for bp, v in values.items()})

    def replace(self, **changes: float) -> 'Load':
        """Copy of this load with some base constituents overridden"""
        return replace(self, **changes)

    def __getitem__(self, parameter: BaseParameter) -> float:
        return getattr(self, BaseParameter(parameter).field_name)

    # Solids
    @property
    def tot_ss(self) -> float:
        """Total suspended solids, vol_ss + inert_ss"""
        return self.vol_ss + self.inert_ss

    @property
    def vol_ss_frac(self) -> float:
        return self.vol_ss / self.tot_ss

    def with_vol_ss_frac(self, fraction: float) -> 'Load':
        """Re-split total suspended solids keeping tot_ss unchanged"""
        sanitize_fraction(fraction, 'vol_ss_frac')
        total = self.tot_ss
        vol_ss = fraction * total
        return self.replace(vol_ss=vol_ss, inert_ss=total - vol_ss)

    # BOD
    @property
    def tot_bod(self) -> float:
        """Total BOD, sol_bod + part_bod"""
        return self.sol_bod + self.part_bod

    # Nitrogen
    @property
    def tot_org_n(self) -> float:
        """Total organic nitrogen, sol_org_n + part_org_n"""
        return self.sol_org_n + self.part_org_n

    @property
    def tot_kn(self) -> float:
        """Total Kjeldahl nitrogen, amm_n + tot_org_n"""
        return self.amm_n + self.tot_org_n

    @property
    def tot_n(self) -> float:
        """Total nitrogen, tot_kn + nox"""
        return self.tot_kn + self.nox

    # Phosphorus
    @property
    def tot_org_p(self) -> float:
        """Total organic phosphorus, sol_org_p + part_org_p"""
        return self.sol_org_p + self.part_org_p

    @property
    def tot_p(self) -> float:
        """Total phosphorus, tot_org_p + chem_p + ort_p"""
        return self.tot_org_p + self.chem_p + self.ort_p

    def aggregate(self, parameters: ProcessParameter) -> float:
        """Sum of the base constituents in a parameter set"""
        return sum(self[bp] for bp in ProcessParameter(parameters).to_base_parameters())

    def to_dict(self, aggregates: bool = True) -> Dict[str, float]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        if aggregates:
            values.update({name: getattr(self, name) for name in AGGREGATES})
        return values

    def _combine(self, other: 'Load', sign: float) -> 'Load':
        if not isinstance(other, Load):
            return NotImplemented
        return Load(**{
            f.name: _clamp(getattr(self, f.name) + sign * getattr(other, f.name))
            for f in fields(self)
        })

    def __add__(self, other: 'Load') -> 'Load':
        return self._combine(other, 1.0)

    def __sub__(self, other: 'Load') -> 'Load':
        return self._combine(other, -1.0)

    def __mul__(self, factor: float) -> 'Load':
        if not isinstance(factor, (int, float, np.floating, np.integer)):
            return NotImplemented
        # Saturates to the empty load rather than producing sub-minimum values
        if factor < MIN_VALUE:
            return Load.empty()
        return Load(**{f.name: _clamp(getattr(self, f.name) * factor) for f in fields(self)})

    __rmul__ = __mul__
