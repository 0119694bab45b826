"""
Constituent taxonomy.

BaseParameter enumerates the irreducible constituents carried by every stream,
in the order used to lay out the process matrix. ProcessParameter is a bit-set
over those constituents used to name aggregates (total nitrogen, total
suspended solids, ...) and to declare which constituents a router handles.
"""
from enum import IntEnum, IntFlag
from typing import List


class BaseParameter(IntEnum):
    """Irreducible constituents, one process-matrix row per connection each"""
    VOL_SS = 0      # Volatile suspended solids
    INERT_SS = 1    # Inert (fixed) suspended solids
    SOL_BOD = 2     # Soluble BOD
    PART_BOD = 3    # Particulate BOD
    AMM_N = 4       # Ammonia and ammonium nitrogen
    SOL_ORG_N = 5   # Soluble organic nitrogen
    PART_ORG_N = 6  # Particulate organic nitrogen
    NOX = 7         # Oxidized nitrogen (NO2 and NO3)
    SOL_ORG_P = 8   # Soluble organic phosphorus
    PART_ORG_P = 9  # Particulate organic phosphorus
    CHEM_P = 10     # Chemical phosphorus
    ORT_P = 11      # Orthophosphate
    ALK = 12        # Alkalinity
    OTHER = 13      # Any other constituent

    @property
    def field_name(self) -> str:
        """Name of the matching Load field"""
        return self.name.lower()

    @property
    def flag(self) -> 'ProcessParameter':
        """Single-bit ProcessParameter for this constituent"""
        return ProcessParameter.from_base(self)


NUM_BASE_PARAMETERS = len(BaseParameter)


class ProcessParameter(IntFlag):
    """Aggregate parameter sets, each the union of its base bits"""
    SS_VOL = 1 << BaseParameter.VOL_SS
    SS_INT = 1 << BaseParameter.INERT_SS
    SS_TOT = SS_VOL | SS_INT

    BOD_SOL = 1 << BaseParameter.SOL_BOD
    BOD_PRT = 1 << BaseParameter.PART_BOD
    BOD_TOT = BOD_SOL | BOD_PRT

    N_AMM = 1 << BaseParameter.AMM_N
    N_ORG_SOL = 1 << BaseParameter.SOL_ORG_N
    N_ORG_PRT = 1 << BaseParameter.PART_ORG_N
    N_ORG_TOT = N_ORG_SOL | N_ORG_PRT
    N_TKN = N_AMM | N_ORG_TOT
    N_OXD = 1 << BaseParameter.NOX
    N_TOT = N_TKN | N_OXD

    P_ORG_SOL = 1 << BaseParameter.SOL_ORG_P
    P_ORG_PRT = 1 << BaseParameter.PART_ORG_P
    P_ORG_TOT = P_ORG_SOL | P_ORG_PRT
    P_CHM = 1 << BaseParameter.CHEM_P
    P_ORT = 1 << BaseParameter.ORT_P
    P_TOT = P_ORG_TOT | P_CHM | P_ORT

    ALK = 1 << BaseParameter.ALK
    OTHER = 1 << BaseParameter.OTHER

    # Captured by solids separation
    PARTICULATE = SS_TOT | BOD_PRT | N_ORG_PRT | P_ORG_PRT | P_CHM
    SOLUBLE = BOD_SOL | N_AMM | N_ORG_SOL | N_OXD | P_ORG_SOL | P_ORT | ALK

    @classmethod
    def from_base(cls, parameter: BaseParameter) -> 'ProcessParameter':
        return cls(1 << int(parameter))

    def to_base_parameters(self) -> List[BaseParameter]:
        """Base parameters contained in this set, in matrix order"""
        return [bp for bp in BaseParameter if self.value & (1 << int(bp))]

    def contains(self, parameter: BaseParameter) -> bool:
        return bool(self.value & (1 << int(parameter)))


ALL_PARAMETERS = ProcessParameter(sum(1 << int(bp) for bp in BaseParameter))
