from dataclasses import dataclass
from typing import Sequence

from wwnet.components.registry import register_process_type
from wwnet.exceptions import ModelingFault
from wwnet.loading import sanitize_fraction
from wwnet.parameters import BaseParameter
from wwnet.router import Default, SingleEffluentRouter
from wwnet.solver import RouterHandle, Solver

# mg CaCO3 consumed per mg NH4-N oxidized
ALKALINITY_PER_N = 7.14


@register_process_type('nitrification')
@dataclass
class Nitrification:
    """
    Aerobic reactor oxidizing ammonia to nitrate.

    Args:
        efficiency: Share of the ammonia nitrogen oxidized (0, 1)
        alkalinity_ratio: Alkalinity consumed per unit of nitrogen oxidized
    """
    efficiency: float = 0.9
    alkalinity_ratio: float = ALKALINITY_PER_N

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'NitrificationRouter':
        return NitrificationRouter(solver, num_outflows, self.efficiency, self.alkalinity_ratio, label)


class NitrificationRouter(SingleEffluentRouter):
    default = Default.MIX

    def __init__(self, solver: Solver, num_outflows: int, efficiency: float,
                 alkalinity_ratio: float, label: str = ''):
        super().__init__(solver, num_outflows, label)
        self.efficiency = sanitize_fraction(efficiency, 'efficiency')
        if alkalinity_ratio < 0:
            raise ModelingFault(f"{self.label}: alkalinity_ratio must be non-negative")
        self.alkalinity_ratio = alkalinity_ratio

    def route(self, inflows: Sequence[RouterHandle]) -> None:
        ammonia = self.mix(inflows, BaseParameter.AMM_N)
        oxidized = ammonia * self.efficiency
        self.effluent[BaseParameter.AMM_N] = ammonia - oxidized
        self.effluent[BaseParameter.NOX] = self.mix(inflows, BaseParameter.NOX) + oxidized
        self.effluent[BaseParameter.ALK] = (self.mix(inflows, BaseParameter.ALK)
                                            - oxidized * self.alkalinity_ratio)
