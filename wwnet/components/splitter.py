from dataclasses import dataclass, field
from typing import List, Sequence

from wwnet.components.registry import register_process_type
from wwnet.exceptions import ModelingFault
from wwnet.router import Default, Router
from wwnet.solver import RouterHandle, Solver

FRACTION_TOLERANCE = 1e-9


@register_process_type('splitter')
@dataclass
class Splitter:
    """
    Flow splitter. Divides the combined inflow between its outflows without
    changing constituent concentrations.

    Args:
        fractions: Share of the inflow sent to each outflow, in outbound
            connection order. Each within (0, 1], summing to 1.
    """
    fractions: List[float] = field(default_factory=list)

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'SplitterRouter':
        return SplitterRouter(solver, num_outflows, self.fractions, label)


class SplitterRouter(Router):
    num_outflows = (1, None)
    default = Default.MIX

    def __init__(self, solver: Solver, num_outflows: int, fractions: Sequence[float], label: str = ''):
        super().__init__(solver, num_outflows, label)
        if len(fractions) != num_outflows:
            raise ModelingFault(f"{self.label}: {len(fractions)} split fractions for {num_outflows} outflows")
        for fraction in fractions:
            if not 0.0 < fraction <= 1.0:
                raise ModelingFault(f"{self.label}: split fraction {fraction} outside (0, 1]")
        if abs(sum(fractions) - 1.0) > FRACTION_TOLERANCE:
            raise ModelingFault(f"{self.label}: split fractions sum to {sum(fractions)}, expected 1")
        self.fractions = [float(f) for f in fractions]

    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        total = self.total_flow_ref(inflows)
        for effluent, fraction in zip(self.effluents, self.fractions):
            effluent.flow_ref = total * fraction
