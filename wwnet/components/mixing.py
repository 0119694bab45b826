from dataclasses import dataclass
from typing import Sequence

from wwnet.components.registry import register_process_type
from wwnet.parameters import BaseParameter
from wwnet.router import SingleEffluentRouter
from wwnet.solver import ParameterDefinition, RouterHandle, Solver


@register_process_type('complete_mix')
@dataclass
class CompleteMix:
    """Mix point or complete-mix tank with unity solids capture"""

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'CompleteMixRouter':
        return CompleteMixRouter(solver, num_outflows, label)


@register_process_type('pass_through')
@dataclass
class PassThrough:
    """Single inflow routed unchanged to a single effluent"""

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'PassThroughRouter':
        return PassThroughRouter(solver, num_outflows, label)


class CompleteMixRouter(SingleEffluentRouter):
    """
    Effluent flow is the sum of the inflows. Each effluent constituent is the
    flow-weighted combination of the inflow constituents:

        C_eff = sum(Q_i / Q_eff * C_i)
    """
    default = None

    def route(self, inflows: Sequence[RouterHandle]) -> None:
        effluent = self.effluent
        for parameter in BaseParameter:
            effluent[parameter] = sum(
                (inflow[parameter] * self.ratio(inflow.flow, effluent.flow) for inflow in inflows),
                ParameterDefinition()
            )


class PassThroughRouter(CompleteMixRouter):
    num_inflows = (1, 1)
