from dataclasses import dataclass, field
from typing import Sequence

from wwnet.components.registry import register_process_type
from wwnet.loading import Load
from wwnet.parameters import BaseParameter
from wwnet.router import SingleEffluentRouter
from wwnet.solver import ParameterDefinition, RouterHandle, Solver


@register_process_type('influent')
@dataclass
class Influent:
    """
    Plant influent. Source process with no inbound connections.

    Args:
        flow: Influent flow [m³/d]
        load: Influent constituents [mg/L]
    """
    flow: float = 0.0
    load: Load = field(default_factory=Load.empty)

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'InfluentRouter':
        return InfluentRouter(solver, num_outflows, self.flow, self.load, label)


class InfluentRouter(SingleEffluentRouter):
    """Boundary values: flow and every constituent are constants"""
    num_inflows = (0, 0)
    default = None

    def __init__(self, solver: Solver, num_outflows: int, flow: float, load: Load, label: str = ''):
        super().__init__(solver, num_outflows, label)
        self.flow = float(flow)
        self.load = load

    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        self.effluent.flow_ref = ParameterDefinition(constant=self.flow)

    def route(self, inflows: Sequence[RouterHandle]) -> None:
        for parameter in BaseParameter:
            self.effluent[parameter] = ParameterDefinition(constant=self.load[parameter])
