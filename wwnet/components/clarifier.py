from dataclasses import dataclass
from typing import Sequence

from wwnet.components.registry import register_process_type
from wwnet.exceptions import ModelingFault
from wwnet.loading import sanitize_fraction
from wwnet.parameters import ProcessParameter
from wwnet.router import Default, Router
from wwnet.solver import RouterHandle, Solver


@register_process_type('clarifier')
@dataclass
class Clarifier:
    """
    Solids separator (primary or secondary clarifier).

    The first outflow is the overflow, the second the underflow.

    Args:
        underflow_fraction: Share of the inflow leaving as underflow (0, 1)
        capture: Share of particulate constituents kept out of the overflow (0, 1]
    """
    underflow_fraction: float = 0.01
    capture: float = 0.95

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'ClarifierRouter':
        return ClarifierRouter(solver, num_outflows, self.underflow_fraction, self.capture, label)


class ClarifierRouter(Router):
    """
    Particulates leave the overflow at (1 - capture) times the mixed inflow
    concentration, the underflow carries the rest of their mass:

        C_o = (1 - c) * C_in
        C_u = C_in * (Q_in - (1 - c) * Q_o) / Q_u

    Soluble constituents keep the mixed inflow concentration in both streams.
    """
    num_outflows = (2, 2)
    default = Default.MIX

    def __init__(self, solver: Solver, num_outflows: int, underflow_fraction: float,
                 capture: float, label: str = ''):
        super().__init__(solver, num_outflows, label)
        self.underflow_fraction = sanitize_fraction(underflow_fraction, 'underflow_fraction')
        if not 0.0 < capture <= 1.0:
            raise ModelingFault(f"{self.label}: capture must be within (0, 1], got {capture}")
        self.capture = capture

    @property
    def overflow(self) -> RouterHandle:
        return self.effluents[0]

    @property
    def underflow(self) -> RouterHandle:
        return self.effluents[1]

    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        total = self.total_flow_ref(inflows)
        self.underflow.flow_ref = total * self.underflow_fraction
        self.overflow.flow_ref = total * (1.0 - self.underflow_fraction)

    def route(self, inflows: Sequence[RouterHandle]) -> None:
        escape = 1.0 - self.capture
        total = self.total_flow(inflows)
        underflow_share = self.ratio(total - escape * self.overflow.flow, self.underflow.flow)
        for parameter in ProcessParameter.PARTICULATE.to_base_parameters():
            mixed = self.mix(inflows, parameter)
            self.overflow[parameter] = mixed * escape
            self.underflow[parameter] = mixed * underflow_share
