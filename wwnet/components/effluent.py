from dataclasses import dataclass
from typing import Sequence

from wwnet.components.registry import register_process_type
from wwnet.router import Router
from wwnet.solver import RouterHandle, Solver


@register_process_type('effluent')
@dataclass
class Effluent:
    """Plant discharge. Sink process with no outbound connections."""

    def create_router(self, solver: Solver, num_outflows: int, label: str = '') -> 'EffluentRouter':
        return EffluentRouter(solver, num_outflows, label)


class EffluentRouter(Router):
    """Contributes no equations. Its inflows are defined by their upstream routers."""
    num_outflows = (0, 0)
    default = None

    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        return None
