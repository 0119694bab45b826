"""
Process routers.

A router is created for each process in every solve session. It registers one
effluent handle per outbound connection, then contributes two sets of
equations:

    define_flows(inflows)       one hydraulic equation per effluent, written
                                when the router is attached to the solver
    define_parameters(inflows)  one equation per effluent and BaseParameter,
                                written once the flows are resolved

Every BaseParameter a router does not define itself falls back to its default:
Default.MIX (flow-weighted mix of the inflows) or Default.ZERO. A router
without a default must define every parameter, otherwise the solve fails with
a ModelingFault.
"""
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

from wwnet.exceptions import ModelingFault, NumericalFault
from wwnet.parameters import BaseParameter
from wwnet.solver import ParameterDefinition, RouterHandle, Solver


class Default(Enum):
    """Definition used for base parameters a router leaves undefined"""
    MIX = auto()
    ZERO = auto()


def _check_count(label: str, what: str, count: int, bounds: Tuple[int, Optional[int]]) -> None:
    lower, upper = bounds
    if count < lower or (upper is not None and count > upper):
        expected = f"{lower}" if lower == upper else f"{lower}..{'' if upper is None else upper}"
        raise ModelingFault(f"{label}: expected {expected} {what}, got {count}")


class Router(ABC):
    """Abstract router. Subclasses implement route_flows and, optionally, route."""
    num_inflows: Tuple[int, Optional[int]] = (1, None)
    num_outflows: Tuple[int, Optional[int]] = (1, 1)
    default: Optional[Default] = Default.MIX

    def __init__(self, solver: Solver, num_outflows: int, label: str = ''):
        self.solver = solver
        self.label = label or type(self).__name__
        _check_count(self.label, 'outflows', num_outflows, self.num_outflows)
        self.effluents: List[RouterHandle] = [solver.register_effluent() for _ in range(num_outflows)]

    def check_inflows(self, inflows: Sequence[RouterHandle]) -> None:
        _check_count(self.label, 'inflows', len(inflows), self.num_inflows)

    def define_flows(self, inflows: Sequence[RouterHandle]) -> None:
        self.check_inflows(inflows)
        self.route_flows(inflows)

    @abstractmethod
    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        """Define the flow of every effluent"""

    def define_parameters(self, inflows: Sequence[RouterHandle]) -> None:
        self.route(inflows)
        for effluent in self.effluents:
            for parameter in BaseParameter:
                if effluent.is_defined(parameter):
                    continue
                if self.default is None:
                    raise ModelingFault(f"{self.label}: {parameter.name} is not defined "
                                        f"for effluent {effluent.router.value}")
                effluent[parameter] = self.default_definition(inflows, parameter)

    def route(self, inflows: Sequence[RouterHandle]) -> None:
        """Define the parameters this router transforms. Everything else uses the default."""

    def default_definition(self, inflows: Sequence[RouterHandle], parameter: BaseParameter) -> ParameterDefinition:
        if self.default is Default.ZERO:
            return ParameterDefinition()
        return self.mix(inflows, parameter)

    # Helpers
    @staticmethod
    def total_flow_ref(inflows: Sequence[RouterHandle]) -> ParameterDefinition:
        return sum((inflow.flow_ref for inflow in inflows), ParameterDefinition())

    @staticmethod
    def total_flow(inflows: Sequence[RouterHandle]) -> float:
        return sum(inflow.flow for inflow in inflows)

    def ratio(self, flow: float, total: float) -> float:
        """flow / total, failing on an empty mix point"""
        if abs(total) <= self.solver.zero_flow:
            raise NumericalFault('process', f"{self.label}: zero total flow into mix point")
        return flow / total

    def mix(self, inflows: Sequence[RouterHandle], parameter: BaseParameter) -> ParameterDefinition:
        """Flow-weighted concentration of the combined inflows"""
        total = self.total_flow(inflows)
        return sum((inflow[parameter] * self.ratio(inflow.flow, total) for inflow in inflows),
                   ParameterDefinition())


class SingleEffluentRouter(Router):
    """Router with exactly one effluent carrying the whole inflow"""

    @property
    def effluent(self) -> RouterHandle:
        return self.effluents[0]

    def route_flows(self, inflows: Sequence[RouterHandle]) -> None:
        self.effluent.flow_ref = self.total_flow_ref(inflows)
