"""
Linear System Assembler and Solver

This module resolves a whole process network in one pass. Every connection
owns one row of the hydraulics matrix (its flow) and one block of
NUM_BASE_PARAMETERS rows of the process matrix (its constituents). Routers
write affine equations into those rows through RouterHandles:

    x[row] = sum(coefficient * x[column]) + constant

Hydraulic equations are written as routers are attached, during REGISTRATION,
so the matrices grow on demand. The solve then runs in two stages:
    1. Hydraulics: flow of every connection
    2. Process: constituents of every connection, using the resolved flows
       as constant coefficients

Recycle streams need no special treatment since the network is solved as one
simultaneous sparse system rather than by forward substitution.

Solver sessions follow REGISTRATION -> FROZEN -> SOLVED. Indices are only
valid inside the session that issued them.
"""
from dataclasses import dataclass
from enum import Enum, auto
from itertools import count
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union
import logging

import numpy as np
from scipy import sparse
from scipy.sparse import lil_matrix
from scipy.sparse.linalg import splu, spsolve_triangular

from wwnet.exceptions import ModelingFault, NumericalFault, SolverStateError
from wwnet.loading import Load
from wwnet.parameters import BaseParameter, NUM_BASE_PARAMETERS
from wwnet.utils import default_config

logger = logging.getLogger(__name__)

METHODS = ('auto', 'lu', 'triangular')
GROWTH = ('doubling', 'exact')

_sessions = count(1)


class SolverState(Enum):
    REGISTRATION = auto()
    FROZEN = auto()
    SOLVED = auto()
    FAILED = auto()


@dataclass(frozen=True, order=True)
class RouterIndex:
    """Block of matrix rows reserved for one connection in one solver session"""
    value: int
    session: int = 0

    @property
    def position(self) -> int:
        """Row of the hydraulics matrix"""
        return self.value


@dataclass(frozen=True)
class ParameterIndex:
    """One constituent row of one connection"""
    router: RouterIndex
    parameter: BaseParameter

    @property
    def position(self) -> int:
        """Row of the process matrix"""
        return self.router.value * NUM_BASE_PARAMETERS + int(self.parameter)


Index = Union[RouterIndex, ParameterIndex]


class ParameterDefinition:
    """
    Affine expression over solver unknowns.

    Terms map an index token (RouterIndex for flows, ParameterIndex for
    constituents) to its coefficient. Definitions combine with +, - and
    scalar *, so routers can write e.g.

        effluent[BaseParameter.VOL_SS] = inflow[BaseParameter.VOL_SS] * 0.8
    """
    __slots__ = ('terms', 'constant')

    def __init__(self, terms: Optional[Dict[Index, float]] = None, constant: float = 0.0):
        self.terms: Dict[Index, float] = dict(terms) if terms else {}
        self.constant = float(constant)

    def __add__(self, other: Any) -> 'ParameterDefinition':
        if isinstance(other, Real):
            return ParameterDefinition(self.terms, self.constant + float(other))
        if not isinstance(other, ParameterDefinition):
            return NotImplemented
        terms = dict(self.terms)
        for index, coefficient in other.terms.items():
            terms[index] = terms.get(index, 0.0) + coefficient
        return ParameterDefinition(terms, self.constant + other.constant)

    __radd__ = __add__

    def __neg__(self) -> 'ParameterDefinition':
        return self * -1.0

    def __sub__(self, other: Any) -> 'ParameterDefinition':
        if not isinstance(other, (Real, ParameterDefinition)):
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other: Any) -> 'ParameterDefinition':
        return (-self) + other

    def __mul__(self, factor: Any) -> 'ParameterDefinition':
        if not isinstance(factor, Real):
            return NotImplemented
        factor = float(factor)
        return ParameterDefinition({k: c * factor for k, c in self.terms.items()}, self.constant * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: Any) -> 'ParameterDefinition':
        if not isinstance(divisor, Real):
            return NotImplemented
        return self * (1.0 / float(divisor))

    def __repr__(self) -> str:
        terms = ' + '.join(f"{c:g}*{k}" for k, c in self.terms.items())
        return f"ParameterDefinition({terms or '0'} + {self.constant:g})"


class RouterHandle:
    """
    Solver-issued handle to one connection.

    handle[bp] is a symbolic reference to this connection's constituent bp;
    assigning handle[bp] = definition writes its equation. flow_ref does the
    same for the hydraulics. flow holds the resolved flow once the hydraulics
    stage has been solved.
    """

    def __init__(self, solver: 'Solver', router: RouterIndex):
        self._solver = solver
        self.router = router
        self._flow: Optional[float] = None

    def __getitem__(self, parameter: BaseParameter) -> ParameterDefinition:
        return ParameterDefinition({ParameterIndex(self.router, BaseParameter(parameter)): 1.0})

    def __setitem__(self, parameter: BaseParameter, definition: Union[ParameterDefinition, float]) -> None:
        self._solver.define_parameter(self, parameter, definition)

    @property
    def flow_ref(self) -> ParameterDefinition:
        return ParameterDefinition({self.router: 1.0})

    @flow_ref.setter
    def flow_ref(self, definition: Union[ParameterDefinition, float]) -> None:
        self._solver.define_flow(self, definition)

    @property
    def flow(self) -> float:
        if self._flow is None:
            raise SolverStateError(f"Flow of router {self.router.value} is not resolved yet")
        return self._flow

    @property
    def owner(self) -> 'Solver':
        return self._solver

    def is_defined(self, parameter: BaseParameter) -> bool:
        return self._solver.is_defined(self, parameter)

    def __repr__(self) -> str:
        return f"RouterHandle({self.router.value})"


class Solver:
    """Assembles and solves the hydraulics and process matrices of one session"""

    def __init__(self, config=None, method: Optional[str] = None):
        self.config = config if config is not None else default_config()
        settings = self.config.solver

        self.method = method or settings.method
        if self.method not in METHODS:
            raise ValueError(f"Unknown solve method: {self.method}. Expected one of {METHODS}")
        self.growth = settings.growth
        if self.growth not in GROWTH:
            raise ValueError(f"Unknown growth policy: {self.growth}. Expected one of {GROWTH}")
        self.zero_flow = float(settings.zero_flow)
        self.residual_tolerance = float(settings.residual_tolerance)

        self._capacity = max(1, int(settings.initial_capacity))
        self._hydraulics = lil_matrix((self._capacity, self._capacity))
        self._hydraulics_rhs = np.zeros(self._capacity)
        size = self._capacity * NUM_BASE_PARAMETERS
        self._process = lil_matrix((size, size))
        self._process_rhs = np.zeros(size)

        self.session = next(_sessions)
        self._next_router = 0
        self._handles: List[RouterHandle] = []
        self._flow_rows: Set[int] = set()
        self._parameter_rows: Set[int] = set()
        self._routers: List[Tuple[Any, Sequence[RouterHandle]]] = []

        self.state = SolverState.REGISTRATION
        self.methods_used: Dict[str, str] = {}
        self._flows: Optional[np.ndarray] = None
        self._values: Optional[np.ndarray] = None

    # Registration
    def register_effluent(self) -> RouterHandle:
        """Allocate the next router index. Matrices are resized lazily."""
        if self.state is not SolverState.REGISTRATION:
            raise SolverStateError(f"Cannot register effluents in state {self.state.name}")
        handle = RouterHandle(self, RouterIndex(self._next_router, self.session))
        self._next_router += 1
        self._handles.append(handle)
        return handle

    def attach(self, router: Any, inflows: Sequence[RouterHandle]) -> None:
        """
        Record a router and its inflow handles, writing its hydraulic equations.

        Flows do not depend on any resolved value, so they are assembled here,
        while the matrices may still grow. Constituent equations wait for
        solve(), once the flows are known.
        """
        if self.state is not SolverState.REGISTRATION:
            raise SolverStateError(f"Cannot attach routers in state {self.state.name}")
        for inflow in inflows:
            self._check_handle(inflow)
        router.define_flows(inflows)
        self._routers.append((router, list(inflows)))

    @property
    def num_routers(self) -> int:
        return self._next_router

    @property
    def hydraulics_shape(self) -> Tuple[int, int]:
        return self._hydraulics.shape

    @property
    def process_shape(self) -> Tuple[int, int]:
        return self._process.shape

    def _check_handle(self, handle: RouterHandle) -> None:
        if handle.owner is not self:
            raise ModelingFault(f"{handle!r} was issued by another solver session")

    def _ensure_capacity(self, router_value: int) -> None:
        needed = router_value + 1
        if needed <= self._capacity:
            return
        if self.growth == 'doubling':
            capacity = max(needed, 2 * self._capacity)
        else:
            capacity = needed
        logger.debug("Growing linear system from %d to %d routers", self._capacity, capacity)
        self._resize(capacity)

    def _resize(self, capacity: int) -> None:
        self._hydraulics.resize((capacity, capacity))
        self._hydraulics_rhs = _resize_vector(self._hydraulics_rhs, capacity)
        size = capacity * NUM_BASE_PARAMETERS
        self._process.resize((size, size))
        self._process_rhs = _resize_vector(self._process_rhs, size)
        self._capacity = capacity

    # Definitions
    def define_flow(self, handle: RouterHandle, definition: Union[ParameterDefinition, float]) -> None:
        """Write the hydraulic equation of one connection. Registration only."""
        if self.state is not SolverState.REGISTRATION:
            raise SolverStateError(f"Cannot define flows in state {self.state.name}")
        self._check_definable(handle)
        row = handle.router.position
        if row in self._flow_rows:
            raise ModelingFault(f"Flow of router {row} defined twice")
        entries, constant = self._row_entries(row, definition, RouterIndex)
        self._write_row(self._hydraulics, self._hydraulics_rhs, row, entries, constant)
        self._flow_rows.add(row)

    def define_parameter(self, handle: RouterHandle, parameter: BaseParameter,
                         definition: Union[ParameterDefinition, float]) -> None:
        """Write the equation of one constituent of one connection"""
        self._check_definable(handle)
        parameter = BaseParameter(parameter)
        row = ParameterIndex(handle.router, parameter).position
        if row in self._parameter_rows:
            raise ModelingFault(f"{parameter.name} of router {handle.router.value} defined twice")
        entries, constant = self._row_entries(row, definition, ParameterIndex)
        self._write_row(self._process, self._process_rhs, row, entries, constant)
        self._parameter_rows.add(row)

    def is_defined(self, handle: RouterHandle, parameter: BaseParameter) -> bool:
        self._check_handle(handle)
        return ParameterIndex(handle.router, BaseParameter(parameter)).position in self._parameter_rows

    def _check_definable(self, handle: RouterHandle) -> None:
        if self.state in (SolverState.SOLVED, SolverState.FAILED):
            raise SolverStateError(f"Cannot define equations in state {self.state.name}")
        self._check_handle(handle)
        self._ensure_capacity(handle.router.value)

    def _row_entries(self, row: int, definition: Union[ParameterDefinition, float],
                     index_type: type) -> Tuple[Dict[int, float], float]:
        if isinstance(definition, Real):
            definition = ParameterDefinition(constant=float(definition))
        if not isinstance(definition, ParameterDefinition):
            raise ModelingFault(f"Expected a ParameterDefinition, got {type(definition).__name__}")

        entries = {row: 1.0}
        highest = -1
        for index, coefficient in definition.terms.items():
            if not isinstance(index, index_type):
                raise ModelingFault(f"{index!r} cannot appear in a {index_type.__name__} equation")
            router = index if isinstance(index, RouterIndex) else index.router
            if router.session != self.session:
                raise ModelingFault(f"{index!r} was issued by another solver session")
            if router.value >= self._next_router:
                raise ModelingFault(f"Router {router.value} has not been allocated")
            highest = max(highest, router.value)
            entries[index.position] = entries.get(index.position, 0.0) - coefficient
        self._ensure_capacity(highest)
        return entries, definition.constant

    @staticmethod
    def _write_row(matrix: lil_matrix, rhs: np.ndarray, row: int,
                   entries: Dict[int, float], constant: float) -> None:
        for column, coefficient in entries.items():
            if coefficient != 0.0:
                matrix[row, column] = coefficient
        rhs[row] = constant

    # Solve
    def freeze(self) -> None:
        """Size the matrices to the registered population. No allocation afterwards."""
        if self.state is not SolverState.REGISTRATION:
            raise SolverStateError(f"Cannot freeze in state {self.state.name}")
        if self._next_router > 0 and self._next_router != self._capacity:
            self._resize(self._next_router)
        self.state = SolverState.FROZEN
        logger.debug("Solver frozen with %d routers", self._next_router)

    def solve(self) -> None:
        """
        Resolve flows, then constituents, for every registered connection.

        Raises:
            ModelingFault: An equation is missing or ill-formed
            NumericalFault: Either system is singular; .stage names which one
        """
        if self.state is SolverState.REGISTRATION:
            self.freeze()
        if self.state is not SolverState.FROZEN:
            raise SolverStateError(f"Cannot solve in state {self.state.name}, start a new session")

        try:
            flows = self._solve_hydraulics()
            values = self._solve_process()
        except Exception:
            self.state = SolverState.FAILED
            for handle in self._handles:
                handle._flow = None
            raise

        self._flows = flows
        self._values = values
        self.state = SolverState.SOLVED
        logger.info("Solved %d connections (hydraulics: %s, process: %s)", self._next_router,
                    self.methods_used.get('hydraulics'), self.methods_used.get('process'))

    def _solve_hydraulics(self) -> np.ndarray:
        self._check_complete(self._flow_rows, self._next_router, 'hydraulics')

        flows = self._linear_solve(self._hydraulics, self._hydraulics_rhs, 'hydraulics')
        for handle in self._handles:
            handle._flow = float(flows[handle.router.value])

        negative = np.flatnonzero(flows < 0)
        if negative.size:
            logger.warning("%d connections resolved with negative flow: %s",
                           negative.size, negative.tolist())
        return flows

    def _solve_process(self) -> np.ndarray:
        for router, inflows in self._routers:
            router.define_parameters(inflows)
        self._check_complete(self._parameter_rows, self._next_router * NUM_BASE_PARAMETERS, 'process')

        values = self._linear_solve(self._process, self._process_rhs, 'process')
        return values.reshape(self._next_router, NUM_BASE_PARAMETERS)

    @staticmethod
    def _check_complete(defined: Set[int], size: int, stage: str) -> None:
        missing = sorted(set(range(size)) - defined)
        if not missing:
            return
        if stage == 'process':
            names = [f"router {row // NUM_BASE_PARAMETERS} {BaseParameter(row % NUM_BASE_PARAMETERS).name}"
                     for row in missing[:10]]
        else:
            names = [f"router {row} flow" for row in missing[:10]]
        logger.error("%d undefined %s equations", len(missing), stage)
        raise ModelingFault(f"Undefined {stage} equations: {', '.join(names)}"
                            + (' ...' if len(missing) > 10 else ''))

    def _linear_solve(self, matrix: lil_matrix, rhs: np.ndarray, stage: str) -> np.ndarray:
        if self._next_router == 0:
            self.methods_used[stage] = self.method
            return np.zeros(0)

        csr = matrix.tocsr()
        csr.eliminate_zeros()
        method = self.method
        if method == 'auto':
            method = 'triangular' if sparse.triu(csr, k=1).nnz == 0 else 'lu'

        try:
            if method == 'triangular':
                solution = spsolve_triangular(csr, rhs, lower=True)
            else:
                solution = splu(csr.tocsc()).solve(rhs)
        except (RuntimeError, np.linalg.LinAlgError) as exc:
            logger.error("%s system is singular: %s", stage.capitalize(), exc)
            raise NumericalFault(stage, f"singular system ({exc})") from exc

        if not np.all(np.isfinite(solution)):
            raise NumericalFault(stage, "solution contains non-finite values")

        residual = float(np.max(np.abs(csr @ solution - rhs)))
        scale = max(1.0, float(np.max(np.abs(rhs))))
        if residual > self.residual_tolerance * scale:
            raise NumericalFault(stage, f"residual {residual:.3e} exceeds tolerance")

        self.methods_used[stage] = method
        return solution

    # Read-back
    def _check_readable(self, handle: RouterHandle) -> None:
        self._check_solved()
        self._check_handle(handle)

    def _check_solved(self) -> None:
        if self.state is not SolverState.SOLVED:
            raise SolverStateError(f"Results are not available in state {self.state.name}")

    def flow(self, handle: RouterHandle) -> float:
        self._check_readable(handle)
        return float(self._flows[handle.router.value])

    def value(self, handle: RouterHandle, parameter: BaseParameter) -> float:
        self._check_readable(handle)
        return float(self._values[handle.router.value, int(parameter)])

    def load(self, handle: RouterHandle) -> Load:
        self._check_readable(handle)
        row = self._values[handle.router.value]
        return Load(**{bp.field_name: float(row[bp]) for bp in BaseParameter})


def _resize_vector(vector: np.ndarray, size: int) -> np.ndarray:
    resized = np.zeros(size)
    keep = min(size, vector.size)
    resized[:keep] = vector[:keep]
    return resized
