"""
Network Mass Balance Module

This module resolves a ModelManager into per-connection flows and loads.

The process includes:
1. Ordering processes (topological for acyclic networks)
2. Creating a router per process, one effluent handle per outbound connection
3. Attaching each router to the handles of its inbound connections, which
   writes the hydraulic equations while the matrices can still grow
4. Solving hydraulics and constituents in one Solver session
5. Publishing the results per connection
"""
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

import pandas as pd
from dynaconf import Dynaconf

from wwnet.exceptions import ModelingFault
from wwnet.loading import Load, AGGREGATES
from wwnet.model_manager import ModelManager
from wwnet.solver import RouterHandle, Solver
from wwnet.utils import default_config, mass_rate, FLOW_UNIT, CONCENTRATION_UNIT

logger = logging.getLogger(__name__)


@dataclass
class NetworkResults:
    """Resolved flow [m³/d] and load [mg/L] of every connection"""
    flows: Dict[int, float] = field(default_factory=dict)
    loads: Dict[int, Load] = field(default_factory=dict)
    method: Dict[str, str] = field(default_factory=dict)

    def flow(self, conn_id: int) -> float:
        if conn_id not in self.flows:
            raise KeyError(f"Unknown connection: {conn_id}")
        return self.flows[conn_id]

    def load(self, conn_id: int) -> Load:
        if conn_id not in self.loads:
            raise KeyError(f"Unknown connection: {conn_id}")
        return self.loads[conn_id]

    def mass_load(self, conn_id: int) -> Load:
        """Mass rates [kg/d] carried by a connection"""
        return self.load(conn_id) * mass_rate(1.0, self.flow(conn_id))

    def to_dataframe(self, units: bool = True) -> pd.DataFrame:
        """
        Results as a DataFrame indexed by connection.

        Args:
            units: Attach pint units (flow in m³/d, constituents in mg/L)
        """
        rows = [{'connection': conn_id, 'flow': self.flows[conn_id], **self.loads[conn_id].to_dict()}
                for conn_id in sorted(self.flows)]
        columns = ['connection', 'flow'] + list(Load.empty().to_dict().keys())
        df = pd.DataFrame(rows, columns=columns).set_index('connection')

        if units:
            df['flow'] = df['flow'].astype(f"pint[{FLOW_UNIT}]")
            for col in df.columns:
                if col != 'flow':
                    df[col] = df[col].astype(f"pint[{CONCENTRATION_UNIT}]")
        return df


def solve_network(model: ModelManager, config: Optional[Dynaconf] = None) -> NetworkResults:
    """
    Run the mass balance of a process network.

    Args:
        model: Process network
        config: Solver configuration, defaults to default_config()

    Returns:
        NetworkResults with the flow and load of every connection

    Raises:
        ModelingFault: A process is wired or parameterized inconsistently
        NumericalFault: The hydraulics or process system is singular
    """
    config = config if config is not None else default_config()
    method = config.solver.method

    if model.has_cycle():
        recycles = model.find_recycles()
        logger.info("Network has %d recycle loops: %s", len(recycles), recycles)
        if method == 'auto':
            method = 'lu'
        elif method == 'triangular':
            logger.warning("Triangular solve requested for a network with recycles")

    solver = Solver(config, method=method)
    handles: Dict[int, RouterHandle] = {}
    routers = []

    for process_id in model.calculation_order():
        process = model.get_process(process_id)
        if not hasattr(process.impl, 'create_router'):
            raise ModelingFault(f"Process {process.id} has no router implementation")
        outflows = model.outflows(process_id)
        label = f"{process.name or process.tag} ({process.id})"
        router = process.impl.create_router(solver, len(outflows), label)
        for conn, handle in zip(outflows, router.effluents):
            handles[conn.id] = handle
        routers.append((process, router))

    for process, router in routers:
        inflows = [handles[conn.id] for conn in model.inflows(process.id)]
        solver.attach(router, inflows)

    logger.info("Solving %d processes, %d connections", model.num_processes, model.num_connections)
    solver.solve()

    return NetworkResults(
        flows={conn_id: solver.flow(handle) for conn_id, handle in handles.items()},
        loads={conn_id: solver.load(handle) for conn_id, handle in handles.items()},
        method=dict(solver.methods_used)
    )


def summarize(results: NetworkResults, model: ModelManager) -> pd.DataFrame:
    """
    Flow and aggregate loads of the plant boundary streams.

    Each row is labelled influent (leaves a source), effluent (enters a sink)
    or through (runs straight from a source to a sink).
    """
    rows = []
    for conn in model.connections():
        upstream = model.get_process(conn.upstream)
        downstream = model.get_process(conn.downstream)
        from_source = not model.inflows(upstream.id)
        to_sink = not model.outflows(downstream.id)
        if not from_source and not to_sink:
            continue
        if from_source and to_sink:
            boundary = 'through'
        else:
            boundary = 'influent' if from_source else 'effluent'
        load = results.load(conn.id)
        rows.append({
            'connection': conn.id,
            'boundary': boundary,
            'from': upstream.name,
            'to': downstream.name,
            'flow': results.flow(conn.id),
            **{name: getattr(load, name) for name in AGGREGATES}
        })
    return pd.DataFrame(rows)
