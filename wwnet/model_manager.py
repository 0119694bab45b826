"""
Process network model.

The ModelManager owns every Process and Connection of a treatment plant.
Entities are stored in id-keyed maps and mirrored in a networkx MultiDiGraph
(nodes are process ids, edge keys are connection ids) used for traversal and
cycle detection. Connections refer to processes by id only.

Removal policy: a process still referenced by a connection is not removed
unless the caller asks for cascading removal explicitly.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import logging

import networkx as nx

from wwnet.exceptions import StructuralFault

logger = logging.getLogger(__name__)


@dataclass
class Process:
    """Unit operation node"""
    id: int
    impl: Any = field(repr=False)
    name: str = ''

    @property
    def tag(self) -> str:
        return getattr(self.impl, 'tag', type(self.impl).__name__)


@dataclass(frozen=True)
class Connection:
    """Directed flow stream between two processes"""
    id: int
    upstream: int
    downstream: int


class ModelManager:
    """Owns processes and connections of one treatment plant model"""

    def __init__(self):
        self._graph = nx.MultiDiGraph()
        self._processes: Dict[int, Process] = {}
        self._connections: Dict[int, Connection] = {}
        self._next_process_id = 1
        self._next_connection_id = 1

    # Processes
    def add_process(self, process: Process) -> bool:
        """Insert a process. Returns False if its id is already taken."""
        if process.id in self._processes:
            return False
        self._processes[process.id] = process
        self._graph.add_node(process.id)
        self._next_process_id = max(self._next_process_id, process.id + 1)
        return True

    def create_process(self, name: str, impl: Any) -> Process:
        """Create and insert a process with the next free identifier"""
        process = Process(self._next_process_id, impl, name)
        self.add_process(process)
        return process

    def get_process(self, process_id: int) -> Optional[Process]:
        return self._processes.get(process_id)

    def remove_process(self, process_id: int, cascade: bool = False) -> Optional[Process]:
        """
        Remove a process by identifier.

        Args:
            process_id: Process to remove
            cascade: Also remove every connection referencing the process.
                Without it, removal is rejected while connections remain.

        Returns:
            The removed process, or None if absent or still referenced
        """
        if process_id not in self._processes:
            return None

        dependent = self.inflows(process_id) + self.outflows(process_id)
        if dependent and not cascade:
            logger.warning("Process %d still has %d connections, removal rejected",
                           process_id, len(dependent))
            return None

        for conn in dependent:
            self.remove_connection(conn.id)
        self._graph.remove_node(process_id)
        return self._processes.pop(process_id)

    # Connections
    def add_connection(self, conn: Connection) -> bool:
        """Insert a connection. Returns False on duplicate id or missing endpoint."""
        if conn.id in self._connections:
            return False
        if conn.upstream not in self._processes or conn.downstream not in self._processes:
            return False
        self._connections[conn.id] = conn
        self._graph.add_edge(conn.upstream, conn.downstream, key=conn.id)
        self._next_connection_id = max(self._next_connection_id, conn.id + 1)
        return True

    def create_connection(self, upstream: int, downstream: int) -> Connection:
        """Create and insert a connection with the next free identifier"""
        for endpoint in (upstream, downstream):
            if endpoint not in self._processes:
                raise StructuralFault(f"Connection endpoint {endpoint} is not a registered process")
        conn = Connection(self._next_connection_id, upstream, downstream)
        self.add_connection(conn)
        return conn

    def get_connection(self, conn_id: int) -> Optional[Connection]:
        return self._connections.get(conn_id)

    def remove_connection(self, conn_id: int) -> Optional[Connection]:
        conn = self._connections.pop(conn_id, None)
        if conn is not None:
            self._graph.remove_edge(conn.upstream, conn.downstream, key=conn_id)
        return conn

    # Traversal
    def inflows(self, process_id: int) -> List[Connection]:
        """Inbound connections of a process, ordered by connection id"""
        if process_id not in self._graph:
            return []
        keys = [key for _, _, key in self._graph.in_edges(process_id, keys=True)]
        return [self._connections[key] for key in sorted(keys)]

    def outflows(self, process_id: int) -> List[Connection]:
        """Outbound connections of a process, ordered by connection id"""
        if process_id not in self._graph:
            return []
        keys = [key for _, _, key in self._graph.out_edges(process_id, keys=True)]
        return [self._connections[key] for key in sorted(keys)]

    def processes(self) -> Iterator[Process]:
        for process_id in sorted(self._processes):
            yield self._processes[process_id]

    def connections(self) -> Iterator[Connection]:
        for conn_id in sorted(self._connections):
            yield self._connections[conn_id]

    def sources(self) -> List[Process]:
        """Processes with no inbound connection (plant influents)"""
        return [p for p in self.processes() if self._graph.in_degree(p.id) == 0]

    def set_influent(self, process_id: int, flow: float, load: Any) -> None:
        """Set the boundary flow and load of a source process"""
        process = self.get_process(process_id)
        if process is None:
            raise StructuralFault(f"Unknown process: {process_id}")
        if self._graph.in_degree(process_id) > 0:
            raise StructuralFault(f"Process {process_id} has inbound connections and is not a source")
        if not hasattr(process.impl, 'load'):
            raise StructuralFault(f"Process {process_id} ({process.tag}) does not accept a boundary load")
        process.impl.flow = flow
        process.impl.load = load

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._graph)

    def find_recycles(self) -> List[List[int]]:
        """Process id cycles created by recycle streams"""
        return [sorted(cycle) for cycle in nx.simple_cycles(nx.DiGraph(self._graph))]

    def calculation_order(self) -> List[int]:
        """Topological order for acyclic networks, identifier order otherwise"""
        if self.has_cycle():
            return sorted(self._processes)
        return list(nx.lexicographical_topological_sort(self._graph))

    @property
    def num_processes(self) -> int:
        return len(self._processes)

    @property
    def num_connections(self) -> int:
        return len(self._connections)

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph
