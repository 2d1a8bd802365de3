"""
Distance Vector routing over a whole topology.

Every node relaxes against its neighbours' tables from the previous round
and all new tables are committed together, so a round is synchronous.
"""

from typing import Mapping, Optional, Tuple
import logging

from algorithms import DistanceVectorEngine
from distance_vector_engine import SimpleDistanceVectorEngine
from graph import Graph
from outcome import ErrorKind, Outcome
from routing import RouteEntry, Snapshot
from topology import Topology

logger = logging.getLogger(__name__)

DEFAULT_ITERATION_FACTOR = 10


def run_dv_round(
    graph: Graph,
    tables: Mapping[str, Mapping[str, RouteEntry]],
    engine: DistanceVectorEngine,
) -> Tuple[Snapshot, bool]:
    """
    Perform one synchronous DV round across all nodes of the graph.

    Every node reads its neighbours' pre-round tables; nothing in `tables`
    is modified. Returns the new tables and whether any node changed.
    """
    names = list(graph.nodes())
    new_tables: Snapshot = {}
    changed = False
    for name in names:
        neighbor_costs = graph.outgoing(name)
        adverts = {n: tables.get(n, {}) for n in neighbor_costs}
        routes, node_changed = engine.relax(
            self_node=name,
            neighbor_costs=neighbor_costs,
            current_routes=tables.get(name, {}),
            adverts=adverts,
            destinations=names,
        )
        new_tables[name] = routes
        changed = changed or node_changed
    return new_tables, changed


def check_iteration_factor(factor: int) -> Optional[Outcome]:
    if not isinstance(factor, int) or isinstance(factor, bool) or factor < 0:
        logger.warning("rejected iteration factor %r", factor)
        return Outcome.failure(
            ErrorKind.INVALID_BOUND, f"iteration factor must be a non-negative integer, got {factor!r}"
        )
    return None


class DistanceVector:
    """
    Distance Vector run bound to a topology.

    Reads adjacency from the topology and writes the committed tables back
    into its nodes after every round.
    """

    def __init__(
        self,
        topology: Topology,
        engine: Optional[DistanceVectorEngine] = None,
        iteration_factor: int = DEFAULT_ITERATION_FACTOR,
    ) -> None:
        self._topology = topology
        self._engine = engine or SimpleDistanceVectorEngine()
        self.iteration_factor = iteration_factor
        self._iteration = 0
        self._converged = False

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def converged(self) -> bool:
        return self._converged

    @property
    def max_iterations(self) -> int:
        """Round cap guarding against oscillation and count-to-infinity."""
        return self.iteration_factor * len(self._topology)

    def run_iteration(self) -> bool:
        """
        Run one round and commit it. Returns True once a round changes nothing.
        """
        if len(self._topology) == 0:
            self._converged = True
            return True

        self._iteration += 1
        current = {node.name: node.routes for node in self._topology.node_list}
        new_tables, changed = run_dv_round(self._topology, current, self._engine)
        for node in self._topology.node_list:
            node.replace_routes(new_tables[node.name])

        self._converged = not changed
        logger.debug("dv round %d changed=%s", self._iteration, changed)
        return self._converged

    def run_until_convergence(self) -> Outcome[bool]:
        """
        Reset all tables and step until convergence or the round cap.

        The Outcome value is True only when the network converged; hitting
        the cap is reported as a successful run with value False.
        """
        rejected = check_iteration_factor(self.iteration_factor)
        if rejected:
            return rejected

        self._converged = False
        self._iteration = 0
        self._topology.reset_routing_tables(getattr(self._engine, "max_cost", None))

        limit = self.max_iterations
        if len(self._topology) == 0:
            self.run_iteration()
        while not self._converged and self._iteration < limit:
            self.run_iteration()

        if self._converged:
            logger.info("dv converged after %d rounds", self._iteration)
        else:
            logger.warning("dv stopped at round cap %d without converging", limit)
        return Outcome.success(self._converged)

    def all_routing_tables(self) -> Snapshot:
        return {node.name: node.routes for node in self._topology.node_list}
