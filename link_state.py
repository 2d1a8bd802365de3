"""
Link State routing: every router computes its own shortest-path tree.

Each router is assumed to hold the full topology, so a run is a Dijkstra
over the shared topology from that router followed by first-hop derivation.
"""

from typing import Dict, List, Mapping, Optional, Set
import logging

from algorithms import DijkstraEngine
from dijkstra_engine import SimpleDijkstraEngine
from outcome import ErrorKind, Outcome
from routing import RouteEntry, Snapshot, unreachable
from topology import Topology

logger = logging.getLogger(__name__)


def first_hop(source: str, dest: str, parents: Mapping[str, str]) -> Optional[str]:
    """
    Walk the predecessor chain back from dest to the node adjacent to source.

    Returns None when dest is not on the source's tree.
    """
    step = dest
    seen: Set[str] = set()
    while step in parents and step not in seen:
        seen.add(step)
        parent = parents[step]
        if parent == source:
            return step
        step = parent
    return None


class LinkState:
    """
    Link State run bound to a topology.

    Keeps the predecessor tree of every source it has run so paths can be
    reconstructed afterwards.
    """

    def __init__(self, topology: Topology, engine: Optional[DijkstraEngine] = None) -> None:
        self._topology = topology
        self._engine = engine or SimpleDijkstraEngine()
        self._parents: Dict[str, Dict[str, str]] = {}
        self.source: Optional[str] = None

    def run(self, source: str) -> Outcome[Dict[str, RouteEntry]]:
        """
        Compute source's routing table over the current topology.

        Every topology node ends up in the table: reachable ones with their
        shortest cost and first hop, the rest as unreachable.
        """
        node = self._topology.find_node_by_name(source)
        if node is None:
            logger.warning("link state run for unknown source %r", source)
            return Outcome.failure(ErrorKind.UNKNOWN_NODE, f"unknown node {source!r}")

        self.source = source
        node.reset_routing_table()
        dist, parents = self._engine.shortest_paths(self._topology, source)
        self._parents[source] = parents

        routes: Dict[str, RouteEntry] = {}
        for dest in self._topology.nodes():
            if dest == source:
                routes[dest] = RouteEntry(source, source, 0)
                continue
            hop = first_hop(source, dest, parents) if dest in dist else None
            if hop is None:
                routes[dest] = unreachable(dest)
            else:
                routes[dest] = RouteEntry(dest, hop, dist[dest])

        node.replace_routes(routes)
        logger.debug("link state table for %s: %d reachable", source, len(dist) - 1)
        return Outcome.success(node.routes)

    def run_for_all_routers(self) -> Outcome[Snapshot]:
        """
        Let every router compute its own table, in topology order.
        """
        for name in self._topology.nodes():
            self.run(name)
        return Outcome.success(self.all_routing_tables())

    def shortest_path(self, source: str, destination: str) -> Outcome[List[str]]:
        """
        Ordered node names from source to destination on source's tree.

        The path is rebuilt from the predecessor tree stored by run(source),
        not from the first-hop table, so every intermediate router appears
        and the list starts with source itself. The walk goes from
        destination back towards source. A node with no
        predecessor or a repeated node ends it early and the partial path
        found so far is returned.
        """
        for name in (source, destination):
            if name not in self._topology:
                return Outcome.failure(ErrorKind.UNKNOWN_NODE, f"unknown node {name!r}")
        parents = self._parents.get(source)
        if parents is None:
            return Outcome.failure(
                ErrorKind.INVALID_OPERATION, f"no link state run for {source!r} yet"
            )

        path: List[str] = [destination]
        seen: Set[str] = {destination}
        current = destination
        while current != source:
            parent = parents.get(current)
            if parent is None or parent in seen:
                break
            path.append(parent)
            seen.add(parent)
            current = parent

        path.reverse()
        return Outcome.success(path)

    def all_routing_tables(self) -> Snapshot:
        return {node.name: node.routes for node in self._topology.node_list}
