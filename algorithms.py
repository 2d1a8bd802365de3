"""
Algorithm interfaces for routing.

Keeps graph algorithms separate from topology bookkeeping and the
simulation controller. Implementations are pure: they read their inputs
and return new tables without touching any Node.
"""

from abc import ABC, abstractmethod
from typing import Collection, Dict, Mapping, Tuple

from graph import Graph
from routing import Cost, RouteEntry


class DijkstraEngine(ABC):
    """
    Interface for single-source shortest-path computation.
    """

    @abstractmethod
    def shortest_path_costs(self, graph: Graph, source: str) -> Dict[str, Cost]:
        """
        Compute shortest-path costs from source to all reachable nodes.

        Returns:
            Mapping dest_node -> path_cost(source -> dest_node).
        """
        raise NotImplementedError

    @abstractmethod
    def shortest_paths(
        self, graph: Graph, source: str
    ) -> Tuple[Dict[str, Cost], Dict[str, str]]:
        """
        Compute shortest-path costs plus the predecessor chain for each dest.

        Returns:
            (dist, prev) where dist is the cost map and prev records parents.
        """
        raise NotImplementedError


class DistanceVectorEngine(ABC):
    """
    Interface for a Bellman–Ford-style distance-vector relaxation step.
    """

    @abstractmethod
    def relax(
        self,
        self_node: str,
        neighbor_costs: Mapping[str, int],
        current_routes: Mapping[str, RouteEntry],
        adverts: Mapping[str, Mapping[str, RouteEntry]],
        destinations: Collection[str] = (),
    ) -> Tuple[Dict[str, RouteEntry], bool]:
        """
        Perform one relaxation step for self_node.

        Args:
            self_node: node whose routes are updated.
            neighbor_costs: cost(self_node -> v) for each neighbour v.
            current_routes: current local table dest -> RouteEntry.
            adverts: for each neighbour v: its table as of the previous round.
            destinations: every node known to exist; missing ones are seeded
                as unreachable.

        Returns:
            (new_routes, changed) after one Bellman–Ford relaxation step.
        """
        raise NotImplementedError
