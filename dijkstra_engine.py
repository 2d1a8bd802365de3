"""
Heap-based DijkstraEngine implementation.

Uses Python's heapq to compute single-source shortest paths over any Graph
implementation that satisfies the Graph interface. Link costs are assumed
non-negative.
"""

from typing import Dict, List, Set, Tuple
import heapq
import itertools
import math

from algorithms import DijkstraEngine
from graph import Graph
from routing import MAX_COST, Cost, saturating_add


class SimpleDijkstraEngine(DijkstraEngine):
    """
    Single-source Dijkstra using a binary heap and a visited set.

    Complexity:
        O(E log V) over the nodes reachable from the source.
    """

    def __init__(self, max_cost: int = MAX_COST) -> None:
        self.max_cost = max_cost

    def shortest_path_costs(self, graph: Graph, source: str) -> Dict[str, Cost]:
        """
        Compute only the cost map for all reachable nodes from source.
        """
        dist, _ = self.shortest_paths(graph, source)
        return dist

    def shortest_paths(
        self, graph: Graph, source: str
    ) -> Tuple[Dict[str, Cost], Dict[str, str]]:
        """
        Dijkstra variant that also records predecessors for path reconstruction.

        It returns the distance map (dest -> cost from source) plus a
        predecessor map that lets you walk back from any reachable node to
        the source. The predecessor map omits the source itself because it
        has no parent; unreachable nodes are absent from both maps.

        Equal distances are popped in push order, so ties go to whichever
        route was discovered first.
        """
        dist: Dict[str, Cost] = {source: 0}
        prev: Dict[str, str] = {}
        visited: Set[str] = set()
        order = itertools.count()
        pq: List[Tuple[Cost, int, str]] = [(0, next(order), source)]

        while pq:
            d_u, _, u = heapq.heappop(pq)
            if u in visited:
                continue
            visited.add(u)

            for v, w in graph.outgoing(u).items():
                if v in visited:
                    continue
                alt = saturating_add(d_u, w, self.max_cost)
                if alt < dist.get(v, math.inf):
                    dist[v] = alt
                    prev[v] = u
                    heapq.heappush(pq, (alt, next(order), v))

        return dist, prev
