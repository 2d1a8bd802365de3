"""
Simple Bellman–Ford-style distance-vector engine.

Operates over neighbour adverts and returns an updated dest -> RouteEntry map.
"""

from typing import Collection, Dict, Mapping, Tuple

from algorithms import DistanceVectorEngine
from routing import INFINITY, MAX_COST, RouteEntry, saturating_add, unreachable


class SimpleDistanceVectorEngine(DistanceVectorEngine):
    """
    One-step Bellman–Ford relaxation suitable for DV routers.
    """

    def __init__(self, max_cost: int = MAX_COST) -> None:
        self.max_cost = max_cost

    def relax(
        self,
        self_node: str,
        neighbor_costs: Mapping[str, int],
        current_routes: Mapping[str, RouteEntry],
        adverts: Mapping[str, Mapping[str, RouteEntry]],
        destinations: Collection[str] = (),
    ) -> Tuple[Dict[str, RouteEntry], bool]:
        """
        Perform one Bellman–Ford relaxation over neighbour adverts.

        We start from the current local table and seed every known
        destination we have no entry for as unreachable, so a path found
        this round always registers as an improvement. Then for each
        neighbour we combine the link cost with the neighbour's advertised
        cost to each destination; a strictly cheaper sum replaces the local
        entry and routes via that neighbour. Our own name and unreachable
        adverts are skipped. Equal-cost alternatives never replace the
        current next hop.
        """
        new_routes: Dict[str, RouteEntry] = dict(current_routes)
        new_routes[self_node] = RouteEntry(self_node, self_node, 0)
        for dest in destinations:
            if dest not in new_routes:
                new_routes[dest] = unreachable(dest)

        changed = False
        for neighbor, link_cost in neighbor_costs.items():
            advertised = adverts.get(neighbor)
            if not advertised:
                continue

            for dest, advert in advertised.items():
                if dest == self_node or advert.cost == INFINITY:
                    continue
                candidate = saturating_add(link_cost, advert.cost, self.max_cost)
                if candidate == INFINITY:
                    continue
                current = new_routes.get(dest)
                if current is None or candidate < current.cost:
                    new_routes[dest] = RouteEntry(dest, neighbor, candidate)
                    changed = True

        return new_routes, changed
