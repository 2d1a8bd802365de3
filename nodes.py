"""
Router node for the topology.

A node owns its adjacency (neighbor name -> link cost) and its routing
table (dest -> RouteEntry). Nodes refer to each other by name only.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional
import math

from routing import INFINITY, MAX_COST, Cost, RouteEntry, saturating_add, unreachable


@dataclass(frozen=True)
class Position:
    """Where a presentation layer draws the node."""
    x: int = 100
    y: int = 100

    def distance_to(self, x: int, y: int) -> float:
        return math.hypot(x - self.x, y - self.y)


class Node:
    """
    Router in the simulated network.

    The routing table always holds an entry for the node itself at cost 0
    with itself as next hop.
    """

    def __init__(self, name: str, position: Optional[Position] = None) -> None:
        self._name = name
        self.position = position or Position()
        self._adjacency: Dict[str, int] = {}
        self._routes: Dict[str, RouteEntry] = {name: RouteEntry(name, name, 0)}

    @property
    def name(self) -> str:
        return self._name

    # --- Adjacency (kept in sync by Topology) --------------------------------

    @property
    def adjacency(self) -> Mapping[str, int]:
        """Direct neighbours and link costs (copy)."""
        return dict(self._adjacency)

    def has_neighbor(self, name: str) -> bool:
        return name in self._adjacency

    def link_cost(self, name: str) -> Optional[int]:
        return self._adjacency.get(name)

    def add_neighbor(self, name: str, cost: int) -> None:
        """
        Record a direct link, seeding a one-hop route when it improves on
        what the table already holds.
        """
        self._adjacency[name] = cost
        current = self._routes.get(name)
        if current is None or current.cost > cost:
            self._routes[name] = RouteEntry(name, name, cost)

    def remove_neighbor(self, name: str) -> None:
        self._adjacency.pop(name, None)
        self._routes.pop(name, None)

    # --- Routing table -------------------------------------------------------

    @property
    def routes(self) -> Dict[str, RouteEntry]:
        """Routing table as dest -> RouteEntry (copy)."""
        return dict(self._routes)

    def routing_table(self) -> Dict[str, Cost]:
        return {dest: entry.cost for dest, entry in self._routes.items()}

    def next_hop_table(self) -> Dict[str, str]:
        return {dest: entry.next_hop for dest, entry in self._routes.items()}

    def cost_to(self, dest: str) -> Optional[Cost]:
        entry = self._routes.get(dest)
        return entry.cost if entry else None

    def next_hop(self, dest: str) -> Optional[str]:
        entry = self._routes.get(dest)
        return entry.next_hop if entry else None

    def update_route(self, dest: str, cost: Cost, next_hop: str) -> None:
        self._routes[dest] = RouteEntry(dest, next_hop, cost)

    def replace_routes(self, routes: Mapping[str, RouteEntry]) -> None:
        """Install a complete table, restoring the self entry."""
        self._routes = dict(routes)
        self._routes[self._name] = RouteEntry(self._name, self._name, 0)

    def reset_routing_table(self, max_cost: int = MAX_COST) -> None:
        """
        Drop everything but self, then re-seed one-hop routes to neighbours.

        Seeds saturate like any other path cost: a link above max_cost is
        recorded as unreachable.
        """
        self._routes = {self._name: RouteEntry(self._name, self._name, 0)}
        for neighbor, cost in self._adjacency.items():
            seeded = saturating_add(0, cost, max_cost)
            if seeded == INFINITY:
                self._routes[neighbor] = unreachable(neighbor)
            else:
                self._routes[neighbor] = RouteEntry(neighbor, neighbor, seeded)

    def __repr__(self) -> str:
        return f"Node({self._name!r})"
