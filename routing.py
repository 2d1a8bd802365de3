"""
Routing values shared by the topology, the engines and the controller.

Routes are stored as one RouteEntry per destination so cost and next hop
can never drift apart; the dual routing/next-hop maps shown to a UI are
derived views.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Union
import math

# Sentinel "no known path". Never relaxes into a finite improvement.
INFINITY = math.inf

# Next hop recorded for destinations without a path.
NO_NEXT_HOP = "-"

# Costs are bounded like 32-bit integers; anything past this saturates.
MAX_COST = 2**31 - 1

Cost = Union[int, float]


class AlgorithmKind(Enum):
    """
    Routing algorithms the controller can drive.
    """

    DISTANCE_VECTOR = "dv"
    LINK_STATE = "ls"


@dataclass(frozen=True)
class RouteEntry:
    """
    Single entry in a node's routing table.
    """
    dest: str
    next_hop: str
    cost: Cost

    @property
    def reachable(self) -> bool:
        return self.cost != INFINITY


# node name -> (dest -> RouteEntry)
Snapshot = Dict[str, Dict[str, RouteEntry]]


def saturating_add(a: Cost, b: Cost, ceiling: int = MAX_COST) -> Cost:
    """
    Add two path costs without ever producing a wrapped value.

    Either operand being INFINITY, or a sum above the ceiling, yields
    INFINITY. Sums below -ceiling are clamped so negative cycles stay
    bounded while the iteration cap stops them.
    """
    if a == INFINITY or b == INFINITY:
        return INFINITY
    total = a + b
    if total > ceiling:
        return INFINITY
    if total < -ceiling:
        return -ceiling
    return total


def unreachable(dest: str) -> RouteEntry:
    return RouteEntry(dest, NO_NEXT_HOP, INFINITY)


def snapshot_tables(snapshot: Mapping[str, Mapping[str, RouteEntry]]) -> Dict[str, Dict[str, dict]]:
    """
    Render a snapshot as separate routing and next-hop maps per node.

    Returns {name: {"routing_table": {dest: cost}, "next_hop_table": {dest: hop}}}.
    """
    tables: Dict[str, Dict[str, dict]] = {}
    for name, routes in snapshot.items():
        tables[name] = {
            "routing_table": {dest: entry.cost for dest, entry in routes.items()},
            "next_hop_table": {dest: entry.next_hop for dest, entry in routes.items()},
        }
    return tables
