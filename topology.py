"""
Topology model: the single source of truth for routers and links.

Implements the Graph interface with an insertion-ordered node arena and
undirected edges keyed by their unordered endpoint pair.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set
import logging

from graph import Graph
from nodes import Node, Position
from outcome import ErrorKind, Outcome
from routing import MAX_COST

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Edge:
    """
    Undirected link between two distinct routers.

    Edge("A", "B", c) == Edge("B", "A", c') regardless of cost.
    """
    a: str
    b: str
    cost: int
    key: FrozenSet[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.key = frozenset((self.a, self.b))

    def other(self, name: str) -> Optional[str]:
        if name == self.a:
            return self.b
        if name == self.b:
            return self.a
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.a} --{self.cost}-- {self.b}"


def _valid_cost(cost: object) -> bool:
    return isinstance(cost, int) and not isinstance(cost, bool)


class Topology(Graph):
    """
    Routers plus links, with adjacency kept consistent on every mutation.

    Mutating calls return an Outcome; while the topology is locked (a
    simulation is running) they fail with TOPOLOGY_LOCKED. Link costs are
    limited to [-max_cost, max_cost].
    """

    def __init__(self, max_cost: int = MAX_COST) -> None:
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[FrozenSet[str], Edge] = {}
        self._locked = False
        self.max_cost = max_cost

    # --- Mutation guard ------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def _reject_if_locked(self, operation: str) -> Optional[Outcome]:
        if self._locked:
            logger.warning("rejected %s: simulation running", operation)
            return Outcome.failure(
                ErrorKind.TOPOLOGY_LOCKED, f"cannot {operation} while a simulation is running"
            )
        return None

    # --- Nodes ---------------------------------------------------------------

    def add_node(self, name: str, position: Optional[Position] = None) -> Outcome[Node]:
        """
        Add a router, or return the existing one with the same name.
        """
        rejected = self._reject_if_locked("add node")
        if rejected:
            return rejected
        if not isinstance(name, str) or not name:
            logger.warning("rejected node with empty name")
            return Outcome.failure(ErrorKind.INVALID_OPERATION, "node name must be a non-empty string")

        existing = self._nodes.get(name)
        if existing is not None:
            return Outcome.success(existing)

        node = Node(name, position)
        self._nodes[name] = node
        logger.debug("added node %s", name)
        return Outcome.success(node)

    def remove_node(self, name: str) -> Outcome[None]:
        """
        Remove a router, every link touching it, and its adjacency entries.
        """
        rejected = self._reject_if_locked("remove node")
        if rejected:
            return rejected
        node = self._nodes.get(name)
        if node is None:
            return Outcome.success()

        for edge in list(self._edges.values()):
            neighbor = edge.other(name)
            if neighbor is None:
                continue
            del self._edges[edge.key]
            self._nodes[neighbor].remove_neighbor(name)
        del self._nodes[name]
        logger.debug("removed node %s", name)
        return Outcome.success()

    def move_node(self, name: str, x: int, y: int) -> Outcome[Node]:
        node = self._nodes.get(name)
        if node is None:
            return Outcome.failure(ErrorKind.UNKNOWN_NODE, f"unknown node {name!r}")
        node.position = Position(x, y)
        return Outcome.success(node)

    def find_node_by_name(self, name: str) -> Optional[Node]:
        return self._nodes.get(name)

    def node_at(self, x: int, y: int, radius: int) -> Optional[Node]:
        """First node whose position lies within radius of (x, y)."""
        for node in self._nodes.values():
            if node.position.distance_to(x, y) <= radius:
                return node
        return None

    def next_free_name(self, prefix: str = "R") -> str:
        counter = 1
        while f"{prefix}{counter}" in self._nodes:
            counter += 1
        return f"{prefix}{counter}"

    @property
    def node_list(self) -> List[Node]:
        return list(self._nodes.values())

    # --- Edges ---------------------------------------------------------------

    def add_edge(self, a: str, b: str, cost: int) -> Outcome[Edge]:
        """
        Link two routers, or update the cost of their existing link.
        """
        rejected = self._reject_if_locked("add edge")
        if rejected:
            return rejected
        if a == b:
            logger.warning("rejected self-loop on %s", a)
            return Outcome.failure(ErrorKind.SELF_LOOP, f"cannot link {a!r} to itself")
        for name in (a, b):
            if name not in self._nodes:
                logger.warning("rejected edge %s-%s: unknown node %s", a, b, name)
                return Outcome.failure(ErrorKind.UNKNOWN_NODE, f"unknown node {name!r}")
        if not _valid_cost(cost):
            logger.warning("rejected edge %s-%s: cost %r is not an integer", a, b, cost)
            return Outcome.failure(ErrorKind.INVALID_COST, f"link cost must be an integer, got {cost!r}")
        if abs(cost) > self.max_cost:
            logger.warning("rejected edge %s-%s: cost %d outside +/-%d", a, b, cost, self.max_cost)
            return Outcome.failure(
                ErrorKind.INVALID_COST, f"link cost {cost} exceeds the cost ceiling {self.max_cost}"
            )

        key = frozenset((a, b))
        edge = self._edges.get(key)
        if edge is None:
            edge = Edge(a, b, cost)
            self._edges[key] = edge
        else:
            edge.cost = cost
        self._nodes[a].add_neighbor(b, cost)
        self._nodes[b].add_neighbor(a, cost)
        logger.debug("linked %s", edge)
        return Outcome.success(edge)

    def remove_edge(self, a: str, b: str) -> Outcome[None]:
        rejected = self._reject_if_locked("remove edge")
        if rejected:
            return rejected
        edge = self._edges.pop(frozenset((a, b)), None)
        if edge is not None:
            self._nodes[a].remove_neighbor(b)
            self._nodes[b].remove_neighbor(a)
            logger.debug("unlinked %s", edge)
        return Outcome.success()

    def find_edge(self, a: str, b: str) -> Optional[Edge]:
        return self._edges.get(frozenset((a, b)))

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def clear(self) -> Outcome[None]:
        rejected = self._reject_if_locked("clear topology")
        if rejected:
            return rejected
        self._nodes.clear()
        self._edges.clear()
        return Outcome.success()

    # --- Routing state -------------------------------------------------------

    def reset_routing_tables(self, max_cost: Optional[int] = None) -> None:
        """Reset every node to self plus one-hop routes saturated at max_cost."""
        ceiling = self.max_cost if max_cost is None else max_cost
        for node in self._nodes.values():
            node.reset_routing_table(ceiling)

    def is_connected(self) -> bool:
        """
        Breadth-first reachability from the first node covers every node.

        Informational only: unreachable nodes are a normal routing outcome.
        """
        if not self._nodes:
            return True
        start = next(iter(self._nodes))
        visited: Set[str] = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in self._nodes[current].adjacency:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return len(visited) == len(self._nodes)

    # --- Graph interface -----------------------------------------------------

    def nodes(self) -> Iterable[str]:
        return list(self._nodes)

    def outgoing(self, node: str) -> Mapping[str, int]:
        found = self._nodes.get(node)
        return found.adjacency if found else {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes
