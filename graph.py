"""
Undirected, weighted graph abstraction read by the routing engines.

Nodes are identified by name. Every edge appears in the outgoing map of
both endpoints with the same integer cost.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class Graph(ABC):
    """Weighted graph over node names."""

    @abstractmethod
    def nodes(self) -> Iterable[str]:
        """Return all node names, in a stable order."""
        raise NotImplementedError

    @abstractmethod
    def outgoing(self, node: str) -> Mapping[str, int]:
        """
        Neighbours and link costs for a given node.

        Returns: dict[str, int]
        """
        raise NotImplementedError
