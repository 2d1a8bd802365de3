"""
Typed failure results returned across the public API.

Malformed caller input (unknown names, self-links, bad bounds) is reported
as an Outcome carrying a RoutingError instead of an exception.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    INVALID_OPERATION = auto()
    SELF_LOOP = auto()
    UNKNOWN_NODE = auto()
    INVALID_COST = auto()
    INVALID_BOUND = auto()
    EMPTY_TOPOLOGY = auto()
    TOPOLOGY_LOCKED = auto()


@dataclass(frozen=True)
class RoutingError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a public operation: either a value or a RoutingError.

    A successful operation with nothing to return carries value=None.
    """

    value: Optional[T] = None
    error: Optional[RoutingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Outcome[T]":
        return cls(error=RoutingError(kind, message))
