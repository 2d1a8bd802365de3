"""
Simulation settings and YAML scenario loading.

A scenario file holds the simulation settings plus a small topology and the
runs to perform on it:

    iteration_factor: 10
    tick_interval: 0.0
    log_level: WARNING
    nodes:
      - A
      - {name: B, x: 200, y: 100}
    edges:
      - [A, B, 1]
    runs:
      - algorithm: dv
      - algorithm: ls
        source: A
        path: [A, B]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple
import logging

from routing import MAX_COST, AlgorithmKind

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SimulationConfig:
    """Tunables for a simulation.

    Attributes
    ----------
    iteration_factor:
        Distance Vector stops after ``iteration_factor * node_count`` rounds.
    max_cost:
        Path costs above this saturate to infinity.
    tick_interval:
        Seconds a driver sleeps between controller ticks. Never used inside
        a step.
    log_level:
        Name of the logging level the runner configures.
    """

    iteration_factor: int = 10
    max_cost: int = MAX_COST
    tick_interval: float = 0.0
    log_level: str = "WARNING"

    def validate(self) -> None:
        """Raise ValueError when a setting is out of range."""
        if not isinstance(self.iteration_factor, int) or self.iteration_factor < 0:
            raise ValueError("'iteration_factor' must be a non-negative integer.")
        if not isinstance(self.max_cost, int) or self.max_cost <= 0:
            raise ValueError("'max_cost' must be a positive integer.")
        if self.tick_interval < 0:
            raise ValueError("'tick_interval' must not be negative.")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown 'log_level': {self.log_level!r}.")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())


@dataclass(frozen=True)
class NodeSpec:
    name: str
    x: int = 100
    y: int = 100


@dataclass(frozen=True)
class RunSpec:
    algorithm: AlgorithmKind
    source: Optional[str] = None
    path: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class ScenarioSpec:
    nodes: Sequence[NodeSpec] = field(default_factory=list)
    edges: Sequence[Tuple[str, str, int]] = field(default_factory=list)
    runs: Sequence[RunSpec] = field(default_factory=list)


def config_from_mapping(data: Mapping[str, Any]) -> SimulationConfig:
    cfg = SimulationConfig(
        iteration_factor=int(data.get("iteration_factor", 10)),
        max_cost=int(data.get("max_cost", MAX_COST)),
        tick_interval=float(data.get("tick_interval", 0.0)),
        log_level=str(data.get("log_level", "WARNING")),
    )
    cfg.validate()
    return cfg


def load_config(path: Path) -> SimulationConfig:
    import yaml  # type: ignore

    data = yaml.safe_load(path.read_text()) or {}
    return config_from_mapping(data)


def _parse_node(raw: Any) -> NodeSpec:
    if isinstance(raw, str):
        return NodeSpec(raw)
    if not isinstance(raw, Mapping) or "name" not in raw:
        raise ValueError(f"Node entry {raw!r} has no 'name'.")
    return NodeSpec(name=str(raw["name"]), x=int(raw.get("x", 100)), y=int(raw.get("y", 100)))


def _parse_run(raw: Mapping[str, Any]) -> RunSpec:
    if not isinstance(raw, Mapping) or "algorithm" not in raw:
        raise ValueError(f"Run entry {raw!r} has no 'algorithm'; expected 'dv' or 'ls'.")
    try:
        algorithm = AlgorithmKind(str(raw["algorithm"]).lower())
    except ValueError:
        raise ValueError(f"Unknown algorithm {raw['algorithm']!r}; expected 'dv' or 'ls'.")
    path = raw.get("path")
    if path is not None:
        if len(path) != 2:
            raise ValueError("'path' must list exactly [source, destination].")
        path = (str(path[0]), str(path[1]))
    source = raw.get("source")
    return RunSpec(algorithm=algorithm, source=str(source) if source is not None else None, path=path)


def load_scenario(path: Path) -> Tuple[SimulationConfig, ScenarioSpec]:
    import yaml  # type: ignore

    data = yaml.safe_load(path.read_text()) or {}
    cfg = config_from_mapping(data)

    nodes: List[NodeSpec] = [_parse_node(raw) for raw in data.get("nodes", [])]
    edges: List[Tuple[str, str, int]] = []
    for raw in data.get("edges", []):
        if len(raw) != 3:
            raise ValueError(f"Edge {raw!r} must be [a, b, cost].")
        edges.append((str(raw[0]), str(raw[1]), int(raw[2])))
    runs = [_parse_run(raw) for raw in data.get("runs", [])]
    return cfg, ScenarioSpec(nodes=nodes, edges=edges, runs=runs)
