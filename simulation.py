"""
Stepwise simulation controller.

The controller owns one run at a time and advances it only when its
`step()` is called, so any scheduler (a timer, an event loop, a test loop)
supplies the clock. A step never blocks and never suspends.
"""

from enum import Enum, auto
from typing import Callable, List, Optional
import logging

from config import SimulationConfig
from dijkstra_engine import SimpleDijkstraEngine
from distance_vector import DistanceVector, check_iteration_factor
from distance_vector_engine import SimpleDistanceVectorEngine
from link_state import LinkState
from outcome import ErrorKind, Outcome
from routing import AlgorithmKind, Snapshot
from topology import Topology

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[Snapshot], None]
CompleteCallback = Callable[[], None]


class SimulationState(Enum):
    IDLE = auto()
    RUNNING = auto()
    CONVERGED = auto()
    STOPPED = auto()


class SimulationController:
    """
    Drives a Distance Vector or Link State run over a topology.

    on_update receives a snapshot after every step that computed something.
    on_complete is called exactly once per run that finishes on its own,
    and never for a run ended by stop(). The topology is locked against
    edits while a run is active.
    """

    def __init__(
        self,
        topology: Topology,
        config: Optional[SimulationConfig] = None,
        on_update: Optional[UpdateCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> None:
        self._topology = topology
        self._config = config or SimulationConfig()
        self.on_update = on_update
        self.on_complete = on_complete

        self._state = SimulationState.IDLE
        self._algorithm: Optional[AlgorithmKind] = None
        self._source: Optional[str] = None
        self._distance_vector: Optional[DistanceVector] = None
        self._link_state: Optional[LinkState] = None

    # --- Run control ---------------------------------------------------------

    def start(self, algorithm: AlgorithmKind, source: Optional[str] = None) -> Outcome[None]:
        """
        Begin a new run, stopping any active one first.

        Without a source the first node is used. Link State computes in the
        first step; Distance Vector advances one round per step.
        """
        if self.is_running():
            self.stop()
        if self._topology.locked:
            logger.warning("cannot start: topology is in use by another run")
            return Outcome.failure(
                ErrorKind.TOPOLOGY_LOCKED, "another simulation is already running on this topology"
            )

        if not isinstance(algorithm, AlgorithmKind):
            try:
                algorithm = AlgorithmKind(algorithm)
            except ValueError:
                logger.warning("unknown algorithm %r", algorithm)
                return Outcome.failure(ErrorKind.INVALID_OPERATION, f"unknown algorithm {algorithm!r}")
        if len(self._topology) == 0:
            logger.warning("cannot start %s on an empty topology", algorithm.name)
            return Outcome.failure(ErrorKind.EMPTY_TOPOLOGY, "add at least one router first")
        if source is None:
            source = next(iter(self._topology.nodes()))
        elif source not in self._topology:
            logger.warning("cannot start %s from unknown node %r", algorithm.name, source)
            return Outcome.failure(ErrorKind.UNKNOWN_NODE, f"unknown node {source!r}")
        rejected = check_iteration_factor(self._config.iteration_factor)
        if rejected:
            return rejected
        try:
            self._config.validate()
        except ValueError as exc:
            logger.warning("rejected simulation config: %s", exc)
            return Outcome.failure(ErrorKind.INVALID_BOUND, str(exc))

        self._algorithm = algorithm
        self._source = source
        self._topology.reset_routing_tables(self._config.max_cost)

        if algorithm is AlgorithmKind.DISTANCE_VECTOR:
            self._distance_vector = DistanceVector(
                self._topology,
                SimpleDistanceVectorEngine(self._config.max_cost),
                self._config.iteration_factor,
            )
            self._link_state = None
        else:
            self._link_state = LinkState(self._topology, SimpleDijkstraEngine(self._config.max_cost))
            self._distance_vector = None

        self._topology.lock()
        self._state = SimulationState.RUNNING
        logger.info("started %s from %s", algorithm.name, source)
        return Outcome.success()

    def step(self) -> bool:
        """
        Advance the active run by one tick.

        Returns True while the run is still active afterwards.
        """
        if self._state is not SimulationState.RUNNING:
            return False

        if self._algorithm is AlgorithmKind.LINK_STATE:
            self._step_link_state()
        else:
            self._step_distance_vector()
        return self.is_running()

    def _step_distance_vector(self) -> None:
        dv = self._distance_vector
        if dv.iteration >= dv.max_iterations:
            # Bound of zero rounds; nothing left to compute.
            self._finish(SimulationState.STOPPED)
            return
        converged = dv.run_iteration()
        self._emit_update()
        if converged:
            logger.info("distance vector converged after %d rounds", dv.iteration)
            self._finish(SimulationState.CONVERGED)
        elif dv.iteration >= dv.max_iterations:
            logger.warning(
                "distance vector hit round cap %d without converging", dv.max_iterations
            )
            self._finish(SimulationState.STOPPED)

    def _step_link_state(self) -> None:
        self._link_state.run(self._source)
        self._link_state.run_for_all_routers()
        self._emit_update()
        logger.info("link state tables computed for %d routers", len(self._topology))
        self._finish(SimulationState.CONVERGED)

    def _emit_update(self) -> None:
        if self.on_update is not None:
            self.on_update(self.snapshot())

    def _finish(self, state: SimulationState) -> None:
        self._state = state
        self._topology.unlock()
        if self.on_complete is not None:
            self.on_complete()

    def stop(self) -> None:
        """
        Halt ticking. Already computed tables stay in place.
        """
        if self._state is SimulationState.RUNNING:
            self._state = SimulationState.STOPPED
            self._topology.unlock()
            logger.info("stopped %s", self._algorithm.name)

    def run_to_completion(self, max_ticks: Optional[int] = None) -> SimulationState:
        """Tick until the run ends, or for at most max_ticks ticks."""
        ticks = 0
        while self.is_running() and (max_ticks is None or ticks < max_ticks):
            self.step()
            ticks += 1
        return self._state

    # --- Observation ---------------------------------------------------------

    def is_running(self) -> bool:
        return self._state is SimulationState.RUNNING

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def algorithm(self) -> Optional[AlgorithmKind]:
        return self._algorithm

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def iteration(self) -> int:
        if self._distance_vector is not None:
            return self._distance_vector.iteration
        return 1 if self._state is SimulationState.CONVERGED else 0

    @property
    def max_iterations(self) -> int:
        if self._distance_vector is not None:
            return self._distance_vector.max_iterations
        return 1

    @property
    def converged(self) -> bool:
        return self._state is SimulationState.CONVERGED

    def snapshot(self) -> Snapshot:
        return {node.name: node.routes for node in self._topology.node_list}

    def shortest_path(self, source: str, destination: str) -> Outcome[List[str]]:
        """Path on source's shortest-path tree; Link State runs only."""
        if self._link_state is None:
            return Outcome.failure(
                ErrorKind.INVALID_OPERATION, "shortest paths are only available after a link state run"
            )
        return self._link_state.shortest_path(source, destination)
