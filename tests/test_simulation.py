"""
SimulationController: tick-driven runs, callbacks and the mutation guard.
"""

from typing import List

from config import SimulationConfig
from outcome import ErrorKind
from routing import AlgorithmKind, Snapshot
from simulation import SimulationController, SimulationState
from topology import Topology


def _topology(names, edges):
    topo = Topology()
    for name in names:
        topo.add_node(name)
    for a, b, cost in edges:
        topo.add_edge(a, b, cost)
    return topo


def _controller(topo, **config):
    updates: List[Snapshot] = []
    completions: List[int] = []
    controller = SimulationController(
        topo,
        SimulationConfig(**config),
        on_update=updates.append,
        on_complete=lambda: completions.append(1),
    )
    return controller, updates, completions


def test_distance_vector_emits_snapshot_per_tick_and_completes_once():
    topo = _topology("ABC", [("A", "B", 1), ("B", "C", 1)])
    controller, updates, completions = _controller(topo)

    assert controller.start(AlgorithmKind.DISTANCE_VECTOR).ok
    assert controller.is_running()
    assert controller.state is SimulationState.RUNNING

    assert controller.step() is True  # learns A<->C
    assert controller.step() is False  # nothing changes: converged
    assert controller.step() is False

    assert controller.state is SimulationState.CONVERGED
    assert controller.converged
    assert len(updates) == 2
    assert completions == [1]
    assert updates[-1]["A"]["C"].cost == 2
    assert updates[-1]["A"]["C"].next_hop == "B"


def test_link_state_finishes_in_single_step():
    topo = _topology("ABC", [("A", "B", 5), ("B", "C", 3), ("A", "C", 1)])
    controller, updates, completions = _controller(topo)

    controller.start(AlgorithmKind.LINK_STATE, "A")
    assert controller.step() is False

    assert controller.state is SimulationState.CONVERGED
    assert len(updates) == 1
    assert completions == [1]
    assert updates[0]["A"]["B"].cost == 4
    assert updates[0]["A"]["B"].next_hop == "C"
    assert controller.shortest_path("A", "B").value == ["A", "C", "B"]


def test_stop_keeps_tables_and_skips_completion():
    topo = _topology("ABCD", [("A", "B", 1), ("B", "C", 1), ("C", "D", 1)])
    controller, updates, completions = _controller(topo)

    controller.start(AlgorithmKind.DISTANCE_VECTOR)
    controller.step()
    controller.stop()

    assert controller.state is SimulationState.STOPPED
    assert not controller.is_running()
    assert controller.step() is False
    assert completions == []
    assert topo.find_node_by_name("A").cost_to("C") == 2


def test_topology_is_locked_only_while_running():
    topo = _topology("AB", [("A", "B", 1)])
    controller, _, _ = _controller(topo)

    controller.start(AlgorithmKind.DISTANCE_VECTOR)
    assert topo.add_node("C").error.kind is ErrorKind.TOPOLOGY_LOCKED

    controller.run_to_completion()
    assert topo.add_node("C").ok


def test_start_while_running_stops_previous_run():
    topo = _topology("ABC", [("A", "B", 1), ("B", "C", 1)])
    controller, updates, completions = _controller(topo)

    controller.start(AlgorithmKind.DISTANCE_VECTOR)
    controller.start(AlgorithmKind.LINK_STATE, "B")

    assert controller.algorithm is AlgorithmKind.LINK_STATE
    assert controller.source == "B"
    assert controller.run_to_completion() is SimulationState.CONVERGED
    assert completions == [1]


def test_start_defaults_to_first_node():
    topo = _topology("XY", [("X", "Y", 1)])
    controller, _, _ = _controller(topo)

    controller.start(AlgorithmKind.LINK_STATE)
    assert controller.source == "X"


def test_start_rejects_bad_input():
    controller, _, _ = _controller(Topology())
    assert controller.start(AlgorithmKind.DISTANCE_VECTOR).error.kind is ErrorKind.EMPTY_TOPOLOGY

    topo = _topology("AB", [("A", "B", 1)])
    controller, _, _ = _controller(topo)
    assert controller.start(AlgorithmKind.LINK_STATE, "Z").error.kind is ErrorKind.UNKNOWN_NODE
    assert controller.state is SimulationState.IDLE

    controller, _, _ = _controller(topo, iteration_factor=-1)
    assert controller.start(AlgorithmKind.DISTANCE_VECTOR).error.kind is ErrorKind.INVALID_BOUND
    assert not topo.locked


def test_non_converging_run_stops_at_round_cap():
    topo = _topology("ABC", [("A", "B", -1), ("B", "C", 1)])
    controller, updates, completions = _controller(topo)

    controller.start(AlgorithmKind.DISTANCE_VECTOR)
    state = controller.run_to_completion()

    assert state is SimulationState.STOPPED
    assert not controller.converged
    assert controller.iteration == controller.max_iterations == 30
    assert len(updates) == 30
    assert completions == [1]


def test_shortest_path_needs_link_state_run():
    topo = _topology("AB", [("A", "B", 1)])
    controller, _, _ = _controller(topo)
    controller.start(AlgorithmKind.DISTANCE_VECTOR)
    controller.run_to_completion()

    assert controller.shortest_path("A", "B").error.kind is ErrorKind.INVALID_OPERATION


def test_run_to_completion_honours_tick_limit():
    topo = _topology("ABCD", [("A", "B", 1), ("B", "C", 1), ("C", "D", 1)])
    controller, updates, _ = _controller(topo)
    controller.start(AlgorithmKind.DISTANCE_VECTOR)

    assert controller.run_to_completion(max_ticks=1) is SimulationState.RUNNING
    assert len(updates) == 1


def test_start_accepts_algorithm_codes():
    topo = _topology("AB", [("A", "B", 1)])
    controller, _, _ = _controller(topo)

    assert controller.start("ls").ok
    assert controller.algorithm is AlgorithmKind.LINK_STATE
    controller.stop()
    assert controller.start("rip").error.kind is ErrorKind.INVALID_OPERATION


def test_second_controller_cannot_start_on_locked_topology():
    topo = _topology("AB", [("A", "B", 1)])
    first, _, _ = _controller(topo)
    second, _, second_completions = _controller(topo)

    assert first.start(AlgorithmKind.DISTANCE_VECTOR).ok
    outcome = second.start(AlgorithmKind.LINK_STATE)

    assert outcome.error.kind is ErrorKind.TOPOLOGY_LOCKED
    assert first.is_running()
    assert second.state is SimulationState.IDLE
    assert topo.locked

    first.run_to_completion()
    assert not topo.locked
    assert second.start(AlgorithmKind.LINK_STATE).ok
    assert second.run_to_completion() is SimulationState.CONVERGED
    assert second_completions == [1]


def test_start_rejects_invalid_config():
    topo = _topology("AB", [("A", "B", 1)])
    controller, _, _ = _controller(topo, max_cost=-5)

    outcome = controller.start(AlgorithmKind.DISTANCE_VECTOR)

    assert outcome.error.kind is ErrorKind.INVALID_BOUND
    assert "max_cost" in outcome.error.message
    assert controller.state is SimulationState.IDLE
    assert not topo.locked
