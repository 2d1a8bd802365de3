"""
CLI to run routing scenarios from a YAML file.

Reads a scenario (settings, routers, links, runs), builds the topology,
drives a SimulationController tick by tick for every run and prints the
resulting routing tables. Optionally writes all final tables to CSV.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
import argparse
import csv
import logging
import time

from config import ScenarioSpec, SimulationConfig, load_scenario
from nodes import Position
from routing import Snapshot
from simulation import SimulationController, SimulationState
from topology import Topology

CSV_FIELDS = ["run", "algorithm", "router", "destination", "cost", "next_hop"]


def build_topology(scenario: ScenarioSpec) -> Topology:
    topology = Topology()
    for spec in scenario.nodes:
        topology.add_node(spec.name, Position(spec.x, spec.y))
    for a, b, cost in scenario.edges:
        outcome = topology.add_edge(a, b, cost)
        if not outcome.ok:
            print(f"[run] skipped edge {a}-{b}: {outcome.error}")
    return topology


def drive(
    controller: SimulationController,
    tick_interval: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> SimulationState:
    """
    Manual scheduler: tick the controller until its run ends.
    """
    while controller.step():
        if tick_interval > 0:
            sleep(tick_interval)
    return controller.state


def run_scenario(
    cfg: SimulationConfig,
    scenario: ScenarioSpec,
    sleep: Callable[[float], None] = time.sleep,
) -> List[Dict[str, object]]:
    topology = build_topology(scenario)
    if not topology.is_connected():
        print("[run] topology is not connected; some routers will be unreachable")

    results: List[Dict[str, object]] = []
    for index, run in enumerate(scenario.runs, start=1):
        updates: List[Snapshot] = []
        completions: List[int] = []
        controller = SimulationController(
            topology,
            cfg,
            on_update=updates.append,
            on_complete=lambda: completions.append(1),
        )
        started = controller.start(run.algorithm, run.source)
        if not started.ok:
            print(f"[run] run {index} ({run.algorithm.value}) failed to start: {started.error}")
            continue

        state = drive(controller, cfg.tick_interval, sleep)
        result: Dict[str, object] = {
            "run": index,
            "algorithm": run.algorithm.value,
            "source": controller.source,
            "state": state.name,
            "converged": controller.converged,
            "iterations": controller.iteration,
            "updates": len(updates),
            "completions": len(completions),
            "tables": controller.snapshot(),
        }
        if run.path is not None:
            path = controller.shortest_path(*run.path)
            result["path"] = path.value if path.ok else None
            if not path.ok:
                print(f"[run] run {index} path {run.path[0]}->{run.path[1]}: {path.error}")
        results.append(result)
        print(
            f"[run] completed run={index} algorithm={run.algorithm.value} "
            f"state={state.name} iterations={controller.iteration}"
        )
    return results


def format_tables(tables: Snapshot) -> str:
    lines: List[str] = []
    for router, routes in tables.items():
        lines.append(f"Router {router}")
        for dest, entry in routes.items():
            cost = str(entry.cost) if entry.reachable else "inf"
            lines.append(f"  {dest:<8} cost={cost:<8} next_hop={entry.next_hop}")
    return "\n".join(lines)


def result_rows(results: Iterable[Dict[str, object]]) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    for res in results:
        tables: Snapshot = res["tables"]  # type: ignore[assignment]
        for router, routes in tables.items():
            for dest, entry in routes.items():
                rows.append(
                    {
                        "run": res["run"],
                        "algorithm": res["algorithm"],
                        "router": router,
                        "destination": dest,
                        "cost": entry.cost if entry.reachable else "inf",
                        "next_hop": entry.next_hop,
                    }
                )
    return rows


def write_tables_csv(results: Iterable[Dict[str, object]], path: Path) -> None:
    """
    Write the final routing table of every run to CSV.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in result_rows(results):
            writer.writerow(row)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run routing scenarios from a YAML file.")
    parser.add_argument(
        "scenario",
        type=Path,
        nargs="?",
        default=Path(__file__).parent / "scenarios" / "triangle.yml",
    )
    parser.add_argument("--csv", type=Path, default=None, help="write final tables to this CSV file")
    args = parser.parse_args(argv)

    cfg, scenario = load_scenario(args.scenario)
    logging.basicConfig(level=cfg.logging_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    results = run_scenario(cfg, scenario)
    for res in results:
        print(f"== run {res['run']} ({res['algorithm']}, source {res['source']})")
        print(format_tables(res["tables"]))  # type: ignore[arg-type]
        if res.get("path"):
            print("path:", " -> ".join(res["path"]))  # type: ignore[arg-type]
    if args.csv:
        write_tables_csv(results, args.csv)
        print(f"Wrote tables to {args.csv}")


if __name__ == "__main__":
    main()
