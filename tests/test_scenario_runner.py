import csv
from pathlib import Path

import pytest

from config import SimulationConfig, load_config, load_scenario
from routing import AlgorithmKind
from scenario_runner import main, run_scenario, write_tables_csv


SCENARIO = """
iteration_factor: 10
tick_interval: 0.5
nodes:
  - A
  - {name: B, x: 300, y: 100}
  - C
  - D
edges:
  - [A, B, 5]
  - [B, C, 3]
  - [A, C, 1]
runs:
  - algorithm: dv
  - algorithm: ls
    source: A
    path: [A, B]
"""


def test_load_scenario_parses_nodes_edges_and_runs(tmp_path: Path):
    path = tmp_path / "scenario.yml"
    path.write_text(SCENARIO)

    cfg, scenario = load_scenario(path)

    assert cfg.iteration_factor == 10
    assert cfg.tick_interval == 0.5
    assert [n.name for n in scenario.nodes] == ["A", "B", "C", "D"]
    assert scenario.nodes[1].x == 300
    assert scenario.edges[0] == ("A", "B", 5)
    assert scenario.runs[0].algorithm is AlgorithmKind.DISTANCE_VECTOR
    assert scenario.runs[1].source == "A"
    assert scenario.runs[1].path == ("A", "B")


def test_load_config_defaults_and_validation(tmp_path: Path):
    path = tmp_path / "cfg.yml"
    path.write_text("log_level: info\n")
    cfg = load_config(path)
    assert cfg == SimulationConfig(log_level="info")

    path.write_text("iteration_factor: -2\n")
    with pytest.raises(ValueError):
        load_config(path)

    path.write_text("runs:\n  - algorithm: rip\n")
    with pytest.raises(ValueError):
        load_scenario(path)


def test_load_scenario_reports_missing_keys(tmp_path: Path):
    path = tmp_path / "scenario.yml"

    path.write_text("nodes:\n  - x: 10\n    y: 20\n")
    with pytest.raises(ValueError, match="name"):
        load_scenario(path)

    path.write_text("runs:\n  - source: A\n")
    with pytest.raises(ValueError, match="algorithm"):
        load_scenario(path)


def test_run_scenario_runs_every_algorithm(tmp_path: Path):
    path = tmp_path / "scenario.yml"
    path.write_text(SCENARIO)
    cfg, scenario = load_scenario(path)
    sleeps = []

    results = run_scenario(cfg, scenario, sleep=sleeps.append)

    assert [r["algorithm"] for r in results] == ["dv", "ls"]
    dv, ls = results
    assert dv["converged"] and ls["converged"]
    assert dv["completions"] == ls["completions"] == 1
    assert dv["tables"]["A"]["B"].cost == 4
    assert ls["path"] == ["A", "C", "B"]
    # One sleep between each pair of DV ticks; LS finishes in its only tick.
    assert sleeps == [0.5] * (dv["iterations"] - 1)


def test_write_tables_csv(tmp_path: Path):
    path = tmp_path / "scenario.yml"
    path.write_text(SCENARIO)
    cfg, scenario = load_scenario(path)
    results = run_scenario(cfg, scenario, sleep=lambda _: None)

    out = tmp_path / "out" / "tables.csv"
    write_tables_csv(results, out)

    with out.open() as f:
        rows = list(csv.DictReader(f))
    # 2 runs * 4 routers * 4 destinations
    assert len(rows) == 32
    row = next(r for r in rows if r["run"] == "1" and r["router"] == "A" and r["destination"] == "D")
    assert row["cost"] == "inf"
    assert row["next_hop"] == "-"


def test_main_prints_tables(tmp_path: Path, capsys):
    path = tmp_path / "scenario.yml"
    path.write_text(SCENARIO.replace("tick_interval: 0.5", "tick_interval: 0"))

    main([str(path), "--csv", str(tmp_path / "t.csv")])

    out = capsys.readouterr().out
    assert "Router A" in out
    assert "path: A -> C -> B" in out
    assert (tmp_path / "t.csv").exists()
