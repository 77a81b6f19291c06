import json
from typing import Any, cast

import pytest

from qnls import Simulation, SimulationConfig, run_replications, run_simulation
from qnls.network import ConfigurationError, RequestError, TopologyError
from qnls.utils import spawn_seeds


def make_config(**kwargs: Any) -> SimulationConfig:
    config: SimulationConfig = {
        "topology": {
            "nodes": [
                {"name": "A", "capacity": 2},
                {"name": "R1", "capacity": 4, "swap_prob": 0.9, "decay_rate": 0.5},
                {"name": "R2", "capacity": 4, "swap_prob": 0.9, "decay_rate": 0.5},
                {"name": "B", "capacity": 2},
            ],
            "links": [
                {"node1": "A", "node2": "R1", "loss_prob": 0.6, "base_fidelity": 0.92},
                {"node1": "R1", "node2": "R2", "loss_prob": 0.7, "base_fidelity": 0.9},
                {"node1": "R2", "node2": "B", "loss_prob": 0.5, "base_fidelity": 0.95},
            ],
        },
        "requests": [
            {
                "src": "A",
                "dst": "B",
                "path": ["A", "R1", "R2", "B"],
                "fidelity_target": 0.85,
                "link_fidelity_target": 0.95,
                "purif_rounds": 2,
                "max_retries": 5,
                "start_time": 0.05 * i,
                "timeout": 0.2,
            }
            for i in range(40)
        ],
        "seed": 11,
        "duration": 5.0,
        "purif_delay": 0.001,
        "swap_delay": 0.001,
        "swap_order": "asap",
    }
    for link in config["topology"]["links"]:
        link["attempt_interval"] = 0.001
        link["herald_delay"] = 0.002
    return cast(SimulationConfig, {**config, **kwargs})


def records_wire(result) -> str:
    return json.dumps([vars(rec) for rec in result.records], sort_keys=True)


def test_determinism():
    r1 = run_simulation(make_config())
    r2 = run_simulation(make_config())
    assert len(r1.records) == 40
    assert records_wire(r1) == records_wire(r2)
    assert r1.summary["n_satisfied"] == r2.summary["n_satisfied"]
    assert r1.links == r2.links

    r3 = run_simulation(make_config(seed=12))
    assert records_wire(r1) != records_wire(r3)


def test_fidelity_bounds():
    result = run_simulation(make_config())
    for rec in result.records:
        if rec.fidelity is not None:
            assert 0.0 <= rec.fidelity <= 1.0
    for node in result.nodes:
        assert node["in_use"] == 0
        assert node["n_allocated"] == node["n_released"]
        assert node["peak"] <= node["capacity"]


def test_to_json():
    result = run_simulation(make_config())
    wire = json.loads(result.to_json())
    assert wire["seed"] == 11
    assert len(wire["records"]) == 40
    assert wire["records"][0]["outcome"] in ("SATISFIED", "FAILED")
    assert "latency" in wire["records"][0]
    assert wire["kernel"]["n_dispatched"] > 0
    assert wire["purification"]["n_attempts"] >= wire["purification"]["n_success"]


def test_replications():
    seeds = spawn_seeds(3, 3)
    results = run_replications(make_config(), seeds, workers=1)
    assert [r.seed for r in results] == seeds
    for seed, result in zip(seeds, results):
        assert records_wire(result) == records_wire(run_simulation(make_config(seed=seed)))


def test_replications_pool():
    seeds = [1, 2]
    results = run_replications(make_config(), seeds, workers=2)
    assert [records_wire(r) for r in results] == [records_wire(run_simulation(make_config(seed=s))) for s in seeds]


def test_progress(caplog: pytest.LogCaptureFixture):
    with caplog.at_level("INFO", logger="qnls"):
        run_simulation(make_config(progress_interval=1.0))
    lines = [r.getMessage() for r in caplog.records if "progress" in r.getMessage()]
    assert len(lines) >= 2
    assert "requests completed" in lines[0]


@pytest.mark.parametrize(
    ("kwargs", "error", "match"),
    [
        ({"duration": 0.0}, ConfigurationError, "duration"),
        ({"max_events": 0}, ConfigurationError, "max_events"),
        ({"swap_delay": -1.0}, ConfigurationError, "swap_delay"),
        ({"swap_delay": True}, ConfigurationError, "swap_delay"),
        ({"max_events": True}, ConfigurationError, "max_events"),
        ({"purification": "magic"}, ConfigurationError, "purification policy"),
        ({"swapping": "magic"}, ConfigurationError, "swap policy"),
        ({"wall_timeout": 0.0}, ConfigurationError, "wall_timeout"),
        ({"requests": [{"src": "A", "dst": "B"}]}, RequestError, "path edge A-B"),
        ({"topology": {"nodes": [{"name": "A"}], "links": [{"node1": "A", "node2": "B"}]}}, TopologyError, "unknown node"),
    ],
)
def test_config_errors(kwargs: dict, error: type[Exception], match: str):
    with pytest.raises(error, match=match):
        Simulation(make_config(**kwargs))


def test_max_events():
    sim = Simulation(make_config(max_events=50))
    result = sim.run()
    assert result.kernel["n_dispatched"] == 50
    assert sim.network.resources.n_live == 0
    assert any(rec.reason == "INCOMPLETE" for rec in result.records)


def test_run_once():
    sim = Simulation(make_config())
    sim.run()
    with pytest.raises(AssertionError):
        sim.run()
