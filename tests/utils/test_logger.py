import pytest

from qnls import SimulationConfig, run_simulation
from qnls.network.request import Request
from qnls.simulator import Simulator
from qnls.utils import RequestFilter, log


def test_request_context(caplog: pytest.LogCaptureFixture):
    request = Request(5, 0, 1, [0, 1], [0])
    log.install(Simulator(0.0, 10.0))
    try:
        with caplog.at_level("DEBUG", logger="qnls"):
            log.debug("plain")
            log.debug("tagged", extra={"request": request})
    finally:
        log.install(None)

    plain, tagged = caplog.records
    assert plain.getMessage().startswith("[")
    assert plain.getMessage().endswith("] plain")
    assert getattr(plain, "sim_time") == 0.0
    assert not hasattr(plain, "request_id")
    assert tagged.getMessage().endswith(f"] {request}: tagged")
    assert getattr(tagged, "request_id") == 5

    keep = RequestFilter(5)
    assert not keep.filter(plain)
    assert keep.filter(tagged)
    assert not RequestFilter(6).filter(tagged)


def test_trace_one_request(caplog: pytest.LogCaptureFixture):
    config: SimulationConfig = {
        "topology": {"nodes": [{"name": "A"}, {"name": "B"}], "links": [{"node1": "A", "node2": "B", "herald_delay": 0.1}]},
        "requests": [{"src": "A", "dst": "B"}, {"src": "A", "dst": "B", "start_time": 1.0}],
        "seed": 1,
    }
    with caplog.at_level("DEBUG", logger="qnls"):
        run_simulation(config)

    keep = RequestFilter(1)
    lines = [r.getMessage() for r in caplog.records if keep.filter(r)]
    assert len(lines) >= 2
    assert all("<request 1 " in line for line in lines)
    assert "start on path" in lines[0]
    assert "completed reason=None" in lines[-1]
