from typing import Any, cast

import numpy as np
import pytest

from qnls.entity.qchannel import LinkState, QuantumLink, QuantumLinkInitKwargs
from qnls.models.epr import EntangledPair, PairState
from qnls.network import LinearTopology, QuantumNetwork
from qnls.network.protocol import LinkLayer
from qnls.simulator import Simulator
from qnls.utils import log


class Requester:
    def __init__(self, net: QuantumNetwork, *, keep=True):
        self.net = net
        self.keep = keep
        self.heralded: list[tuple[float, Any, int, EntangledPair]] = []
        self.exhausted: list[tuple[float, Any, int]] = []
        self.alloc_failed: list[tuple[float, Any, int]] = []

    def on_pair_heralded(self, link: QuantumLink, pair: EntangledPair, tag: Any, attempts: int) -> None:
        self.heralded.append((self.net.simulator.tc.sec, tag, attempts, pair))
        if not self.keep:
            self.net.resources.discard(pair)

    def on_generation_exhausted(self, link: QuantumLink, tag: Any, attempts: int) -> None:
        self.exhausted.append((self.net.simulator.tc.sec, tag, attempts))

    def on_allocation_failed(self, link: QuantumLink, tag: Any, node: int) -> None:
        self.alloc_failed.append((self.net.simulator.tc.sec, tag, node))


def build(*, capacity=2, seed: int | None = 1, **link_args: Any) -> tuple[QuantumNetwork, LinkLayer, QuantumLink]:
    largs = cast(QuantumLinkInitKwargs, {"attempt_interval": 0.001, "herald_delay": 0.01, **link_args})
    net = QuantumNetwork(LinearTopology(2, memory_args={"capacity": capacity}, link_args=largs), apps=[LinkLayer()])
    simulator = Simulator(0.0, 100.0, seed=seed)
    log.install(simulator)
    net.install(simulator)
    return net, net.get_app(LinkLayer), net.links[0]


def test_generate():
    net, ll, link = build(base_fidelity=0.95)
    req = Requester(net)

    assert ll.generate(link, req, "x") is True
    assert link.state == LinkState.ATTEMPTING
    net.simulator.run()

    assert len(req.heralded) == 1
    t, tag, attempts, pair = req.heralded[0]
    assert t == pytest.approx(0.01)
    assert tag == "x"
    assert attempts == 1
    assert pair.state == PairState.IDLE
    assert pair.fidelity == 0.95
    assert pair.depth == 1
    assert pair.endpoints == (0, 1)
    assert link.state == LinkState.IDLE
    assert [node.memory.count for node in net.nodes] == [1, 1]
    assert link.cnt.n_attempts == 1
    assert link.cnt.n_success == 1


def test_fifo_queue():
    net, ll, link = build()
    req = Requester(net)

    assert ll.generate(link, req, 1) is True
    assert ll.generate(link, req, 2) is False
    assert ll.generate(link, req, 3) is False
    assert len(link.queue) == 2
    net.simulator.run_until(time_limit=0.0255)

    assert [tag for _, tag, _, _ in req.heralded] == [1, 2]
    assert [t for t, _, _, _ in req.heralded] == pytest.approx([0.01, 0.02])
    # third job retries every attempt interval while the first two pairs hold both slots
    assert link.cnt.n_alloc_fail == 6
    assert [t for t, _, _ in req.alloc_failed] == pytest.approx([0.02, 0.021, 0.022, 0.023, 0.024, 0.025])
    assert {(tag, node) for _, tag, node in req.alloc_failed} == {(3, 0)}
    assert link.cnt.n_attempts == 2
    assert link.state == LinkState.ATTEMPTING
    assert link.cnt.n_jobs == 3


def test_exhausted():
    net, ll, link = build(loss_prob=1.0, max_attempts=5)
    req = Requester(net)
    ll.generate(link, req, "a")
    ll.generate(link, req, "b")
    net.simulator.run()

    assert req.heralded == []
    assert [(tag, attempts) for _, tag, attempts in req.exhausted] == [("a", 5), ("b", 5)]
    assert req.exhausted[0][0] == pytest.approx(0.004)
    # the next job starts right away and makes its first attempt at the same time
    assert req.exhausted[1][0] == pytest.approx(0.008)
    assert link.cnt.n_exhausted == 2
    assert link.cnt.n_attempts == 10
    assert link.state == LinkState.IDLE
    assert net.resources.n_live == 0


@pytest.mark.parametrize(("attempt_interval", "n_alloc_fail"), [(0.001, 490), (0.0, 1)])
def test_allocation_wait(attempt_interval: float, n_alloc_fail: int):
    net, ll, link = build(capacity=1, attempt_interval=attempt_interval, max_attempts=1)
    req = Requester(net)
    ll.generate(link, req, "first")
    ll.generate(link, req, "second")

    def release_first():
        net.resources.discard(req.heralded[0][3])

    net.simulator.call_later(0.5, release_first)
    net.simulator.run()

    assert [tag for _, tag, _, _ in req.heralded] == ["first", "second"]
    # a discarded attempt is retried after the attempt interval, or on slot release when the interval is zero;
    # either way it does not count against the attempt budget
    assert req.heralded[1][0] == pytest.approx(0.51)
    assert req.heralded[1][2] == 1
    assert req.exhausted == []
    assert link.cnt.n_alloc_fail == n_alloc_fail
    assert len(req.alloc_failed) == n_alloc_fail
    assert net.nodes[0].memory.cnt.n_alloc_fail == n_alloc_fail


def test_cancel():
    net, ll, link = build(herald_delay=1.0)
    req = Requester(net)
    ll.generate(link, req, "a")
    ll.generate(link, req, "b")
    ll.generate(link, req, "c")

    net.simulator.run_until(time_limit=0.5)
    assert link.state == LinkState.HERALDED
    assert net.resources.n_live == 1

    # cancel the job in service, whose pair is in flight, and one queued job
    n = ll.cancel([link], lambda job: job.tag in ("a", "c"))
    assert n == 2
    assert link.cnt.n_canceled == 2
    assert net.resources.n_live == 0
    assert link.job is not None and link.job.tag == "b"

    net.simulator.run()
    assert [tag for _, tag, _, _ in req.heralded] == ["b"]
    assert req.heralded[0][0] == pytest.approx(1.5)
    assert net.simulator.n_stale == 1


@pytest.mark.parametrize("loss_prob", [0.5, 0.8])
def test_mean_attempts(loss_prob: float):
    N = 10000
    net, ll, link = build(loss_prob=loss_prob, seed=2024, attempt_interval=0.0, herald_delay=0.0)

    class Repeat(Requester):
        def on_pair_heralded(self, link: QuantumLink, pair: EntangledPair, tag: Any, attempts: int) -> None:
            super().on_pair_heralded(link, pair, tag, attempts)
            if len(self.heralded) < N:
                ll.generate(link, self, None)

    req = Repeat(net, keep=False)
    ll.generate(link, req, None)
    net.simulator.run()

    attempts = np.array([a for _, _, a, _ in req.heralded])
    assert len(attempts) == N
    expected = 1 / (1 - loss_prob)
    assert np.mean(attempts) == pytest.approx(expected, rel=0.05)
    assert link.cnt.success_rate == pytest.approx(1 - loss_prob, rel=0.05)
