from typing import Any

import pytest

from qnls.models.epr import EntangledPair, PairState, ResourceInvariantViolation
from qnls.models.policy import BbpsswPurification, ProductSwapPolicy
from qnls.network import LinearTopology, QuantumNetwork
from qnls.network.protocol import PurificationEngine, PurificationResult, SwappingEngine, SwapResult
from qnls.simulator import Simulator
from qnls.utils import FixedRng


class Collect:
    def __init__(self):
        self.purif: list[tuple[PurificationResult, Any]] = []
        self.swap: list[tuple[SwapResult, Any]] = []

    def on_purification(self, result: PurificationResult, tag: Any) -> None:
        self.purif.append((result, tag))

    def on_swap(self, result: SwapResult, tag: Any) -> None:
        self.swap.append((result, tag))


def build(*, swap_prob=1.0, capacity=2, decay_rate=0.0, rng: FixedRng | None = None):
    net = QuantumNetwork(
        LinearTopology(3, memory_args={"capacity": capacity, "decay_rate": decay_rate}, swap_prob=swap_prob),
        apps=[PurificationEngine(delay=0.1), SwappingEngine(ProductSwapPolicy(), delay=0.2)],
    )
    simulator = Simulator(0.0, 10.0, seed=0)
    if rng is not None:
        simulator.rng = rng
    net.install(simulator)
    return net, net.get_app(PurificationEngine), net.get_app(SwappingEngine)


def make_pair(net: QuantumNetwork, a: int, b: int, fidelity: float) -> EntangledPair:
    rm = net.resources
    slot_a, slot_b = rm.try_allocate(a), rm.try_allocate(b)
    assert slot_a is not None and slot_b is not None
    return rm.create(a, b, slot_a, slot_b, fidelity=fidelity, state=PairState.IDLE)


def test_purification_success():
    net, pe, _ = build(rng=FixedRng(0.0))
    keep, sacrifice = make_pair(net, 0, 1, 0.9), make_pair(net, 1, 0, 0.85)
    slots = dict(keep.slots)
    req = Collect()

    event = pe.schedule(keep, sacrifice, req, "tag")
    assert keep.state == PairState.CLAIMED and sacrifice.state == PairState.CLAIMED
    assert event.t == net.simulator.time(sec=0.1)
    net.simulator.run()

    assert len(req.purif) == 1
    result, tag = req.purif[0]
    assert tag == "tag"
    assert result.succeeded
    assert result.pair is not None
    assert result.f_in == (0.9, 0.85)
    assert result.pair.fidelity == pytest.approx(BbpsswPurification().distill(0.9, 0.85)[1])
    assert result.pair.fidelity > 0.9
    assert result.pair.purif_rounds == 1
    assert result.pair.slots == slots
    assert not keep.is_live and not sacrifice.is_live
    assert [node.memory.count for node in net.nodes] == [1, 1, 0]
    assert net.resources.n_live == 1
    assert pe.cnt.n_success == 1


def test_purification_failure():
    net, pe, _ = build(rng=FixedRng(0.999))
    req = Collect()
    pe.schedule(make_pair(net, 0, 1, 0.7), make_pair(net, 0, 1, 0.7), req)
    net.simulator.run()

    result, _ = req.purif[0]
    assert not result.succeeded
    assert net.resources.n_live == 0
    assert [node.memory.count for node in net.nodes] == [0, 0, 0]
    assert pe.cnt.n_failed == 1


def test_purification_invalid():
    net, pe, _ = build(capacity=3)
    p1, p2 = make_pair(net, 0, 1, 0.9), make_pair(net, 1, 2, 0.9)
    with pytest.raises(ValueError):
        pe.schedule(p1, p2, Collect())
    with pytest.raises(ValueError):
        pe.schedule(p1, p1, Collect())

    p3 = make_pair(net, 0, 1, 0.9)
    p3.claim()
    with pytest.raises(ResourceInvariantViolation):
        pe.schedule(p1, p3, Collect())


def test_purification_with_decay():
    net, pe, _ = build(rng=FixedRng(0.0), decay_rate=1.0)
    req = Collect()
    pe.schedule(make_pair(net, 0, 1, 0.9), make_pair(net, 0, 1, 0.9), req)
    net.simulator.run()

    result, _ = req.purif[0]
    # both pairs decayed over the 0.1s operation delay
    assert result.f_in[0] < 0.9
    assert result.f_in[0] == pytest.approx(result.f_in[1])


def test_swap_success():
    net, _, se = build(rng=FixedRng(0.0))
    left, right = make_pair(net, 0, 1, 0.9), make_pair(net, 1, 2, 0.8)
    req = Collect()
    se.schedule(1, left, right, req, "s")
    net.simulator.run()

    result, tag = req.swap[0]
    assert tag == "s"
    assert result.succeeded and result.pair is not None
    assert result.relay == 1
    assert result.pair.endpoints == (0, 2)
    assert result.pair.fidelity == pytest.approx(0.72)
    assert result.pair.depth == 2
    assert [node.memory.count for node in net.nodes] == [1, 0, 1]
    assert net.simulator.tc == net.simulator.time(sec=10.0)
    assert se.cnt.n_success == 1


@pytest.mark.parametrize(("draw", "ok"), [(0.79, True), (0.8, False)])
def test_swap_probability(draw: float, ok: bool):
    net, _, se = build(swap_prob=0.8, rng=FixedRng(draw))
    req = Collect()
    se.schedule(1, make_pair(net, 0, 1, 0.9), make_pair(net, 1, 2, 0.9), req)
    net.simulator.run()

    result, _ = req.swap[0]
    assert result.succeeded is ok
    assert net.resources.n_live == (1 if ok else 0)
    net.resources.check()


def test_swap_invalid():
    net, _, se = build(capacity=3)
    p1, p2 = make_pair(net, 0, 1, 0.9), make_pair(net, 0, 1, 0.9)
    with pytest.raises(ValueError):
        se.schedule(1, p1, p2, Collect())
    with pytest.raises(ValueError):
        se.schedule(2, p1, make_pair(net, 1, 2, 0.9), Collect())


def test_purification_decayed_past_improvement():
    net, pe, _ = build(rng=FixedRng(0.0), decay_rate=1.0)
    pe.delay = 0.5
    req = Collect()
    keep, sacrifice = make_pair(net, 0, 1, 0.6), make_pair(net, 0, 1, 0.6)
    # distilling would improve on the inputs when the attempt is scheduled
    assert pe.policy.improves(0.6, 0.6)
    pe.schedule(keep, sacrifice, req)
    net.simulator.run()

    result, _ = req.purif[0]
    f_keep, f_sacrifice = result.f_in
    assert f_keep < 0.5 and f_sacrifice == pytest.approx(f_keep)
    assert not pe.policy.improves(f_keep, f_sacrifice)
    assert not result.purified
    assert result.pair is keep
    assert keep.state == PairState.IDLE
    assert keep.purif_rounds == 0
    assert keep.fidelity == f_keep
    assert not sacrifice.is_live
    assert net.resources.n_live == 1
    assert [node.memory.count for node in net.nodes] == [1, 1, 0]
    assert pe.cnt.n_skipped == 1
    assert pe.cnt.n_attempts == 0
    net.resources.check()
