import pytest

from qnls.entity.memory import QuantumMemory, ResourceManager, SlotState
from qnls.entity.node import QNode
from qnls.models.epr import PairState, ResourceInvariantViolation
from qnls.simulator import Simulator


class ThreeNodes:
    def __init__(self, *, capacity=2, decay_rate=0.0):
        self.nodes = [
            QNode(name, memory=QuantumMemory(f"{name}.memory", capacity=capacity, decay_rate=decay_rate))
            for name in ("a", "r", "b")
        ]
        for i, node in enumerate(self.nodes):
            node.id = i
        self.s = Simulator(0, 100, accuracy=1000000)
        for node in self.nodes:
            node.install(self.s)
        self.rm = ResourceManager(self.nodes)
        self.rm.install(self.s)

    def make_pair(self, a: int, b: int, fidelity=0.9):
        slot_a = self.rm.try_allocate(a)
        slot_b = self.rm.try_allocate(b)
        assert slot_a is not None and slot_b is not None
        pair = self.rm.create(a, b, slot_a, slot_b, fidelity=fidelity)
        pair.state = PairState.IDLE
        return pair


def test_allocate_and_release():
    mem = QuantumMemory("m", capacity=2)
    assert mem.available == 2

    assert mem.try_allocate() == 0
    assert mem.try_allocate() == 1
    assert mem.try_allocate() is None
    assert mem.count == 2
    assert mem.cnt.n_alloc_fail == 1
    assert mem.get(0).state == SlotState.RESERVED

    mem.release(0)
    assert mem.available == 1
    assert mem.get(0).state == SlotState.FREE
    # lowest free address first
    assert mem.try_allocate() == 0

    mem.release(1)
    with pytest.raises(ResourceInvariantViolation, match="released twice"):
        mem.release(1)
    with pytest.raises(IndexError):
        mem.get(2)

    assert mem.cnt.n_allocated == 3
    assert mem.cnt.n_released == 2
    assert mem.cnt.peak == 2


def test_slot_transitions():
    scenario = ThreeNodes()
    mem = scenario.nodes[0].memory
    pair = scenario.make_pair(0, 1)
    addr = pair.slots[0]

    # an occupied slot cannot be reserved again
    with pytest.raises(ResourceInvariantViolation, match="unexpected state transition"):
        mem.get(addr).state = SlotState.RESERVED
    # a free slot cannot receive a pair
    with pytest.raises(ResourceInvariantViolation):
        mem.attach(1, pair)


def test_create_and_discard():
    scenario = ThreeNodes()
    rm = scenario.rm
    pair = scenario.make_pair(0, 2, fidelity=0.95)
    assert rm.n_live == 1
    assert pair.slots == {0: 0, 2: 0}
    assert scenario.nodes[0].memory.get(0).pair is pair
    assert scenario.nodes[1].memory.count == 0
    rm.check()

    rm.discard(pair)
    assert rm.n_live == 0
    assert not pair.is_live
    assert scenario.nodes[0].memory.count == 0
    assert scenario.nodes[2].memory.count == 0
    rm.check()

    with pytest.raises(ResourceInvariantViolation):
        rm.discard(pair)


def test_join():
    scenario = ThreeNodes()
    rm = scenario.rm
    left = scenario.make_pair(0, 1)
    right = scenario.make_pair(1, 2)
    assert scenario.nodes[1].memory.count == 2
    left.claim()
    right.claim()

    pair = rm.join(left, right, 1, fidelity=0.8)
    assert pair.endpoints == (0, 2)
    assert pair.depth == 2
    assert pair.fidelity == 0.8
    assert pair.state == PairState.IDLE
    assert not left.is_live and not right.is_live
    assert scenario.nodes[1].memory.count == 0
    assert scenario.nodes[0].memory.get(pair.slots[0]).pair is pair
    assert scenario.nodes[2].memory.get(pair.slots[2]).pair is pair
    assert rm.n_live == 1
    rm.check()

    rm.discard(pair)
    for node in scenario.nodes:
        assert node.memory.cnt.n_allocated == node.memory.cnt.n_released


def test_join_loop():
    scenario = ThreeNodes(capacity=4)
    p1 = scenario.make_pair(0, 1)
    p2 = scenario.make_pair(0, 1)
    with pytest.raises(ResourceInvariantViolation, match="loop"):
        scenario.rm.join(p1, p2, 1, fidelity=0.5)


def test_replace():
    scenario = ThreeNodes()
    rm = scenario.rm
    old = scenario.make_pair(0, 1, fidelity=0.8)
    slots = dict(old.slots)

    new = rm.replace(old, fidelity=0.9, purif_rounds=1)
    assert new.slots == slots
    assert new.purif_rounds == 1
    assert new.pair_id != old.pair_id
    assert old.state == PairState.CONSUMED
    assert scenario.nodes[0].memory.get(slots[0]).pair is new
    assert rm.n_live == 1
    rm.check()


def test_wait_for_slot():
    scenario = ThreeNodes(capacity=1)
    rm = scenario.rm
    pair = scenario.make_pair(0, 1)
    assert rm.try_allocate(0) is None

    woken: list[str] = []

    def waiter(name: str, interested: bool = True):
        def wake() -> bool:
            woken.append(name)
            return interested

        return wake

    rm.wait_for_slot(0, waiter("gone", False))
    rm.wait_for_slot(0, waiter("first"))
    rm.wait_for_slot(0, waiter("second"))
    rm.wait_for_slot(2, waiter("other node"))

    # one release wakes one interested waiter, skipping those no longer interested
    rm.discard(pair)
    assert woken == ["gone", "first"]

    slot = rm.try_allocate(0)
    assert slot is not None
    rm.release(0, slot)
    assert woken == ["gone", "first", "second"]

    # waiters are one-shot
    slot = rm.try_allocate(0)
    assert slot is not None
    rm.release(0, slot)
    assert woken == ["gone", "first", "second"]


def test_decay_and_occupancy():
    scenario = ThreeNodes(decay_rate=0.5)
    rm, s = scenario.rm, scenario.s
    pair = scenario.make_pair(0, 1, fidelity=1.0)

    s.call_later(2.0, lambda: None)
    s.run_until(time_limit=2.0)
    f = rm.refresh(pair)
    # w = exp(-(0.5+0.5)*2)
    assert f == pytest.approx((3 * 2.718281828459045**-2 + 1) / 4)
    assert rm.refresh(pair) == f

    s.run_until(time_limit=4.0)
    rm.discard(pair)
    # one slot used during 4 of 4 seconds out of capacity 2
    assert scenario.nodes[0].memory.average_occupancy() == pytest.approx(0.5)
    assert scenario.nodes[2].memory.average_occupancy() == 0.0
