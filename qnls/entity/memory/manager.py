#    Modified by Amar Abane for Multiverse Quantum Network Simulator
#    Date: 05/17/2025
#    Summary of changes: Adapted logic to support dynamic approaches.
#
#    This file is based on a snapshot of SimQN (https://github.com/QNLab-USTC/SimQN),
#    which is licensed under the GNU General Public License v3.0.
#
#    The original SimQN header is included below.


#    SimQN: a discrete-event simulator for the quantum networks
#    Copyright (C) 2021-2022 Lutong Chen, Jian Li, Kaiping Xue
#    University of Science and Technology of China, USTC.
#
#    This program is free software: you can redistribute it and/or modify
#    it under the terms of the GNU General Public License as published by
#    the Free Software Foundation, either version 3 of the License, or
#    (at your option) any later version.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU General Public License for more details.
#
#    You should have received a copy of the GNU General Public License
#    along with this program.  If not, see <https://www.gnu.org/licenses/>.

from collections import defaultdict, deque
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from qnls.entity.memory.memory import QuantumMemory
from qnls.entity.memory.memory_slot import SlotState
from qnls.models.epr import EntangledPair, PairState, ResourceInvariantViolation
from qnls.utils import log

if TYPE_CHECKING:
    from qnls.entity.node import QNode
    from qnls.simulator import Simulator


class ResourceManager:
    """
    Owns the qubit slots of every node and the lifecycle of every entangled pair held in them.

    Each live pair holds exactly one slot at each of its two endpoints.
    A slot is released only when the pair in it is consumed, discarded, or replaced.
    """

    def __init__(self, nodes: list["QNode"]):
        self.nodes = nodes
        self._simulator: "Simulator|None" = None
        self._next_pair_id = 0
        self._live: dict[int, EntangledPair] = {}
        self._waiters = defaultdict[int, deque[Callable[[], bool]]](deque)

    def install(self, simulator: "Simulator") -> None:
        self._simulator = simulator

    @property
    def simulator(self) -> "Simulator":
        if self._simulator is None:
            raise IndexError("resource manager is not in a simulator")
        return self._simulator

    def memory(self, node: int) -> QuantumMemory:
        return self.nodes[node].memory

    def try_allocate(self, node: int) -> int | None:
        """Allocate a slot at a node, returning the slot address or None if the memory is full."""
        return self.nodes[node].memory.try_allocate()

    def release(self, node: int, slot: int) -> None:
        """
        Release a slot at a node.
        The earliest party still waiting for a free slot at this node is notified.
        """
        self.nodes[node].memory.release(slot)
        waiters = self._waiters.get(node)
        while waiters:
            if waiters.popleft()():
                break

    def wait_for_slot(self, node: int, callback: Callable[[], bool]) -> None:
        """
        Register a one-shot callback for a slot release at a node.

        Each release wakes waiters in FIFO order until one of them returns True, i.e. takes the turn.
        A callback returning False is no longer interested and is dropped.
        """
        self._waiters[node].append(callback)

    @property
    def live_pairs(self) -> Iterator[EntangledPair]:
        """Pairs currently holding memory slots."""
        return iter(list(self._live.values()))

    @property
    def n_live(self) -> int:
        return len(self._live)

    def _new_pair(
        self, a: int, b: int, *, fidelity: float, depth: int, purif_rounds: int, state: PairState
    ) -> EntangledPair:
        pair = EntangledPair(
            self._next_pair_id,
            a,
            b,
            fidelity=fidelity,
            creation_time=self.simulator.tc,
            depth=depth,
            purif_rounds=purif_rounds,
            state=state,
        )
        self._next_pair_id += 1
        self._live[pair.pair_id] = pair
        return pair

    def create(
        self,
        a: int,
        b: int,
        slot_a: int,
        slot_b: int,
        *,
        fidelity: float,
        depth: int = 1,
        state: PairState = PairState.PENDING,
    ) -> EntangledPair:
        """
        Store a newly generated pair into two reserved slots.
        """
        pair = self._new_pair(a, b, fidelity=fidelity, depth=depth, purif_rounds=0, state=state)
        self.memory(a).attach(slot_a, pair)
        self.memory(b).attach(slot_b, pair)
        pair.slots = {a: slot_a, b: slot_b}
        return pair

    def refresh(self, pair: EntangledPair) -> float:
        """
        Apply memory decay accumulated since the pair was last updated.

        Returns:
            Updated fidelity.
        """
        rate = sum(self.nodes[node].memory.decay_rate for node in pair.endpoints)
        pair.decay(self.simulator.tc, rate)
        return pair.fidelity

    def replace(self, old: EntangledPair, *, fidelity: float, purif_rounds: int) -> EntangledPair:
        """
        Replace a pair by a new pair on the same slots, e.g. the output of a successful purification.
        The old pair is consumed.
        """
        new = self._new_pair(
            old.a, old.b, fidelity=fidelity, depth=old.depth, purif_rounds=purif_rounds, state=PairState.IDLE
        )
        for node, slot in old.slots.items():
            self.memory(node).transfer(slot, old, new)
        new.slots = dict(old.slots)
        self._retire(old)
        return new

    def join(self, left: EntangledPair, right: EntangledPair, relay: int, *, fidelity: float) -> EntangledPair:
        """
        Join two pairs sharing a relay node into one pair between their outer endpoints.

        The relay slots are released; the outer slots are transferred to the new pair.
        """
        a = left.other_end(relay)
        b = right.other_end(relay)
        if a == b:
            raise ResourceInvariantViolation(f"cannot join pairs {left.pair_id} and {right.pair_id} into a loop")
        new = self._new_pair(
            a, b, fidelity=fidelity, depth=left.depth + right.depth, purif_rounds=0, state=PairState.IDLE
        )
        self.memory(a).transfer(left.slots[a], left, new)
        self.memory(b).transfer(right.slots[b], right, new)
        new.slots = {a: left.slots[a], b: right.slots[b]}
        self.release(relay, left.slots[relay])
        self.release(relay, right.slots[relay])
        self._retire(left)
        self._retire(right)
        return new

    def discard(self, pair: EntangledPair) -> None:
        """
        Consume a pair and release both of its slots.
        This is used both for end-to-end delivery and for dropping a pair.
        """
        for node, slot in pair.slots.items():
            self.release(node, slot)
        self._retire(pair)
        log.debug(f"pair {pair.pair_id} discarded, fidelity={pair.fidelity}")

    def _retire(self, pair: EntangledPair) -> None:
        pair.consume()
        pair.slots = {}
        del self._live[pair.pair_id]

    def check(self) -> None:
        """
        Verify that slot usage matches live pairs.

        Raises:
            ResourceInvariantViolation - accounting mismatch.
        """
        for node in self.nodes:
            used = list(node.memory.find(lambda slot: slot.state != SlotState.FREE))
            if len(used) != node.memory.count:
                raise ResourceInvariantViolation(f"{node}: usage counter does not match slots")
            for slot in used:
                if slot.state == SlotState.OCCUPIED and (slot.pair is None or slot.pair.pair_id not in self._live):
                    raise ResourceInvariantViolation(f"{node}: slot {slot.addr} holds a dead pair")
        held = sum(node.memory.count for node in self.nodes)
        reserved = sum(
            1 for node in self.nodes for _ in node.memory.find(lambda slot: slot.state == SlotState.RESERVED)
        )
        if held - reserved != 2 * len(self._live):
            raise ResourceInvariantViolation("occupied slots do not match live pairs")
