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

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, TypedDict

from typing_extensions import override, Unpack

from qnls.entity.entity import Entity
from qnls.entity.memory.memory_slot import MemorySlot, SlotState
from qnls.models.epr import ResourceInvariantViolation
from qnls.simulator import Simulator
from qnls.utils import TimeAverage, json_encodable

if TYPE_CHECKING:
    from qnls.models.epr import EntangledPair


class QuantumMemoryInitKwargs(TypedDict, total=False):
    capacity: int
    decay_rate: float


@json_encodable
class MemoryCounters:
    def __init__(self):
        self.n_allocated = 0
        """How many times a slot was allocated."""
        self.n_released = 0
        """How many times a slot was released."""
        self.n_alloc_fail = 0
        """How many allocation requests failed because every slot was in use."""
        self.peak = 0
        """Highest number of simultaneously used slots."""

    def __repr__(self) -> str:
        return (
            f"allocated={self.n_allocated} released={self.n_released} "
            f"alloc_fail={self.n_alloc_fail} peak={self.peak}"
        )


class QuantumMemory(Entity):
    """
    Quantum memory of a node: a fixed number of slots, each able to hold one half of an entangled pair.

    The memory only accounts for slots; pair lifecycle is handled by `ResourceManager`.
    """

    def __init__(self, name: str, **kwargs: Unpack[QuantumMemoryInitKwargs]):
        """
        Args:
            name: memory name.
            capacity: the number of slots, must be positive.
            decay_rate: Werner parameter decay rate of stored pairs, in 1/s.
        """
        super().__init__(name=name)
        self.capacity = kwargs.get("capacity", 1)
        """
        Memory capacity, i.e. how many pair halves can be stored.
        Each slot has an address in `[0, capacity)`.
        """
        self.decay_rate = kwargs.get("decay_rate", 0.0)

        assert self.capacity >= 1
        assert self.decay_rate >= 0.0
        self._slots = [MemorySlot(addr) for addr in range(self.capacity)]
        self._usage = 0
        self._occupancy = TimeAverage()
        self.cnt = MemoryCounters()

    @override
    def install(self, simulator: Simulator) -> None:
        super().install(simulator)
        self._occupancy = TimeAverage(simulator.tc.time_slot, self._usage)

    def reset_counters(self) -> None:
        """
        Start counting afresh from the current time, e.g. at the end of a warm-up period.
        Slots in use stay in use and count towards the new peak.
        """
        self.cnt = MemoryCounters()
        self.cnt.peak = self._usage
        self._occupancy.reset(self.simulator.tc.time_slot)

    @property
    def count(self) -> int:
        """Number of slots in use."""
        return self._usage

    @property
    def available(self) -> int:
        """Number of free slots."""
        return self.capacity - self._usage

    def _account(self, delta: int) -> None:
        self._usage += delta
        if self._simulator is not None:
            self._occupancy.update(self._simulator.tc.time_slot, self._usage)
        self.cnt.peak = max(self.cnt.peak, self._usage)

    def try_allocate(self) -> int | None:
        """
        Allocate the lowest-addressed free slot.

        Returns:
            Slot address, or None if every slot is in use.
        """
        for slot in self._slots:
            if slot.state == SlotState.FREE:
                slot.state = SlotState.RESERVED
                self._account(+1)
                self.cnt.n_allocated += 1
                return slot.addr
        self.cnt.n_alloc_fail += 1
        return None

    def get(self, addr: int) -> MemorySlot:
        """
        Retrieve a slot by address.

        Raises:
            IndexError - address out of range.
        """
        if not 0 <= addr < self.capacity:
            raise IndexError(f"{self}: slot address {addr} out of range")
        return self._slots[addr]

    def attach(self, addr: int, pair: "EntangledPair") -> None:
        """
        Store a pair half into a reserved slot.
        """
        slot = self.get(addr)
        slot.state = SlotState.OCCUPIED
        slot.pair = pair

    def transfer(self, addr: int, old: "EntangledPair", new: "EntangledPair") -> None:
        """
        Replace the pair held in an occupied slot, e.g. after purification or swapping.
        """
        slot = self.get(addr)
        if slot.state != SlotState.OCCUPIED or slot.pair is not old:
            raise ResourceInvariantViolation(f"{self}: slot {addr} does not hold pair {old.pair_id}")
        slot.pair = new

    def release(self, addr: int) -> None:
        """
        Return a slot to the free pool.

        Raises:
            ResourceInvariantViolation - slot is already free.
        """
        slot = self.get(addr)
        if slot.state == SlotState.FREE:
            raise ResourceInvariantViolation(f"{self}: slot {addr} released twice")
        slot.state = SlotState.FREE
        self._account(-1)
        self.cnt.n_released += 1

    def find(self, predicate: Callable[[MemorySlot], bool] = lambda _: True) -> Iterator[MemorySlot]:
        """Iterate over slots that satisfy a predicate."""
        return (slot for slot in self._slots if predicate(slot))

    def average_occupancy(self) -> float:
        """
        Time-averaged fraction of slots in use, from installation or the last counter reset until now.
        """
        return self._occupancy.mean(self.simulator.tc.time_slot) / self.capacity

    @override
    def __repr__(self) -> str:
        return f"<memory {self.name}>"
