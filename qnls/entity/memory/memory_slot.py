#    Multiverse Quantum Network Simulator: a simulator for comparative
#    evaluation of quantum routing strategies
#    Copyright (C) [2025] Amar Abane
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

from enum import Enum, auto
from typing import TYPE_CHECKING

from qnls.models.epr.pair import ResourceInvariantViolation

if TYPE_CHECKING:
    from qnls.models.epr import EntangledPair


class SlotState(Enum):
    FREE = auto()
    """
    Slot is unused.
    """
    RESERVED = auto()
    """
    Slot has been allocated by the link layer for a generation attempt, pending a heralded pair.
    """
    OCCUPIED = auto()
    """
    Slot holds one half of an entangled pair.
    """


ALLOWED_STATE_TRANSITIONS: dict[SlotState, tuple[SlotState, ...]] = {
    SlotState.FREE: (SlotState.RESERVED,),
    SlotState.RESERVED: (SlotState.OCCUPIED, SlotState.FREE),
    SlotState.OCCUPIED: (SlotState.FREE,),
}


class MemorySlot:
    """An addressable qubit slot in a node memory, with a lifecycle."""

    def __init__(self, addr: int):
        self.addr = addr
        """Address index in QuantumMemory."""
        self._state = SlotState.FREE
        self.pair: "EntangledPair|None" = None
        """Entangled pair whose half is stored in this slot."""

    @property
    def state(self) -> SlotState:
        return self._state

    @state.setter
    def state(self, value: SlotState) -> None:
        if value not in ALLOWED_STATE_TRANSITIONS[self._state]:
            raise ResourceInvariantViolation(
                f"MemorySlot: unexpected state transition from <{self._state}> to <{value}>; {self}"
            )
        self._state = value
        if value == SlotState.FREE:
            self.pair = None

    def __repr__(self) -> str:
        return f"<memory slot {self.addr}, state={self._state.name}, pair={None if self.pair is None else self.pair.pair_id}>"
