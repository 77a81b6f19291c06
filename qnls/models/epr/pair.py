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

from qnls.models.epr.werner import decay_fidelity
from qnls.simulator import Time


class ResourceInvariantViolation(RuntimeError):
    """
    Raised when a memory slot or an entangled pair is used in a way that breaks resource accounting,
    such as releasing a free slot or consuming a pair twice.
    """


class PairState(Enum):
    PENDING = auto()
    """
    Pair is stored in memory but its herald has not been delivered.
    """
    IDLE = auto()
    """
    Pair is available for purification, swapping, or delivery.
    """
    CLAIMED = auto()
    """
    Pair is an input of a scheduled purification or swap.
    """
    CONSUMED = auto()
    """
    Pair no longer exists; its slots have been released or handed over.
    """


ALLOWED_STATE_TRANSITIONS: dict[PairState, tuple[PairState, ...]] = {
    PairState.PENDING: (PairState.IDLE, PairState.CONSUMED),
    PairState.IDLE: (PairState.CLAIMED, PairState.CONSUMED),
    PairState.CLAIMED: (PairState.IDLE, PairState.CONSUMED),
    PairState.CONSUMED: (),
}


class EntangledPair:
    """
    An entangled pair shared between two nodes, modeled as a Werner state.
    """

    def __init__(
        self,
        pair_id: int,
        a: int,
        b: int,
        *,
        fidelity: float,
        creation_time: Time,
        depth: int = 1,
        purif_rounds: int = 0,
        state: PairState = PairState.PENDING,
    ):
        """
        Args:
            pair_id: unique identifier within a simulation run.
            a: node id of one endpoint.
            b: node id of the other endpoint.
            fidelity: initial fidelity.
            creation_time: time at which the pair came into existence.
            depth: number of elementary links spanned.
            purif_rounds: number of purification rounds applied.
            state: initial lifecycle state.
        """
        assert a != b
        assert 0.0 <= fidelity <= 1.0
        self.pair_id = pair_id
        self.a = a
        self.b = b
        self._fidelity = fidelity
        self.creation_time = creation_time
        self.updated = creation_time
        """Time at which fidelity was last brought up to date."""
        self.depth = depth
        self.purif_rounds = purif_rounds
        self.slots: dict[int, int] = {}
        """Slot address held at each endpoint, keyed by node id."""
        self._state = state

    @property
    def fidelity(self) -> float:
        return self._fidelity

    @property
    def endpoints(self) -> tuple[int, int]:
        return (self.a, self.b)

    def same_endpoints(self, other: "EntangledPair") -> bool:
        """Whether both pairs connect the same two nodes."""
        return {self.a, self.b} == {other.a, other.b}

    def other_end(self, node: int) -> int:
        """
        Return the endpoint opposite to `node`.

        Raises:
            ValueError - node is not an endpoint.
        """
        if node == self.a:
            return self.b
        if node == self.b:
            return self.a
        raise ValueError(f"node {node} is not an endpoint of {self}")

    @property
    def state(self) -> PairState:
        return self._state

    @state.setter
    def state(self, value: PairState) -> None:
        if value not in ALLOWED_STATE_TRANSITIONS[self._state]:
            raise ResourceInvariantViolation(
                f"EntangledPair: unexpected state transition from <{self._state}> to <{value}>; {self}"
            )
        self._state = value

    @property
    def is_live(self) -> bool:
        return self._state != PairState.CONSUMED

    def claim(self) -> None:
        """Mark the pair as an input of a pending operation."""
        self.state = PairState.CLAIMED

    def consume(self) -> None:
        """
        Mark the pair as consumed.

        Raises:
            ResourceInvariantViolation - the pair was already consumed.
        """
        if self._state == PairState.CONSUMED:
            raise ResourceInvariantViolation(f"pair {self.pair_id} consumed twice")
        self._state = PairState.CONSUMED

    def decay(self, now: Time, rate: float) -> None:
        """
        Bring fidelity up to date by applying memory decay since the last update.
        """
        assert now >= self.updated
        self._fidelity = decay_fidelity(self._fidelity, rate, (now - self.updated).sec)
        self.updated = now

    def __repr__(self) -> str:
        return (
            f"<pair {self.pair_id} {self.a}-{self.b}, fidelity={self._fidelity:.6f}, "
            f"depth={self.depth}, rounds={self.purif_rounds}, state={self._state.name}>"
        )
