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

from dataclasses import dataclass
from typing import Any, Protocol

from typing_extensions import override

from qnls.entity.node import Application
from qnls.models.epr import EntangledPair, PairState, ResourceInvariantViolation
from qnls.models.policy import SwapPolicy, WernerSwapPolicy
from qnls.network.network import QuantumNetwork
from qnls.network.protocol.event import SwapAttempt
from qnls.simulator import Simulator
from qnls.utils import json_encodable, log


@dataclass
class SwapResult:
    pair: EntangledPair | None
    """Pair between the outer endpoints on success, None on failure."""
    relay: int
    f_in: tuple[float, float]

    @property
    def succeeded(self) -> bool:
        return self.pair is not None


class SwapRequester(Protocol):
    def on_swap(self, result: SwapResult, tag: Any) -> None:
        """
        Receive the outcome of a swap. On failure both input pairs are gone.
        """
        ...


@json_encodable
class SwapCounters:
    def __init__(self):
        self.n_attempts = 0
        """how many swaps were performed"""
        self.n_success = 0
        """how many swaps succeeded"""
        self.n_failed = 0
        """how many swaps failed"""

    def __repr__(self) -> str:
        return f"attempts={self.n_attempts} success={self.n_success} failed={self.n_failed}"


class SwappingEngine(Application):
    """
    Entanglement swapping at relay nodes.

    A swap at relay R joins pairs (A,R) and (R,B) into pair (A,B). It succeeds with the relay's `swap_prob`,
    and the output fidelity comes from the swap policy.
    """

    def __init__(self, policy: SwapPolicy | None = None, *, delay: float = 0.0):
        """
        Args:
            policy: fidelity composition rule, defaults to Werner.
            delay: Bell-state measurement and classical signaling delay in seconds.
        """
        super().__init__()
        assert delay >= 0.0
        self.policy = WernerSwapPolicy() if policy is None else policy
        self.delay = delay
        self.cnt = SwapCounters()
        self.add_handler(self.handle_attempt, SwapAttempt)

    @override
    def install(self, network: QuantumNetwork, simulator: Simulator):
        super().install(network, simulator)
        self.resources = network.resources

    @override
    def reset_counters(self) -> None:
        self.cnt = SwapCounters()

    def schedule(
        self, relay: int, left: EntangledPair, right: EntangledPair, requester: SwapRequester, tag: Any = None
    ) -> SwapAttempt:
        """
        Claim two idle pairs meeting at a relay and schedule their swap after the engine delay.

        Raises:
            ValueError - pairs do not meet at the relay, or would form a loop.
            ResourceInvariantViolation - a pair is not idle.
        """
        if left.other_end(relay) == right.other_end(relay):
            raise ValueError(f"cannot swap {left} with {right} at node {relay}")
        for pair in (left, right):
            if pair.state != PairState.IDLE:
                raise ResourceInvariantViolation(f"cannot swap {pair}, it is not idle")
        left.claim()
        right.claim()
        event = SwapAttempt(self, relay, left, right, requester=requester, tag=tag, t=self.simulator.tc + self.delay, by=self)
        self.simulator.add_event(event)
        return event

    def handle_attempt(self, event: SwapAttempt):
        left, right, relay = event.left, event.right, event.relay
        assert left.state == PairState.CLAIMED and right.state == PairState.CLAIMED
        f1, f2 = self.resources.refresh(left), self.resources.refresh(right)
        self.cnt.n_attempts += 1

        if self.simulator.rng.random() < self.network.nodes[relay].swap_prob:
            self.cnt.n_success += 1
            pair = self.resources.join(left, right, relay, fidelity=self.policy.compose(f1, f2))
            log.debug(f"swapped {left.pair_id}+{right.pair_id} at node {relay} into {pair}")
        else:
            self.cnt.n_failed += 1
            self.resources.discard(left)
            self.resources.discard(right)
            pair = None
            log.debug(f"swap of {left.pair_id}+{right.pair_id} at node {relay} failed")

        event.requester.on_swap(SwapResult(pair, relay, (f1, f2)), event.tag)
