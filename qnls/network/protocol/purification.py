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
from qnls.models.policy import BbpsswPurification, PurificationPolicy
from qnls.network.network import QuantumNetwork
from qnls.network.protocol.event import PurificationAttempt
from qnls.simulator import Simulator
from qnls.utils import json_encodable, log


@dataclass
class PurificationResult:
    pair: EntangledPair | None
    """Surviving pair on success, None on failure."""
    f_in: tuple[float, float]
    """Fidelities of the kept and sacrificed pairs at the time of the attempt."""
    purified: bool = True
    """False when decay made distillation pointless and the better input pair was returned unchanged."""

    @property
    def succeeded(self) -> bool:
        return self.pair is not None


class PurificationRequester(Protocol):
    def on_purification(self, result: PurificationResult, tag: Any) -> None:
        """
        Receive the outcome of a purification. On failure both input pairs are gone.
        A result with `purified` False carries the better input pair, untouched.
        """
        ...


@json_encodable
class PurificationCounters:
    def __init__(self):
        self.n_attempts = 0
        """how many purifications were performed"""
        self.n_success = 0
        """how many purifications succeeded"""
        self.n_failed = 0
        """how many purifications failed"""
        self.n_skipped = 0
        """how many purifications were dropped because decayed inputs could no longer be improved"""

    def __repr__(self) -> str:
        return f"attempts={self.n_attempts} success={self.n_success} failed={self.n_failed} skipped={self.n_skipped}"


class PurificationEngine(Application):
    """
    Bilateral distillation of two pairs between the same two nodes.

    On success the kept pair is replaced by a higher-fidelity pair on the same slots and the sacrificed
    pair is released. On failure both pairs are released.
    If decay during the operation delay leaves inputs that distillation cannot improve, the better pair
    is returned unchanged and the other is released.
    """

    def __init__(self, policy: PurificationPolicy | None = None, *, delay: float = 0.0):
        """
        Args:
            policy: distillation formula, defaults to BBPSSW.
            delay: local operation and classical exchange delay in seconds.
        """
        super().__init__()
        assert delay >= 0.0
        self.policy = BbpsswPurification() if policy is None else policy
        self.delay = delay
        self.cnt = PurificationCounters()
        self.add_handler(self.handle_attempt, PurificationAttempt)

    @override
    def install(self, network: QuantumNetwork, simulator: Simulator):
        super().install(network, simulator)
        self.resources = network.resources

    @override
    def reset_counters(self) -> None:
        self.cnt = PurificationCounters()

    def schedule(
        self, keep: EntangledPair, sacrifice: EntangledPair, requester: PurificationRequester, tag: Any = None
    ) -> PurificationAttempt:
        """
        Claim two idle pairs and schedule their purification after the engine delay.

        Raises:
            ValueError - pairs do not connect the same two nodes.
            ResourceInvariantViolation - a pair is not idle.
        """
        if keep is sacrifice or not keep.same_endpoints(sacrifice):
            raise ValueError(f"cannot purify {keep} with {sacrifice}")
        for pair in (keep, sacrifice):
            if pair.state != PairState.IDLE:
                raise ResourceInvariantViolation(f"cannot purify {pair}, it is not idle")
        keep.claim()
        sacrifice.claim()
        event = PurificationAttempt(
            self, keep, sacrifice, requester=requester, tag=tag, t=self.simulator.tc + self.delay, by=self
        )
        self.simulator.add_event(event)
        return event

    def handle_attempt(self, event: PurificationAttempt):
        keep, sacrifice = event.keep, event.sacrifice
        assert keep.state == PairState.CLAIMED and sacrifice.state == PairState.CLAIMED
        f1, f2 = self.resources.refresh(keep), self.resources.refresh(sacrifice)
        if not self.policy.improves(f1, f2):
            self.cnt.n_skipped += 1
            better, worse = (keep, sacrifice) if f1 >= f2 else (sacrifice, keep)
            self.resources.discard(worse)
            better.state = PairState.IDLE
            log.debug(f"purification of {keep.pair_id}+{sacrifice.pair_id} skipped, f_in=({f1},{f2}) cannot improve")
            event.requester.on_purification(PurificationResult(better, (f1, f2), purified=False), event.tag)
            return

        p, f_out = self.policy.distill(f1, f2)
        self.cnt.n_attempts += 1

        self.resources.discard(sacrifice)
        if self.simulator.rng.random() < p:
            self.cnt.n_success += 1
            pair = self.resources.replace(keep, fidelity=f_out, purif_rounds=keep.purif_rounds + 1)
            log.debug(f"purified {keep.pair_id}+{sacrifice.pair_id} into {pair}, p={p} f_in=({f1},{f2})")
        else:
            self.cnt.n_failed += 1
            self.resources.discard(keep)
            pair = None
            log.debug(f"purification of {keep.pair_id}+{sacrifice.pair_id} failed, p={p}")

        event.requester.on_purification(PurificationResult(pair, (f1, f2)), event.tag)
