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

from collections.abc import Callable
from typing import Any, Protocol

from typing_extensions import override

from qnls.entity.node import Application
from qnls.entity.qchannel import GenerationJob, LinkState, QuantumLink
from qnls.models.epr import EntangledPair, PairState
from qnls.network.network import QuantumNetwork
from qnls.network.protocol.event import AttemptEntanglement, HeraldResult
from qnls.simulator import Simulator, Time
from qnls.utils import log


class GenerationRequester(Protocol):
    """
    Party that asks LinkLayer for elementary pairs.
    """

    def on_pair_heralded(self, link: QuantumLink, pair: EntangledPair, tag: Any, attempts: int) -> None:
        """
        A pair has been heralded on the link. The requester now owns the pair.

        Args:
            attempts: optical attempts spent on this pair.
        """
        ...

    def on_generation_exhausted(self, link: QuantumLink, tag: Any, attempts: int) -> None:
        """
        The link reached its attempt limit without producing a pair.
        """
        ...

    def on_allocation_failed(self, link: QuantumLink, tag: Any, node: int) -> None:
        """
        A successful attempt found no free memory slot at a node and was discarded.
        The link retries on its own; this does not count against the attempt limit.
        """
        ...


class LinkLayer(Application):
    """
    Entanglement generation protocol.
    It runs one state machine per link and serves generation jobs in FIFO order.

    Link state machine::

        IDLE --generate--> ATTEMPTING --success--> HERALDED --herald--> IDLE
                              |  ^
                              +--+ loss, or no free memory slot
                              |
                              +--attempts exhausted--> IDLE
    """

    def __init__(self):
        super().__init__()
        self.add_handler(self.handle_attempt, AttemptEntanglement)
        self.add_handler(self.handle_herald, HeraldResult)

    @override
    def install(self, network: QuantumNetwork, simulator: Simulator):
        super().install(network, simulator)
        self.resources = network.resources

    def generate(self, link: QuantumLink, requester: GenerationRequester, tag: Any = None) -> bool:
        """
        Request one elementary pair over a link.

        Returns:
            True if attempts start right away, False if the job is queued behind other jobs.
        """
        job = GenerationJob(requester, tag)
        if link.state != LinkState.IDLE:
            link.queue.append(job)
            log.debug(f"{link}: queued generation tag={tag}, {len(link.queue)} waiting")
            return False
        self._start(link, job)
        return True

    def cancel(self, links: list[QuantumLink], match: Callable[[GenerationJob], bool]) -> int:
        """
        Cancel generation jobs on the given links.
        Queued jobs are dropped; a job in service is aborted and any pair awaiting its herald is discarded.

        Args:
            links: links to search.
            match: selects jobs to cancel.

        Returns:
            Number of canceled jobs.
        """
        n = 0
        for link in links:
            kept = [job for job in link.queue if not match(job)]
            n += len(link.queue) - len(kept)
            link.cnt.n_canceled += len(link.queue) - len(kept)
            link.queue.clear()
            link.queue.extend(kept)

            if link.job is None or not match(link.job):
                continue
            n += 1
            link.cnt.n_canceled += 1
            if link.pending_event is not None:
                link.pending_event.cancel()
            if link.pending_pair is not None:
                self.resources.discard(link.pending_pair)
            log.debug(f"{link}: canceled generation tag={link.job.tag}")
            self._finish(link)
        return n

    def _start(self, link: QuantumLink, job: GenerationJob) -> None:
        link.state = LinkState.ATTEMPTING
        link.job = job
        link.attempts = 0
        link.cnt.n_jobs += 1
        self._schedule_attempt(link, self.simulator.tc)

    def _schedule_attempt(self, link: QuantumLink, t: Time) -> None:
        event = AttemptEntanglement(self, link, t=t, by=self)
        link.pending_event = event
        self.simulator.add_event(event)

    def _finish(self, link: QuantumLink) -> None:
        """Return the link to IDLE and start the next queued job."""
        link.state = LinkState.IDLE
        link.job = None
        link.attempts = 0
        link.pending_event = None
        link.pending_pair = None
        if link.queue:
            self._start(link, link.queue.popleft())

    def handle_attempt(self, event: AttemptEntanglement):
        link = event.link
        assert link.state == LinkState.ATTEMPTING and link.pending_event is event
        assert link.job is not None
        simulator = self.simulator
        link.pending_event = None

        if simulator.rng.random() >= link.success_prob:
            link.attempts += 1
            link.cnt.n_attempts += 1
            if link.max_attempts is not None and link.attempts >= link.max_attempts:
                job, attempts = link.job, link.attempts
                link.cnt.n_exhausted += 1
                log.debug(f"{link}: generation exhausted after {attempts} attempts tag={job.tag}")
                self._finish(link)
                job.requester.on_generation_exhausted(link, job.tag, attempts)
                return
            self._schedule_attempt(link, simulator.tc + link.attempt_interval)
            return

        slot_a = self.resources.try_allocate(link.a)
        slot_b = None if slot_a is None else self.resources.try_allocate(link.b)
        if slot_a is None or slot_b is None:
            if slot_a is not None:
                self.resources.release(link.a, slot_a)
            link.cnt.n_alloc_fail += 1
            full = link.a if slot_a is None else link.b
            job = link.job
            if link.attempt_interval > 0:
                log.debug(f"{link}: no free memory slot at node {full}, retrying")
                self._schedule_attempt(link, simulator.tc + link.attempt_interval)
            else:
                # a zero interval cannot advance the clock, so the retry waits for a slot release
                log.debug(f"{link}: no free memory slot at node {full}, waiting")
                self.resources.wait_for_slot(full, lambda: self._wake(link, job))
            job.requester.on_allocation_failed(link, job.tag, full)
            return

        link.attempts += 1
        link.cnt.n_attempts += 1
        link.cnt.n_success += 1
        pair = self.resources.create(link.a, link.b, slot_a, slot_b, fidelity=link.base_fidelity)
        link.state = LinkState.HERALDED
        link.pending_pair = pair
        herald = HeraldResult(self, link, pair, attempts=link.attempts, t=simulator.tc + link.herald_delay, by=self)
        link.pending_event = herald
        simulator.add_event(herald)
        log.debug(f"{link}: pair {pair.pair_id} generated after {link.attempts} attempts, herald due at {herald.t}")

    def _wake(self, link: QuantumLink, job: GenerationJob) -> bool:
        """
        Retry an attempt deferred for lack of memory, once a slot is released.

        Returns:
            False if the job is gone or no longer waiting.
        """
        if link.job is not job or link.state != LinkState.ATTEMPTING or link.pending_event is not None:
            return False
        self._schedule_attempt(link, self.simulator.tc)
        return True

    def handle_herald(self, event: HeraldResult):
        link = event.link
        assert link.state == LinkState.HERALDED and link.pending_pair is event.pair
        assert link.job is not None
        job, pair = link.job, event.pair
        pair.state = PairState.IDLE
        log.debug(f"{link}: herald pair {pair.pair_id} fidelity={pair.fidelity} tag={job.tag}")
        self._finish(link)
        job.requester.on_pair_heralded(link, pair, job.tag, event.attempts)
