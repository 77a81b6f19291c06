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

from typing_extensions import override

from qnls.entity.node import Application
from qnls.entity.qchannel import GenerationJob, QuantumLink
from qnls.models.epr import EntangledPair
from qnls.network.network import QuantumNetwork
from qnls.network.protocol.event import RequestCompleted, RequestStart, RequestTimeout
from qnls.network.protocol.link_layer import LinkLayer
from qnls.network.protocol.purification import PurificationEngine, PurificationResult
from qnls.network.protocol.swapping import SwappingEngine, SwapResult
from qnls.network.request import FailureReason, Request, RequestState, Segment
from qnls.simulator import Simulator
from qnls.utils import log


@dataclass(frozen=True, eq=False)
class SegmentTag:
    """Identifies the path attempt and segment an operation was started for."""

    request: Request
    attempt: int
    segment: Segment


@dataclass(frozen=True, eq=False)
class SwapTag:
    request: Request
    attempt: int
    left: Segment
    right: Segment


class PathComposer(Application):
    """
    Serves end-to-end requests along their given paths.

    For each path attempt, every link of the path generates an elementary pair, which is optionally purified.
    Adjacent ready segments are then swapped at relays in the request's swap order, until a single pair
    connects source and destination and is delivered.

    A generation exhaustion, a swap failure, or a timeout discards every pair of the path attempt and
    restarts it from scratch, as long as the retry budget allows.
    A purification failure regenerates that segment and also consumes the retry budget.

    When a request that already holds pairs finds no free slot at a node, every younger request holding a slot
    there is preempted: its path attempt is discarded and it restarts once the older request completes.
    Preemption does not consume the retry budget.
    """

    def __init__(self):
        super().__init__()
        self.requests: list[Request] = []
        self.add_handler(self.handle_start, RequestStart)
        self.add_handler(self.handle_timeout, RequestTimeout)
        self.add_handler(self.handle_completed, RequestCompleted)

    @override
    def install(self, network: QuantumNetwork, simulator: Simulator):
        super().install(network, simulator)
        self.resources = network.resources
        self.link_layer = network.get_app(LinkLayer)
        self.purifier = network.get_app(PurificationEngine)
        self.swapper = network.get_app(SwappingEngine)
        for request in self.requests:
            self._schedule_start(request)

    def submit(self, request: Request) -> None:
        """
        Add a request, to be started at its start time.
        """
        self.requests.append(request)
        if self._simulator is not None:
            self._schedule_start(request)

    def _schedule_start(self, request: Request) -> None:
        simulator = self.simulator
        t = max(simulator.time(sec=request.start_time), simulator.tc)
        simulator.add_event(RequestStart(self, request, t=t, by=self))

    def handle_start(self, event: RequestStart):
        request = event.request
        assert request.state == RequestState.PENDING
        request.state = RequestState.IN_PROGRESS
        request.started_at = self.simulator.tc
        log.debug(f"start on path {request.path}", extra={"request": request})
        self._begin_attempt(request)

    def handle_timeout(self, event: RequestTimeout):
        request = event.request
        assert request.is_active and request.attempt == event.attempt
        request.timeout_event = None
        log.debug(f"path attempt {request.attempt} timed out", extra={"request": request})
        self._retry(request, FailureReason.PATH_EXHAUSTED)

    def handle_completed(self, event: RequestCompleted):
        request = event.request
        log.debug(
            f"completed reason={request.reason} fidelity={request.fidelity} "
            f"path_attempts={request.attempt} gen_attempts={request.gen_attempts}",
            extra={"request": request},
        )

    def _begin_attempt(self, request: Request) -> None:
        simulator = self.simulator
        request.attempt += 1
        request.segments = [Segment(i, i + 1) for i in range(len(request.links))]
        if request.timeout is not None:
            request.timeout_event = RequestTimeout(
                self, request, attempt=request.attempt, t=simulator.tc + request.timeout, by=self
            )
            simulator.add_event(request.timeout_event)
        for seg in request.segments:
            self._generate(request, seg)

    def _link_of(self, request: Request, seg: Segment) -> QuantumLink:
        assert seg.right == seg.left + 1
        return self.network.links[request.links[seg.left]]

    def _generate(self, request: Request, seg: Segment) -> None:
        seg.generating = True
        self.link_layer.generate(self._link_of(request, seg), self, SegmentTag(request, request.attempt, seg))

    @staticmethod
    def _is_current(request: Request, attempt: int) -> bool:
        return request.is_active and request.attempt == attempt

    def on_pair_heralded(self, link: QuantumLink, pair: EntangledPair, tag: SegmentTag, attempts: int) -> None:
        request, seg = tag.request, tag.segment
        request.gen_attempts += attempts
        assert self._is_current(request, tag.attempt), "generation jobs of a reset path attempt are canceled"
        seg.generating = False
        if seg.pair is None:
            seg.pair = pair
        else:
            seg.spare = pair
        self._advance(request, seg)

    def on_generation_exhausted(self, link: QuantumLink, tag: SegmentTag, attempts: int) -> None:
        request = tag.request
        request.gen_attempts += attempts
        assert self._is_current(request, tag.attempt), "generation jobs of a reset path attempt are canceled"
        tag.segment.generating = False
        log.debug(f"generation exhausted on {link}", extra={"request": request})
        self._retry(request, FailureReason.GENERATION_EXHAUSTED)

    def on_allocation_failed(self, link: QuantumLink, tag: SegmentTag, node: int) -> None:
        request = tag.request
        assert self._is_current(request, tag.attempt), "generation jobs of a reset path attempt are canceled"
        if not self._holds_pairs(request):
            return
        # wound-wait: a request holding pairs never waits on a younger request that holds the contended node
        for other in self.requests:
            if other is request or not other.is_active or other.held_by is not None:
                continue
            if self._is_older(other, request) or not self._holds_slot(other, node):
                continue
            log.debug(f"preempts {other} holding memory at node {node}", extra={"request": request})
            self._abort(other)
            other.preemptions += 1
            other.held_by = request

    @staticmethod
    def _is_older(a: Request, b: Request) -> bool:
        assert a.started_at is not None and b.started_at is not None
        return (a.started_at, a.request_id) < (b.started_at, b.request_id)

    def _pending_pairs(self, request: Request) -> list[EntangledPair]:
        pairs: list[EntangledPair] = []
        for lid in request.links:
            link = self.network.links[lid]
            if link.pending_pair is None or link.job is None:
                continue
            tag = link.job.tag
            if isinstance(tag, SegmentTag) and tag.request is request:
                pairs.append(link.pending_pair)
        return pairs

    def _held_pairs(self, request: Request) -> list[EntangledPair]:
        pairs = [pair for seg in request.segments for pair in (seg.pair, seg.spare) if pair is not None]
        return pairs + self._pending_pairs(request)

    def _holds_pairs(self, request: Request) -> bool:
        return len(self._held_pairs(request)) > 0

    def _holds_slot(self, request: Request, node: int) -> bool:
        return any(node in pair.slots for pair in self._held_pairs(request))

    def _wants_purification(self, request: Request, seg: Segment) -> bool:
        assert seg.pair is not None
        if seg.pair.purif_rounds >= request.purif_rounds:
            return False
        f = self.resources.refresh(seg.pair)
        if request.link_fidelity_target is not None and f >= request.link_fidelity_target:
            return False
        # a fresh pair must be able to lift the held one
        return self.purifier.policy.improves(f, self._link_of(request, seg).base_fidelity)

    def _advance(self, request: Request, seg: Segment) -> None:
        """
        Move an elementary segment through purification; once it is done, look for swaps.
        """
        if seg.spare is not None:
            assert seg.pair is not None
            f1, f2 = self.resources.refresh(seg.pair), self.resources.refresh(seg.spare)
            if f2 > f1:
                seg.pair, seg.spare = seg.spare, seg.pair
                f1, f2 = f2, f1
            if self.purifier.policy.improves(f1, f2):
                seg.busy = True
                seg.op = self.purifier.schedule(seg.pair, seg.spare, self, SegmentTag(request, request.attempt, seg))
                return
            # distilling would not beat the better pair, keep it and stop purifying
            self.resources.discard(seg.spare)
            seg.spare = None
            seg.purifying = False

        if seg.purifying and self._wants_purification(request, seg):
            self._generate(request, seg)
            return
        seg.purifying = False
        self._try_swaps(request)

    def on_purification(self, result: PurificationResult, tag: SegmentTag) -> None:
        request, seg = tag.request, tag.segment
        assert self._is_current(request, tag.attempt), "operations of a reset path attempt are canceled"
        seg.busy = False
        seg.op = None
        seg.spare = None
        if not result.purified:
            log.debug(
                f"segment {seg.left}-{seg.right} decayed past purification, keeping the better pair",
                extra={"request": request},
            )
            seg.pair = result.pair
            seg.purifying = False
            self._advance(request, seg)
            return
        if result.succeeded:
            request.purif_ok += 1
            seg.pair = result.pair
            self._advance(request, seg)
            return

        request.purif_fail += 1
        seg.pair = None
        request.retries += 1
        if self._budget_exhausted(request):
            self._abort(request)
            self._fail(request, FailureReason.PATH_EXHAUSTED)
            return
        log.debug(f"purification failed on segment {seg.left}-{seg.right}, regenerating", extra={"request": request})
        self._generate(request, seg)

    def _try_swaps(self, request: Request) -> None:
        segs = request.segments
        if len(segs) == 1:
            if segs[0].ready:
                self._deliver(request, segs[0])
            return

        if request.swap_order is None:
            i = 0
            while i < len(segs) - 1:
                if segs[i].ready and segs[i + 1].ready:
                    self._swap(request, i)
                    i += 2
                else:
                    i += 1
            return

        relay = request.swap_order[len(request.links) - len(segs)]
        i = next(i for i, seg in enumerate(segs) if seg.right == relay)
        if segs[i].ready and segs[i + 1].ready:
            self._swap(request, i)

    def _swap(self, request: Request, i: int) -> None:
        left, right = request.segments[i], request.segments[i + 1]
        assert left.pair is not None and right.pair is not None
        left.busy = right.busy = True
        left.op = right.op = self.swapper.schedule(
            request.path[left.right], left.pair, right.pair, self, SwapTag(request, request.attempt, left, right)
        )

    def on_swap(self, result: SwapResult, tag: SwapTag) -> None:
        request, left, right = tag.request, tag.left, tag.right
        assert self._is_current(request, tag.attempt), "operations of a reset path attempt are canceled"
        left.busy = right.busy = False
        left.op = right.op = None
        if not result.succeeded:
            request.swap_fail += 1
            left.pair = right.pair = None
            log.debug(f"swap failed at node {result.relay}", extra={"request": request})
            self._retry(request, FailureReason.PATH_EXHAUSTED)
            return

        request.swap_ok += 1
        i = request.segments.index(left)
        assert request.segments[i + 1] is right
        request.segments[i : i + 2] = [Segment(left.left, right.right, pair=result.pair, purifying=False)]
        self._try_swaps(request)

    def _deliver(self, request: Request, seg: Segment) -> None:
        assert seg.pair is not None
        request.fidelity = self.resources.refresh(seg.pair)
        self.resources.discard(seg.pair)
        seg.pair = None
        request.segments = []
        if request.timeout_event is not None:
            request.timeout_event.cancel()
            request.timeout_event = None
        request.state = RequestState.SATISFIED
        self._complete(request)

    def _budget_exhausted(self, request: Request) -> bool:
        return request.max_retries is not None and request.retries > request.max_retries

    def _retry(self, request: Request, reason: FailureReason) -> None:
        """
        Discard the current path attempt and start a new one, or fail the request if the retry budget is spent.
        """
        self._abort(request)
        request.retries += 1
        if self._budget_exhausted(request):
            self._fail(request, reason)
            return
        self._begin_attempt(request)

    def _abort(self, request: Request) -> None:
        """
        Cancel outstanding work of the current path attempt and release every pair it holds.
        """
        links = [self.network.links[lid] for lid in request.links]

        def match(job: GenerationJob) -> bool:
            return isinstance(job.tag, SegmentTag) and job.tag.request is request

        self.link_layer.cancel(links, match)
        if request.timeout_event is not None:
            request.timeout_event.cancel()
            request.timeout_event = None
        for seg in request.segments:
            if seg.op is not None:
                seg.op.cancel()
            for pair in (seg.pair, seg.spare):
                if pair is not None and pair.is_live:
                    self.resources.discard(pair)
        request.segments = []

    def _fail(self, request: Request, reason: FailureReason) -> None:
        request.state = RequestState.FAILED
        request.reason = reason
        self._complete(request)

    def _complete(self, request: Request) -> None:
        simulator = self.simulator
        request.completed_at = simulator.tc
        simulator.add_event(RequestCompleted(self, request, t=simulator.tc, by=self))
        for other in self.requests:
            if other.held_by is request:
                other.held_by = None
                log.debug(f"resumes after {request} completed", extra={"request": other})
                self._begin_attempt(other)

    def finish(self) -> list[Request]:
        """
        Terminate requests that have not completed, e.g. when the simulation ends.
        Their pairs are released and they fail with reason INCOMPLETE.

        Returns:
            Requests terminated by this call.
        """
        unfinished: list[Request] = []
        for request in self.requests:
            if request.is_finished:
                continue
            if request.is_active:
                self._abort(request)
            request.held_by = None
            request.state = RequestState.FAILED
            request.reason = FailureReason.INCOMPLETE
            request.completed_at = self.simulator.tc
            unfinished.append(request)
        return unfinished
