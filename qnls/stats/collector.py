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

from typing import TYPE_CHECKING, Any, final

from typing_extensions import override

import numpy as np
import pandas as pd

from qnls.entity.entity import Entity
from qnls.network.protocol.event import RequestCompleted
from qnls.network.request import Request, RequestState
from qnls.simulator import Event, Simulator, Time
from qnls.utils import json_encodable, log

if TYPE_CHECKING:
    from qnls.network.network import QuantumNetwork


@final
class WarmupEnd(Event):
    """
    Event that ends the warm-up period of a statistics collector.
    """

    def __init__(self, collector: "StatisticsCollector", *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(t, name, by)
        self.collector = collector

    @override
    def invoke(self) -> None:
        self.collector.handle(self)


@json_encodable
class RequestRecord:
    """
    Outcome of one request, as observed when it reached a terminal state.
    """

    def __init__(self, request: Request, network: "QuantumNetwork|None" = None, *, measured: bool = True):
        def node_name(node: int) -> str | int:
            return node if network is None else network.nodes[node].name

        self.request_id = request.request_id
        self.src = node_name(request.src)
        self.dst = node_name(request.dst)
        self.outcome = request.state.name
        self.reason = None if request.reason is None else request.reason.name
        self.fidelity = request.fidelity
        self.target_met = request.target_met
        self.start_time = None if request.started_at is None else request.started_at.sec
        self.completion_time = None if request.completed_at is None else request.completed_at.sec
        self.path_attempts = request.attempt
        self.retries = request.retries
        self.gen_attempts = request.gen_attempts
        self.purif_ok = request.purif_ok
        self.purif_fail = request.purif_fail
        self.swap_ok = request.swap_ok
        self.swap_fail = request.swap_fail
        self.preemptions = request.preemptions
        self.measured = measured
        """False if the request completed during the warm-up period."""

    @property
    def satisfied(self) -> bool:
        return self.outcome == RequestState.SATISFIED.name

    @property
    def latency(self) -> float | None:
        if self.start_time is None or self.completion_time is None:
            return None
        return self.completion_time - self.start_time

    def __repr__(self) -> str:
        return f"<record {self.request_id} {self.outcome} fidelity={self.fidelity} latency={self.latency}>"


RECORD_COLUMNS = [
    "request_id",
    "src",
    "dst",
    "outcome",
    "reason",
    "fidelity",
    "target_met",
    "start_time",
    "completion_time",
    "latency",
    "path_attempts",
    "retries",
    "gen_attempts",
    "purif_ok",
    "purif_fail",
    "swap_ok",
    "swap_fail",
    "preemptions",
    "measured",
]


def _describe(values: list[float]) -> dict[str, float]:
    if len(values) == 0:
        return {"count": 0, "mean": np.nan, "std": np.nan, "min": np.nan, "p50": np.nan, "p95": np.nan, "max": np.nan}
    a = np.asarray(values, dtype=float)
    return {
        "count": int(a.size),
        "mean": float(np.mean(a)),
        "std": float(np.std(a)),
        "min": float(np.min(a)),
        "p50": float(np.percentile(a, 50)),
        "p95": float(np.percentile(a, 95)),
        "max": float(np.max(a)),
    }


class StatisticsCollector(Entity):
    """
    Passive observer that records every completed request.

    It watches `RequestCompleted` events through `Simulator.watch_event` and never schedules protocol events.
    Requests completing before the warm-up period ends are kept in the record stream but excluded from
    distributions. When the warm-up period ends, network counters and time averages restart from zero.
    """

    def __init__(self, name: str = "stats", *, warmup_period: float = 0.0, network: "QuantumNetwork|None" = None):
        """
        Args:
            name: collector name.
            warmup_period: warm-up period in seconds from simulation start.
            network: network whose node names are used in records.
        """
        super().__init__(name=name)
        assert warmup_period >= 0.0
        self.warmup_period = warmup_period
        self.network = network
        self.records: list[RequestRecord] = []
        """Records in completion order."""
        self._recorded = set[int]()
        self.measuring = warmup_period == 0.0
        """Whether the warm-up period is over."""
        self._t_measure: Time | None = None

    @override
    def install(self, simulator: Simulator) -> None:
        super().install(simulator)
        simulator.watch_event[RequestCompleted].append(self)
        if self.measuring:
            self._t_measure = simulator.ts
        else:
            simulator.add_event(WarmupEnd(self, t=simulator.ts + self.warmup_period, name="warmup end", by=self))

    @override
    def handle(self, event: Event) -> None:
        if isinstance(event, RequestCompleted):
            self.record(event.request)
        elif isinstance(event, WarmupEnd):
            simulator = self.simulator
            self.measuring = True
            self._t_measure = simulator.tc
            simulator.event_pool.queue_length.reset(simulator.tc.time_slot)
            if self.network is not None:
                self.network.reset_counters()
            log.info(f"{self.name}: warm-up period ended, {len(self.records)} requests completed during warm-up")

    def record(self, request: Request) -> RequestRecord | None:
        """
        Record a completed request. Recording the same request twice has no effect.

        Returns:
            The new record, or None if the request was already recorded.
        """
        assert request.is_finished
        if request.request_id in self._recorded:
            return None
        self._recorded.add(request.request_id)
        rec = RequestRecord(request, self.network, measured=self.measuring)
        self.records.append(rec)
        return rec

    @property
    def measured(self) -> list[RequestRecord]:
        """Records completed after the warm-up period."""
        return [rec for rec in self.records if rec.measured]

    def summary(self) -> dict[str, Any]:
        """
        Summarize measured records: outcome counts, attempts-to-success, time-to-success, fidelity, throughput.
        It also reports the time-averaged event queue length over the measured period.
        """
        recs = self.measured
        ok = [rec for rec in recs if rec.satisfied]
        reasons: dict[str, int] = {}
        for rec in recs:
            if rec.reason is not None:
                reasons[rec.reason] = reasons.get(rec.reason, 0) + 1

        duration = 0.0
        if self._simulator is not None and self._t_measure is not None:
            duration = (self.simulator.tc - self._t_measure).sec

        return {
            "n_requests": len(recs),
            "n_satisfied": len(ok),
            "n_failed": len(recs) - len(ok),
            "n_target_met": sum(1 for rec in ok if rec.target_met),
            "success_ratio": len(ok) / len(recs) if recs else np.nan,
            "failure_reasons": reasons,
            "attempts": _describe([rec.gen_attempts for rec in ok]),
            "path_attempts": _describe([rec.path_attempts for rec in ok]),
            "latency": _describe([rec.latency for rec in ok if rec.latency is not None]),
            "fidelity": _describe([rec.fidelity for rec in ok if rec.fidelity is not None]),
            "throughput": len(ok) / duration if duration > 0 else np.nan,
            "avg_pending_events": np.nan if self._simulator is None else self.simulator.average_pending_events(),
        }

    def records_frame(self) -> pd.DataFrame:
        """
        Retrieve the record stream as a DataFrame, one row per request.
        """
        return records_frame(self.records)


def records_frame(records: list[RequestRecord]) -> pd.DataFrame:
    """
    Convert request records into a DataFrame, one row per request.
    """
    return pd.DataFrame([{**vars(rec), "latency": rec.latency} for rec in records], columns=RECORD_COLUMNS)


def links_frame(network: "QuantumNetwork") -> pd.DataFrame:
    """
    Per-link generation counters, one row per link.
    """
    rows = []
    for link in network.links:
        rows.append(
            {
                "link": link.name,
                "loss_prob": link.loss_prob,
                **vars(link.cnt),
                "success_rate": link.cnt.success_rate,
            }
        )
    return pd.DataFrame(rows)


def nodes_frame(network: "QuantumNetwork") -> pd.DataFrame:
    """
    Per-node memory counters and time-averaged occupancy, one row per node.
    """
    rows = []
    for node in network.nodes:
        memory = node.memory
        rows.append(
            {
                "node": node.name,
                "capacity": memory.capacity,
                "in_use": memory.count,
                **vars(memory.cnt),
                "avg_occupancy": memory.average_occupancy(),
            }
        )
    return pd.DataFrame(rows)
