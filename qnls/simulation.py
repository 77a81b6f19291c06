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

import json
import math
from collections.abc import Iterable
from multiprocessing import Pool
from typing import Any, TypedDict, final

from typing_extensions import NotRequired, override

from qnls.models.epr import ResourceInvariantViolation
from qnls.models.policy import PURIFICATION_POLICIES, SWAP_POLICIES, make_purification_policy, make_swap_policy
from qnls.network import ConfigurationError, CustomTopology, QuantumNetwork, RequestSpec, SwapOrder, Topo, make_request
from qnls.network.protocol import LinkLayer, PathComposer, PurificationEngine, SwappingEngine
from qnls.simulator import DEFAULT_ACCURACY, Event, Simulator, Time
from qnls.stats import RequestRecord, StatisticsCollector, links_frame, nodes_frame, records_frame
from qnls.utils import WallClockTimeout, json_default, json_encodable, log


class SimulationConfig(TypedDict):
    topology: Topo
    """Nodes and links."""
    requests: list[RequestSpec]
    """End-to-end requests, served along their given paths."""
    seed: NotRequired[int | None]
    """Random seed, defaults to None i.e. fresh entropy."""
    duration: NotRequired[float | None]
    """Simulated duration in seconds, None means until no event remains."""
    max_events: NotRequired[int | None]
    """Maximum number of dispatched events."""
    warmup_period: NotRequired[float]
    """Seconds at the start of the run excluded from statistics distributions."""
    accuracy: NotRequired[int]
    """Time slots per second, defaults to 1e9."""
    purification: NotRequired[str]
    """Purification policy name, defaults to "bbpssw"."""
    swapping: NotRequired[str]
    """Swap policy name, defaults to "werner"."""
    purif_delay: NotRequired[float]
    """Purification operation delay in seconds."""
    swap_delay: NotRequired[float]
    """Swap operation delay in seconds."""
    swap_order: NotRequired[SwapOrder]
    """Default swap order of requests, defaults to "l2r"."""
    progress_interval: NotRequired[float | None]
    """Interval in simulated seconds between progress log lines."""
    wall_timeout: NotRequired[float | None]
    """Wall-clock limit in seconds of the run."""


@final
class ProgressEvent(Event):
    """
    Periodic event that logs simulation progress.
    """

    def __init__(self, sim: "Simulation", period: float, *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(t, name, by)
        self.sim = sim
        self.period = period

    @override
    def invoke(self) -> None:
        self.sim.report_progress()
        if all(r.is_finished for r in self.sim.composer.requests):
            return
        self.t += self.period
        self.sim.simulator.add_event(self)


@json_encodable
class SimulationResult:
    """
    Everything a run produced: the request record stream, summary statistics and counters.
    """

    def __init__(self, sim: "Simulation", *, timed_out: bool):
        simulator = sim.simulator
        network = sim.network
        self.seed = sim.seed
        self.records: list[RequestRecord] = list(sim.collector.records)
        self.summary = sim.collector.summary()
        self.kernel = {
            "total_events": simulator.total_events,
            "n_dispatched": simulator.n_dispatched,
            "n_stale": simulator.n_stale,
            "pending_events": simulator.pending_events,
            "sim_time": (simulator.tc - simulator.ts).sec,
            "time_spend": simulator.time_spend,
            "wall_timeout": timed_out,
        }
        self.links = links_frame(network).to_dict(orient="records")
        self.nodes = nodes_frame(network).to_dict(orient="records")
        self.purification = vars(network.get_app(PurificationEngine).cnt).copy()
        self.swapping = vars(network.get_app(SwappingEngine).cnt).copy()

    def records_frame(self):
        """Request records as a pandas DataFrame."""
        return records_frame(self.records)

    def to_json(self, **kwargs) -> str:
        return json.dumps(self, default=json_default, **kwargs)


def _check_config(config: SimulationConfig) -> None:
    for key in ("topology", "requests"):
        if key not in config:
            raise ConfigurationError(f"missing configuration key {key}")
    duration = config.get("duration", None)
    if duration is not None and not duration > 0:
        raise ConfigurationError(f"duration must be positive, got {duration}")
    max_events = config.get("max_events", None)
    if max_events is not None and (not isinstance(max_events, int) or isinstance(max_events, bool) or max_events <= 0):
        raise ConfigurationError(f"max_events must be a positive integer, got {max_events}")
    for key in ("warmup_period", "purif_delay", "swap_delay"):
        value = config.get(key, 0.0)
        real = isinstance(value, (int, float)) and not isinstance(value, bool)
        if not (real and value >= 0 and not math.isinf(value)):
            raise ConfigurationError(f"{key} must be a finite non-negative number, got {value}")
    if config.get("purification", "bbpssw") not in PURIFICATION_POLICIES:
        raise ConfigurationError(f"unknown purification policy {config.get('purification')}")
    if config.get("swapping", "werner") not in SWAP_POLICIES:
        raise ConfigurationError(f"unknown swap policy {config.get('swapping')}")
    for key in ("progress_interval", "wall_timeout"):
        value = config.get(key, None)
        if value is not None and not value > 0:
            raise ConfigurationError(f"{key} must be positive, got {value}")


class Simulation:
    """
    One simulation run: builds the network and engines from a configuration, runs them, and collects results.

    The whole configuration is validated in the constructor, before any event is scheduled.
    """

    def __init__(self, config: SimulationConfig):
        """
        Raises:
            ConfigurationError - configuration is malformed; TopologyError and RequestError are subclasses.
        """
        _check_config(config)
        self.config = config
        self.seed = config.get("seed", None)

        self.network = QuantumNetwork(
            CustomTopology(config["topology"]),
            apps=[
                LinkLayer(),
                PurificationEngine(
                    make_purification_policy(config.get("purification", "bbpssw")), delay=config.get("purif_delay", 0.0)
                ),
                SwappingEngine(make_swap_policy(config.get("swapping", "werner")), delay=config.get("swap_delay", 0.0)),
                PathComposer(),
            ],
        )
        self.composer = self.network.get_apps(PathComposer)[0]
        swap_order = config.get("swap_order", "l2r")
        for i, spec in enumerate(config["requests"]):
            self.composer.submit(make_request(self.network, spec, i, default_swap_order=swap_order))

        duration = config.get("duration", None)
        self.simulator = Simulator(
            0.0,
            math.inf if duration is None else duration,
            accuracy=config.get("accuracy", DEFAULT_ACCURACY),
            seed=self.seed,
        )
        self.collector = StatisticsCollector(warmup_period=config.get("warmup_period", 0.0), network=self.network)
        self._done = False

    def report_progress(self) -> None:
        simulator = self.simulator
        n_done = sum(1 for r in self.composer.requests if r.is_finished)
        pct = ""
        if simulator.te is not None:
            pct = f" {100 * (simulator.tc - simulator.ts).sec / (simulator.te - simulator.ts).sec:.0f}%"
        log.info(f"progress{pct}: {n_done}/{len(self.composer.requests)} requests completed, {simulator.n_dispatched} events")

    def run(self) -> SimulationResult:
        """
        Run the simulation to completion.
        Requests still in progress at the end fail with reason INCOMPLETE, releasing their memory slots.
        """
        assert not self._done, "a Simulation can only run once"
        self._done = True
        simulator = self.simulator

        log.install(simulator)
        self.network.install(simulator)
        self.collector.install(simulator)
        progress_interval = self.config.get("progress_interval", None)
        if progress_interval is not None:
            simulator.add_event(ProgressEvent(self, progress_interval, t=simulator.ts + progress_interval, by=self))

        timeout = WallClockTimeout(self.config.get("wall_timeout", None), simulator.stop)
        with timeout():
            simulator.run_until(max_events=self.config.get("max_events", None))
        if timeout.occurred:
            log.warning(f"simulation stopped by wall-clock timeout of {self.config.get('wall_timeout')}s")

        # requests completed after the last dispatched event, then requests cut off by the end of the run
        finished = [r for r in self.composer.requests if r.is_finished]
        finished.sort(key=lambda r: (r.completed_at.time_slot if r.completed_at is not None else 0, r.request_id))
        for request in finished:
            self.collector.record(request)
        for request in self.composer.finish():
            self.collector.record(request)
        resources = self.network.resources
        resources.check()
        if resources.n_live != 0:
            raise ResourceInvariantViolation(f"{resources.n_live} pairs still hold memory slots after the run")

        result = SimulationResult(self, timed_out=timeout.occurred)
        log.install(None)
        return result


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """Build and run a single simulation."""
    return Simulation(config).run()


def _run_with_seed(args: tuple[SimulationConfig, int]) -> SimulationResult:
    config, seed = args
    return run_simulation({**config, "seed": seed})


def run_replications(config: SimulationConfig, seeds: Iterable[int], *, workers: int | None = None) -> list[SimulationResult]:
    """
    Run independent replications of a configuration, one per seed.

    Each replication builds its own network and simulator; nothing is shared between them.

    Args:
        config: simulation configuration; its `seed` is overridden.
        seeds: one seed per replication.
        workers: number of worker processes, None means one per CPU; 1 runs in the calling process.

    Returns:
        Results in the order of `seeds`.
    """
    tasks = [(config, seed) for seed in seeds]
    if workers == 1:
        return [_run_with_seed(task) for task in tasks]
    with Pool(processes=workers) as pool:
        return pool.map(_run_with_seed, tasks)
