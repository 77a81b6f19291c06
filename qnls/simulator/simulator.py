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

import math
import os
import time
from collections import defaultdict
from collections.abc import Callable, Iterable
from pstats import SortKey
from typing import TYPE_CHECKING, Any, Protocol, overload

from qnls.simulator.event import Event, func_to_event
from qnls.simulator.pool import DefaultEventPool
from qnls.simulator.time import DEFAULT_ACCURACY, Time
from qnls.utils import log
from qnls.utils.random import make_rng

try:
    from cProfile import Profile
except ImportError:
    from profile import Profile

if TYPE_CHECKING:
    from qnls.entity.entity import Entity


class SimulatorInstallable(Protocol):
    def install(self, simulator: "Simulator") -> Any: ...


class Simulator:
    """
    Discrete-event driven simulator core.

    Events are dispatched in non-decreasing time order; events due at the same time slot are
    dispatched in the order they were scheduled.
    Each simulator owns a random number generator, so that two simulators built with the same seed
    and fed with the same inputs produce identical results.
    """

    def __init__(
        self,
        start_second: float = 0.0,
        end_second: float = math.inf,
        *,
        accuracy: int = DEFAULT_ACCURACY,
        seed: int | None = None,
        install_to: Iterable[SimulatorInstallable] = [],
    ):
        """
        Args:
            start_second: simulation start time in seconds, defaults to 0.0.
            end_second: simulation end time in seconds, defaults to infinity i.e. run until no event remains.
            accuracy: the number of time slots per second, defaults to 1e9 i.e. 1ns time slot.
            seed: seed of the random number generator; None draws fresh entropy.
            install_to: install this simulator by invoking `.install(self)` on each target.
        """
        self.accuracy = accuracy

        assert start_second >= 0.0
        self.ts = self.time(sec=start_second)
        """Simulation start time."""
        assert end_second >= start_second
        self.te = None if math.isinf(end_second) else self.time(sec=end_second)
        """Simulation end time. None means no limit."""
        self.time_spend: float = 0
        """Wall-clock time for entire simulation run."""

        self.seed = seed
        self.rng = make_rng(seed)
        """Random number generator; every random draw in the simulation must use it."""

        self.event_pool = DefaultEventPool(self.ts.time_slot, None if self.te is None else self.te.time_slot)
        self.total_events = 0
        """Number of events accepted into the event pool."""
        self.n_dispatched = 0
        """Number of events invoked."""
        self.n_stale = 0
        """Number of canceled events dropped when they became due."""

        self.watch_event = defaultdict[type[Event], list["Entity"]](lambda: [])

        self._running = False

        for install_target in install_to:
            install_target.install(self)

    @property
    def tc(self) -> Time:
        """Current simulation time."""
        return self.time(time_slot=self.event_pool.tc)

    @property
    def running(self) -> bool:
        """Is the simulator running?"""
        return self._running

    @property
    def pending_events(self) -> int:
        """Number of events waiting in the event pool, including canceled ones."""
        return len(self.event_pool)

    def average_pending_events(self) -> float:
        """Time-averaged number of pending events, since start or the last `event_pool.queue_length` reset."""
        return self.event_pool.queue_length.mean(self.event_pool.tc)

    @overload
    def time(self, *, time_slot: int) -> Time:
        """Produce `Time` from time slot."""
        pass

    @overload
    def time(self, *, sec: float) -> Time:
        """Produce `Time` from seconds."""
        pass

    def time(self, *, time_slot: int | None = None, sec: float = math.nan) -> Time:
        if time_slot is not None:
            return Time(time_slot, accuracy=self.accuracy)
        return Time.from_sec(sec, accuracy=self.accuracy)

    def add_event(self, event: Event) -> bool:
        """
        Add an event into simulator event pool.

        Returns:
            Whether the event is accepted; an event due after the end time is discarded.

        Raises:
            CausalityError - event is due before the current time.
        """
        assert event.t.accuracy == self.accuracy
        if self.event_pool.add_event(event):
            self.total_events += 1
            return True
        return False

    def schedule(self, event: Event, t: Time | None = None) -> bool:
        """
        Schedule an event, optionally overriding its due time.
        """
        if t is not None:
            event.t = t
        return self.add_event(event)

    def call_later(self, delay: float, fn: Callable, *args, name: str | None = None, by: Any = None, **kwargs) -> Event:
        """
        Schedule a function call after `delay` seconds.

        Returns:
            The scheduled event, which may be canceled.
        """
        event = func_to_event(self.tc + delay, fn, *args, name=name, by=by, **kwargs)
        self.add_event(event)
        return event

    def run(self) -> None:
        """
        Run the simulation until the event pool is exhausted, the end time is reached, or `stop()` is called.

        If QNLS_PROFILING=1 environment variable is set, the simulation runs under cProfile profiling,
        and a profiling report is printed at the end of simulation.
        """
        self.run_until()

    def run_until(
        self,
        predicate: Callable[[], bool] | None = None,
        *,
        time_limit: Time | float | None = None,
        max_events: int | None = None,
    ) -> None:
        """
        Run the simulation until a stop condition holds.

        Args:
            predicate: checked after each dispatched event; the run stops when it returns True.
            time_limit: stop before dispatching any event due after this time; seconds or Time.
            max_events: stop after dispatching this many events in this call.
        """
        limit: int | None = None
        if time_limit is not None:
            limit = (time_limit if isinstance(time_limit, Time) else self.time(sec=time_limit)).time_slot
            if self.te is not None:
                limit = min(limit, self.te.time_slot)

        profile = Profile() if os.getenv("QNLS_PROFILING", "0") == "1" else None
        log.info(f"Simulation started{' with profiling' if profile else ''}.")

        self._running = True
        trs = time.time()
        try:
            if profile:
                profile.runcall(self._run, predicate, limit, max_events)
            else:
                self._run(predicate, limit, max_events)
        finally:
            self._running = False
            tre = time.time()
            self.time_spend += tre - trs
        sim_time = (self.tc - self.ts).sec
        log.info(
            f"Simulation finished, runtime {tre - trs}, {self.n_dispatched} events dispatched, "
            f"{self.n_stale} stale, sim_time {sim_time}"
        )

        if profile:
            profile.print_stats(SortKey.TIME)

    def _run(self, predicate: Callable[[], bool] | None, limit: int | None, max_events: int | None) -> None:
        pool = self.event_pool
        n = 0
        while self._running:
            if limit is not None:
                t_next = pool.peek_time()
                if t_next is None or t_next > limit:
                    pool.advance(max(limit, pool.tc))
                    break

            event = pool.next_event()
            if event is None:  # all events completed
                break
            if event.is_canceled:
                self.n_stale += 1
                continue

            event.invoke()
            self.n_dispatched += 1
            n += 1
            for monitor in self.watch_event.get(type(event), []):
                monitor.handle(event)

            if predicate is not None and predicate():
                break
            if max_events is not None and n >= max_events:
                break

    def stop(self) -> None:
        """
        Stop the simulation loop after the current event.
        """
        self._running = False
