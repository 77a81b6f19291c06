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

import heapq
import itertools

from qnls.simulator.event import Event
from qnls.utils.timeavg import TimeAverage


class CausalityError(RuntimeError):
    """
    Raised when an event is scheduled before the current simulation time.
    """

    def __init__(self, event: Event, tc: int):
        super().__init__(f"cannot schedule {event} at slot {event.t.time_slot}, current slot is {tc}")
        self.event = event
        self.tc = tc


class DefaultEventPool:
    """
    Priority queue of pending events.

    Events are ordered by due time.
    Events due at the same time slot are dispatched in insertion order.
    """

    def __init__(self, ts: int, te: int | None):
        self.ts = ts
        """Event list start time slot."""
        self.te = te
        """Event list end time slot. None means infinity."""
        self.tc = ts
        """Current time slot."""
        self.event_list: list[tuple[int, int, Event]] = []
        self._seq = itertools.count()
        self.queue_length = TimeAverage(ts)
        """Time-averaged number of pending events."""

    def add_event(self, event: Event) -> bool:
        """
        Insert an event into the pool.

        Returns:
            Whether the event is inserted; False if the event is due after the end time.

        Raises:
            CausalityError - event is due before the current time.
        """
        t = event.t.time_slot
        if t < self.tc:
            raise CausalityError(event, self.tc)
        if self.te is not None and t > self.te:
            return False

        heapq.heappush(self.event_list, (t, next(self._seq), event))
        self.queue_length.update(self.tc, len(self.event_list))
        return True

    def peek_time(self) -> int | None:
        """Due time slot of the next event, or None if the pool is empty."""
        return self.event_list[0][0] if self.event_list else None

    def next_event(self) -> Event | None:
        """
        Pop the next event to be executed and advance the current time to its due time.

        If the pool is empty, the current time advances to the end time (if finite) and None is returned.
        """
        try:
            t, _, event = heapq.heappop(self.event_list)
        except IndexError:
            if self.te is not None:
                self.queue_length.update(self.te, 0)
                self.tc = self.te
            return None
        assert t >= self.tc, "simulation clock must not move backwards"
        self.queue_length.update(t, len(self.event_list))
        self.tc = t
        return event

    def advance(self, t: int) -> None:
        """Advance the current time without dispatching events."""
        assert t >= self.tc
        assert not self.event_list or self.event_list[0][0] >= t
        self.queue_length.update(t, len(self.event_list))
        self.tc = t

    def __len__(self) -> int:
        return len(self.event_list)
