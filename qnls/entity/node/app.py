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

import sys
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar, cast

from qnls.simulator import Event, Simulator

if TYPE_CHECKING:
    from qnls.network.network import QuantumNetwork

EventT = TypeVar("EventT", bound=Event)
"""Represents an event type."""


class Application:
    """
    Protocol engine deployed on the quantum network.

    Events targeting an application are routed to handlers registered with `add_handler`.
    """

    def __init__(self):
        self._simulator: Simulator | None = None
        self._network: "QuantumNetwork|None" = None
        self._dispatch_table = defaultdict[type[Event], list[Callable[[Event], bool | None]]](lambda: [])

    def install(self, network: "QuantumNetwork", simulator: Simulator):
        """
        Install initial events for this application. Called from QuantumNetwork.install().
        """
        self._simulator = simulator
        self._network = network

    def reset_counters(self) -> None:
        """
        Start counting afresh, e.g. at the end of a warm-up period. Applications without counters do nothing.
        """

    def handle(self, event: Event) -> bool:
        """
        Dispatch an event in the application.

        Return:
            Whether any handler accepted the event.
        """
        handlers = self._dispatch_table.get(type(event), [])
        for handler in handlers:
            if handler(event) is True:
                break
        return len(handlers) > 0

    def add_handler(self, handler: Callable[[EventT], bool | None], event_type: type[EventT] | Iterable[type[EventT]]):
        """
        Add an event handler function.

        Args:
            handler: Event handler function; returning True stops further handlers.
            event_type: Event type(s). Each class must be marked `@final`.
        """
        ets = [event_type] if isinstance(event_type, type) else event_type
        eh = cast(Any, handler)
        for et in cast(Iterable[type[EventT]], ets):
            # __final__ marker is available since Python 3.11
            assert sys.version_info[:2] < (3, 11) or getattr(et, "__final__", False) is True, (
                f"event type {et} must be marked @final"
            )
            self._dispatch_table[et].append(eh)

    @property
    def network(self) -> "QuantumNetwork":
        """
        Retrieve the network.

        Raises:
            IndexError - application is not installed.
        """
        if self._network is None:
            raise IndexError("application is not in a network")
        return self._network

    @property
    def simulator(self) -> Simulator:
        """
        Retrieve the simulator.

        Raises:
            IndexError - application is not installed.
        """
        if self._simulator is None:
            raise IndexError("application is not in a simulator")
        return self._simulator


ApplicationT = TypeVar("ApplicationT", bound=Application)
"""Represents an application type."""
