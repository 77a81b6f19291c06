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

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, final

from typing_extensions import override

from qnls.simulator.time import Time


class Event(ABC):
    """Basic event class in simulator"""

    def __init__(self, t: Time, name: str | None = None, by: Any = None):
        """
        Args:
            t: the time at which this event is due.
            name: the name of this event.
            by: the entity or application that causes this event.
        """
        self.t = t
        self.name = name
        self.by = by
        self._is_canceled: bool = False

    @abstractmethod
    def invoke(self) -> None:
        """Invoke the event."""
        pass

    def cancel(self) -> None:
        """
        Cancel this event.
        A canceled event stays in the event pool but is dropped when it becomes due.
        """
        self._is_canceled = True

    @property
    def is_canceled(self) -> bool:
        """Whether this event has been canceled."""
        return self._is_canceled

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name or ''}@{self.t})"


@final
class WrapperEvent(Event):
    def __init__(self, t: Time, name: str | None, by: Any, fn: Callable, args: Any, kwargs: Any):
        super().__init__(t, name, by)
        self.fn = fn
        self.args = args
        self.kwargs = kwargs

    @override
    def invoke(self) -> None:
        self.fn(*self.args, **self.kwargs)


def func_to_event(t: Time, fn: Callable, *args, name: str | None = None, by: Any = None, **kwargs) -> WrapperEvent:
    """
    Wrap a function call as an event, so that `fn(*args, **kwargs)` is called at `t`.
    """
    return WrapperEvent(t, name, by, fn, args, kwargs)
