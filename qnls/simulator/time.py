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

from typing import final

DEFAULT_ACCURACY = 1000000000
"""Default number of time slots per second, i.e. 1ns time slot."""


def _to_time_slot(sec: int | float, accuracy: int) -> int:
    return round(sec * accuracy)


@final
class Time:
    """
    Timestamp or duration used in the simulator, counted in integer time slots.
    """

    def __init__(self, time_slot: int, *, accuracy: int = DEFAULT_ACCURACY):
        """
        Construct Time from time slot.

        Args:
            time_slot: integer time slot.
            accuracy: how many time slots per second.
        """
        self.time_slot = time_slot
        self.accuracy = accuracy

    @staticmethod
    def from_sec(sec: float, *, accuracy: int = DEFAULT_ACCURACY) -> "Time":
        """
        Construct Time from seconds, rounded to the nearest time slot.
        """
        return Time(_to_time_slot(sec, accuracy), accuracy=accuracy)

    @property
    def sec(self) -> float:
        """
        Retrieve timestamp/duration in seconds.
        """
        return self.time_slot / self.accuracy

    def _slots_of(self, ts: "Time|int|float") -> int:
        if type(ts) is Time:
            assert ts.accuracy == self.accuracy
            return ts.time_slot
        return _to_time_slot(ts, self.accuracy)

    def __eq__(self, other: object) -> bool:
        return type(other) is Time and self.accuracy == other.accuracy and self.time_slot == other.time_slot

    def __lt__(self, other: "Time") -> bool:
        assert self.accuracy == other.accuracy
        return self.time_slot < other.time_slot

    def __le__(self, other: "Time") -> bool:
        assert self.accuracy == other.accuracy
        return self.time_slot <= other.time_slot

    def __gt__(self, other: "Time") -> bool:
        return not self <= other

    def __ge__(self, other: "Time") -> bool:
        return not self < other

    def __hash__(self) -> int:
        return hash(self.time_slot)

    def __add__(self, ts: "Time|int|float") -> "Time":
        """
        Add a duration, either a Time with same accuracy or a number of seconds.
        """
        return Time(self.time_slot + self._slots_of(ts), accuracy=self.accuracy)

    def __sub__(self, ts: "Time|int|float") -> "Time":
        """
        Subtract a duration, either a Time with same accuracy or a number of seconds.
        """
        return Time(self.time_slot - self._slots_of(ts), accuracy=self.accuracy)

    def __repr__(self) -> str:
        return str(self.sec)
