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

from abc import ABC
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qnls.simulator import Event, Simulator


class Entity(ABC):
    """
    Basic entity class.

    Examples of entities include memories, links, nodes, and the statistics collector.
    """

    def __init__(self, name: str):
        """
        Args:
            name: the name of this entity.
        """
        self.name = name
        self._simulator: "Simulator|None" = None

    @property
    def simulator(self) -> "Simulator":
        """
        Return the Simulator that this entity belongs to.

        Raises:
            IndexError - simulator does not exist
        """
        if self._simulator is None:
            raise IndexError(f"{self} is not in a simulator")
        return self._simulator

    def install(self, simulator: "Simulator") -> None:
        """
        Initialize the entity and schedule initial events.
        This must be invoked before `simulator.run()`.
        """
        assert self._simulator is None or self._simulator is simulator
        assert not simulator.running
        self._simulator = simulator

    def handle(self, event: "Event") -> None:
        """
        Process a received event.
        Entities that merely hold state do not receive events.
        """
        raise TypeError(f"{self} cannot handle {event}")

    def __repr__(self) -> str:
        return f"<entity {self.name}>"
