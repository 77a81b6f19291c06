#    Modified by Amar Abane for Multiverse Quantum Network Simulator
#    Date: 05/17/2025
#    Summary of changes: Adapted logic to support dynamic approaches.
#
#    This file is based on a snapshot of SimQN (https://github.com/QNLab-USTC/SimQN),
#    which is licensed under the GNU General Public License v3.0.
#
#    The original SimQN header is included below.


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


from typing_extensions import override

from qnls.entity.entity import Entity
from qnls.entity.memory import QuantumMemory
from qnls.simulator import Simulator


class QNode(Entity):
    """QNode is a quantum node in the quantum network, owning a quantum memory."""

    def __init__(self, name: str, *, memory: QuantumMemory, swap_prob: float = 1.0):
        """
        Args:
            name: node name.
            memory: quantum memory of this node.
            swap_prob: probability that an entanglement swap performed at this node succeeds.
        """
        super().__init__(name=name)
        assert 0.0 <= swap_prob <= 1.0
        self.id = -1
        """Index in QuantumNetwork.nodes, assigned by QuantumNetwork.add_node()."""
        self.memory = memory
        self.swap_prob = swap_prob
        self.links: list[int] = []
        """Ids of links incident on this node."""

    @property
    def capacity(self) -> int:
        return self.memory.capacity

    @property
    def decay_rate(self) -> float:
        return self.memory.decay_rate

    @override
    def install(self, simulator: Simulator) -> None:
        """Called from QuantumNetwork.install()"""
        super().install(simulator)
        self.memory.install(simulator)

    @override
    def __repr__(self) -> str:
        return f"<qnode {self.name}>"
