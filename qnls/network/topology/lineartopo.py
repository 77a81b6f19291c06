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


from typing_extensions import override, Unpack

from qnls.entity.node import QNode
from qnls.entity.qchannel import QuantumLink
from qnls.network.topology.topo import Topology, TopologyError, TopologyInitKwargs


class LinearTopology(Topology):
    """
    LinearTopology is a chain of nodes named n1, n2, ..., with identical links between neighbors.
    """

    def __init__(self, nodes_number: int, **kwargs: Unpack[TopologyInitKwargs]):
        super().__init__(nodes_number, **kwargs)

    @override
    def build(self) -> tuple[list[QNode], list[QuantumLink]]:
        if self.nodes_number < 2:
            raise TopologyError("linear topology needs at least two nodes")
        qnl = [self._make_node(f"n{i + 1}", self.memory_args, self.swap_prob) for i in range(self.nodes_number)]
        qll = [self._make_link(f"n{i + 1}-n{i + 2}", i, i + 1, self.link_args) for i in range(self.nodes_number - 1)]
        return qnl, qll
