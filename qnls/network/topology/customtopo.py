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

from typing import TypedDict, cast

from typing_extensions import NotRequired, override

from qnls.entity.memory import QuantumMemoryInitKwargs
from qnls.entity.node import QNode
from qnls.entity.qchannel import QuantumLink, QuantumLinkInitKwargs
from qnls.network.topology.topo import Topology, TopologyError


class TopoQNode(TypedDict):
    name: str
    """Node name."""
    capacity: NotRequired[int]
    """Memory capacity, defaults to `memory_args` passed to CustomTopology constructor."""
    decay_rate: NotRequired[float]
    """Memory decay rate in 1/s, defaults to `memory_args` passed to CustomTopology constructor."""
    swap_prob: NotRequired[float]
    """Swap success probability at this node, defaults to `swap_prob` passed to CustomTopology constructor."""


class TopoQLink(QuantumLinkInitKwargs):
    node1: str
    """first node name"""
    node2: str
    """second node name"""


class Topo(TypedDict):
    nodes: list[TopoQNode]
    """
    List of quantum nodes.
    """
    links: list[TopoQLink]
    """
    List of quantum links.
    """


_LINK_KEYS = set(QuantumLinkInitKwargs.__annotations__.keys())


class CustomTopology(Topology):
    """
    CustomTopology builds a topology from a JSON-like dict structure.

    Nodes and links are individually specified and can have heterogeneous parameters.
    """

    def __init__(
        self,
        topo: Topo,
        *,
        memory_args: QuantumMemoryInitKwargs = {},
        link_args: QuantumLinkInitKwargs = {},
        swap_prob: float = 1.0,
    ):
        super().__init__(len(topo["nodes"]), memory_args=memory_args, link_args=link_args, swap_prob=swap_prob)
        self.topo = topo

    @override
    def build(self) -> tuple[list[QNode], list[QuantumLink]]:
        qnl: list[QNode] = []
        qll: list[QuantumLink] = []
        node_ids = dict[str, int]()

        for node in self.topo["nodes"]:
            name = node["name"]
            if name in node_ids:
                raise TopologyError(f"duplicate node name {name}")
            memory_args = cast(QuantumMemoryInitKwargs, dict(self.memory_args))
            if "capacity" in node:
                memory_args["capacity"] = node["capacity"]
            if "decay_rate" in node:
                memory_args["decay_rate"] = node["decay_rate"]
            node_ids[name] = len(qnl)
            qnl.append(self._make_node(name, memory_args, node.get("swap_prob", self.swap_prob)))

        seen = set[frozenset[int]]()
        for ch in self.topo["links"]:
            node1, node2 = ch["node1"], ch["node2"]
            for n in (node1, node2):
                if n not in node_ids:
                    raise TopologyError(f"link {node1}-{node2} refers to unknown node {n}")
            a, b = node_ids[node1], node_ids[node2]
            key = frozenset((a, b))
            if key in seen:
                raise TopologyError(f"duplicate link {node1}-{node2}")
            seen.add(key)

            link_args = cast(QuantumLinkInitKwargs, dict(self.link_args))
            link_args.update(cast(QuantumLinkInitKwargs, {k: v for k, v in ch.items() if k in _LINK_KEYS}))
            qll.append(self._make_link(f"{node1}-{node2}", a, b, link_args))

        return qnl, qll
