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

from collections import defaultdict
from typing import overload

from qnls.entity.memory import ResourceManager
from qnls.entity.node import Application, ApplicationT, QNode
from qnls.entity.qchannel import QuantumLink
from qnls.network.topology import Topology
from qnls.simulator import Simulator


class QuantumNetwork:
    """
    QuantumNetwork holds quantum nodes and links arranged in a given topology, plus the protocol engines.

    Nodes and links are stored in lists and addressed by their integer ids.
    The shape of the network is fixed once installed.
    """

    def __init__(self, topo: Topology | None = None, *, apps: list[Application] | None = None):
        """
        Args:
            topo: topology builder.
            apps: protocol engines, e.g. LinkLayer and PathComposer.
        """
        self.nodes: list[QNode] = []
        """List of quantum nodes, indexed by node id."""
        self._node_by_name: dict[str, QNode] = {}
        self.links: list[QuantumLink] = []
        """List of quantum links, indexed by link id."""
        self._link_by_ends: dict[tuple[int, int], QuantumLink] = {}
        self.apps: list[Application] = [] if apps is None else apps
        self._app_by_type = dict[type, Application]()
        self.resources = ResourceManager(self.nodes)
        """Slot and pair bookkeeping for every node memory."""

        if topo is not None:
            nodes, links = topo.build()
            for node in nodes:
                self.add_node(node)
            for link in links:
                self.add_link(link)

    def _ensure_not_installed(self) -> None:
        assert not hasattr(self, "simulator"), "function only available prior to self.install()"

    def install(self, simulator: Simulator):
        """
        Install all nodes, links and applications in this network.
        """
        self.simulator = simulator
        """Simulator instance."""

        self.resources.install(simulator)
        for node in self.nodes:
            node.install(simulator)
        for link in self.links:
            link.install(simulator)

        apps_by_type = defaultdict[type, list[Application]](lambda: [])
        for app in self.apps:
            apps_by_type[type(app)].append(app)
            app.install(self, simulator)
        for typ, apps in apps_by_type.items():
            if len(apps) == 1:
                self._app_by_type[typ] = apps[0]

    def reset_counters(self) -> None:
        """
        Restart memory, link and application counters and time averages from the current time.
        """
        for node in self.nodes:
            node.memory.reset_counters()
        for link in self.links:
            link.reset_counters()
        for app in self.apps:
            app.reset_counters()

    def add_node(self, node: QNode) -> QNode:
        """
        Add a QNode into this network, assigning its id.
        """
        self._ensure_not_installed()
        assert node.name not in self._node_by_name, f"duplicate node name {node.name}"
        node.id = len(self.nodes)
        self.nodes.append(node)
        self._node_by_name[node.name] = node
        return node

    def add_link(self, link: QuantumLink) -> QuantumLink:
        """
        Add a QuantumLink into this network, assigning its id.
        Its endpoints must already be in the network.
        """
        self._ensure_not_installed()
        assert 0 <= link.a < len(self.nodes) and 0 <= link.b < len(self.nodes)
        key = (min(link.a, link.b), max(link.a, link.b))
        assert key not in self._link_by_ends, f"duplicate link {link.name}"
        link.id = len(self.links)
        self.links.append(link)
        self._link_by_ends[key] = link
        self.nodes[link.a].links.append(link.id)
        self.nodes[link.b].links.append(link.id)
        return link

    @overload
    def get_node(self, key: str, /) -> QNode:
        pass

    @overload
    def get_node(self, key: int, /) -> QNode:
        pass

    def get_node(self, key: str | int) -> QNode:
        """
        Get QNode by name or id.

        Raises:
            IndexError - node does not exist.
        """
        if isinstance(key, int):
            if not 0 <= key < len(self.nodes):
                raise IndexError(f"node {key} does not exist")
            return self.nodes[key]
        try:
            return self._node_by_name[key]
        except KeyError:
            raise IndexError(f"node {key} does not exist")

    def get_link(self, a: int | str, b: int | str) -> QuantumLink:
        """
        Retrieve the link between two nodes, given by id or name.

        Raises:
            IndexError - link does not exist.
        """
        u, v = self.get_node(a).id, self.get_node(b).id
        try:
            return self._link_by_ends[(min(u, v), max(u, v))]
        except KeyError:
            raise IndexError(f"link between {a} and {b} does not exist")

    def neighbors(self, node: int) -> list[int]:
        """Ids of nodes adjacent to a node."""
        return [self.links[lid].b if self.links[lid].a == node else self.links[lid].a for lid in self.nodes[node].links]

    def add_app(self, app: Application) -> None:
        """Add a protocol engine. Available prior to calling .install()."""
        self._ensure_not_installed()
        self.apps.append(app)

    def get_apps(self, app_type: type[ApplicationT]) -> list[ApplicationT]:
        """Retrieve applications of given type."""
        return [app for app in self.apps if isinstance(app, app_type)]

    def get_app(self, app_type: type[ApplicationT]) -> ApplicationT:
        """
        Retrieve an application of given type.
        There must be exactly one instance of this application.

        Raises:
            IndexError - application does not exist, or there are multiple instances.
        """
        try:
            app = self._app_by_type[app_type]
        except KeyError:
            apps = self.get_apps(app_type)
            if len(apps) != 1:
                raise IndexError(f"network has {len(apps)} instances of {app_type}")
            app = apps[0]
        assert isinstance(app, app_type)
        return app
