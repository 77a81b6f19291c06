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

import math
from abc import ABC, abstractmethod
from typing import TypedDict

from typing_extensions import Unpack

from qnls.entity.memory import QuantumMemory, QuantumMemoryInitKwargs
from qnls.entity.node import QNode
from qnls.entity.qchannel import QuantumLink, QuantumLinkInitKwargs


class ConfigurationError(ValueError):
    """
    Raised when simulation input is malformed. It is detected before any event is scheduled.
    """


class TopologyError(ConfigurationError):
    """
    Raised when a topology description is malformed.
    """


class TopologyInitKwargs(TypedDict, total=False):
    memory_args: QuantumMemoryInitKwargs
    link_args: QuantumLinkInitKwargs
    swap_prob: float


def _is_real(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_prob(what: str, value: float) -> None:
    if not (_is_real(value) and 0.0 <= value <= 1.0):
        raise TopologyError(f"{what} must be within [0,1], got {value}")


def _check_nonneg(what: str, value: float) -> None:
    if not (_is_real(value) and value >= 0.0 and not math.isinf(value)):
        raise TopologyError(f"{what} must be a finite non-negative number, got {value}")


class Topology(ABC):
    """Topology is a factory for QuantumNetwork"""

    def __init__(self, nodes_number: int, **kwargs: Unpack[TopologyInitKwargs]):
        """
        Args:
            nodes_number: the number of nodes.
            memory_args: default quantum memory arguments.
            link_args: default quantum link arguments.
            swap_prob: default swap success probability at each node.
        """
        self.nodes_number = nodes_number
        self.memory_args = kwargs.get("memory_args", {})
        self.link_args = kwargs.get("link_args", {})
        self.swap_prob = kwargs.get("swap_prob", 1.0)

    @abstractmethod
    def build(self) -> tuple[list[QNode], list[QuantumLink]]:
        """
        Build the topology.

        Returns:
            the list of QNodes and the list of QuantumLinks, where links refer to nodes by list index.

        Raises:
            TopologyError - topology is malformed.
        """
        pass

    def _make_node(self, name: str, memory_args: QuantumMemoryInitKwargs, swap_prob: float) -> QNode:
        capacity = memory_args.get("capacity", 1)
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise TopologyError(f"node {name}: memory capacity must be a positive integer, got {capacity}")
        _check_nonneg(f"node {name}: decay_rate", memory_args.get("decay_rate", 0.0))
        _check_prob(f"node {name}: swap_prob", swap_prob)
        return QNode(name, memory=QuantumMemory(f"{name}.memory", **memory_args), swap_prob=swap_prob)

    def _make_link(self, name: str, a: int, b: int, link_args: QuantumLinkInitKwargs) -> QuantumLink:
        if a == b:
            raise TopologyError(f"link {name}: self-loop")
        _check_prob(f"link {name}: loss_prob", link_args.get("loss_prob", 0.0))
        _check_prob(f"link {name}: base_fidelity", link_args.get("base_fidelity", 1.0))
        for key in ("length", "attempt_interval", "herald_delay"):
            _check_nonneg(f"link {name}: {key}", link_args.get(key, 0.0))
        max_attempts = link_args.get("max_attempts", None)
        if max_attempts is not None and (not isinstance(max_attempts, int) or max_attempts <= 0):
            raise TopologyError(f"link {name}: max_attempts must be a positive integer, got {max_attempts}")
        return QuantumLink(name, a, b, **link_args)
