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

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, TypedDict

from typing_extensions import override, Unpack

from qnls.entity.entity import Entity
from qnls.utils import json_encodable

if TYPE_CHECKING:
    from qnls.models.epr import EntangledPair
    from qnls.network.protocol.link_layer import GenerationRequester
    from qnls.simulator import Event


class LinkState(Enum):
    IDLE = auto()
    """No generation attempt in progress."""
    ATTEMPTING = auto()
    """Attempts are being made for the current job."""
    HERALDED = auto()
    """An attempt succeeded and the herald is in flight."""


class QuantumLinkInitKwargs(TypedDict, total=False):
    loss_prob: float
    """Probability that a single attempt fails."""
    base_fidelity: float
    """Fidelity of a freshly generated pair."""
    length: float
    """Physical length in kilometers, informational."""
    attempt_interval: float
    """Delay between successive attempts in seconds."""
    herald_delay: float
    """Delay from a successful attempt to its herald in seconds."""
    max_attempts: int | None
    """Optical attempts allowed per job, None means unbounded."""


@dataclass
class GenerationJob:
    requester: "GenerationRequester"
    tag: Any


@json_encodable
class LinkCounters:
    def __init__(self):
        self.n_attempts = 0
        """how many optical attempts were made"""
        self.n_success = 0
        """how many attempts succeeded and produced a pair"""
        self.n_alloc_fail = 0
        """how many successful attempts were deferred for lack of memory"""
        self.n_exhausted = 0
        """how many jobs ended with attempts exhausted"""
        self.n_jobs = 0
        """how many jobs were started"""
        self.n_canceled = 0
        """how many jobs were canceled by their requester"""

    @property
    def success_rate(self) -> float:
        return 0.0 if self.n_attempts == 0 else self.n_success / self.n_attempts

    def __repr__(self) -> str:
        return (
            f"attempts={self.n_attempts} success={self.n_success} alloc_fail={self.n_alloc_fail} "
            f"exhausted={self.n_exhausted} jobs={self.n_jobs} canceled={self.n_canceled}"
        )


class QuantumLink(Entity):
    """
    Quantum link between two adjacent nodes, over which elementary pairs are generated.

    At most one generation attempt is in flight on a link; further requests wait in a FIFO queue.
    """

    def __init__(self, name: str, a: int, b: int, **kwargs: Unpack[QuantumLinkInitKwargs]):
        """
        Args:
            name: link name.
            a: node id of one endpoint.
            b: node id of the other endpoint.
        """
        super().__init__(name=name)
        self.id = -1
        """Index in QuantumNetwork.links, assigned by QuantumNetwork.add_link()."""
        self.a = a
        self.b = b
        self.loss_prob = kwargs.get("loss_prob", 0.0)
        self.base_fidelity = kwargs.get("base_fidelity", 1.0)
        self.length = kwargs.get("length", 0.0)
        self.attempt_interval = kwargs.get("attempt_interval", 0.0)
        self.herald_delay = kwargs.get("herald_delay", 0.0)
        self.max_attempts = kwargs.get("max_attempts", None)

        self.state = LinkState.IDLE
        self.queue = deque[GenerationJob]()
        """Jobs waiting for the link to become idle."""
        self.job: GenerationJob | None = None
        """Job being served."""
        self.attempts = 0
        """Optical attempts made for the current job."""
        self.pending_event: "Event|None" = None
        """Next scheduled attempt or herald of the current job."""
        self.pending_pair: "EntangledPair|None" = None
        """Pair whose herald is in flight."""
        self.cnt = LinkCounters()

    @property
    def success_prob(self) -> float:
        return 1.0 - self.loss_prob

    @property
    def endpoints(self) -> tuple[int, int]:
        return (self.a, self.b)

    def connects(self, u: int, v: int) -> bool:
        return {u, v} == {self.a, self.b}

    def reset_counters(self) -> None:
        self.cnt = LinkCounters()

    @override
    def __repr__(self) -> str:
        return f"<link {self.name}>"
