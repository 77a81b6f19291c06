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

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Literal, TypedDict

from typing_extensions import NotRequired

from qnls.network.topology import ConfigurationError
from qnls.simulator import Event, Time

if TYPE_CHECKING:
    from qnls.models.epr import EntangledPair
    from qnls.network.network import QuantumNetwork


class RequestError(ConfigurationError):
    """
    Raised when a request description is malformed or does not fit the topology.
    """


SwapOrder = Literal["l2r", "r2l", "asap"] | list[str]
"""
Order in which relays perform swapping:

* "l2r": relays from source to destination, one at a time.
* "r2l": relays from destination to source, one at a time.
* "asap": any relay whose two adjacent segments are ready, concurrently.
* list of relay names: explicit order, one at a time.
"""


class RequestSpec(TypedDict):
    src: str
    """Source node name."""
    dst: str
    """Destination node name."""
    path: NotRequired[list[str]]
    """Node names from src to dst, defaults to [src, dst]."""
    fidelity_target: NotRequired[float | None]
    """Minimum end-to-end fidelity regarded as satisfying the request."""
    link_fidelity_target: NotRequired[float | None]
    """Purification threshold on each elementary link, defaults to fidelity_target."""
    purif_rounds: NotRequired[int]
    """Maximum purification rounds per elementary link, defaults to 0."""
    max_retries: NotRequired[int | None]
    """Path attempts allowed after the first one, None means unbounded; defaults to 3."""
    timeout: NotRequired[float | None]
    """Per path attempt timeout in seconds, None means none."""
    start_time: NotRequired[float]
    """Arrival time in seconds, defaults to 0."""
    swap_order: NotRequired[SwapOrder]
    """Swap order, defaults to the PathComposer default."""


class RequestState(Enum):
    PENDING = auto()
    IN_PROGRESS = auto()
    SATISFIED = auto()
    FAILED = auto()


class FailureReason(Enum):
    GENERATION_EXHAUSTED = auto()
    """Retry budget ran out after a link exceeded its attempt limit."""
    PATH_EXHAUSTED = auto()
    """Retry budget ran out after swap or purification failures or timeouts."""
    INCOMPLETE = auto()
    """Simulation ended while the request was in progress."""


@dataclass(eq=False)
class Segment:
    """
    Part of a path between path indices `left` and `right`, covered by at most one live pair
    (plus a second pair awaiting purification on an elementary segment).
    """

    left: int
    right: int
    pair: "EntangledPair|None" = None
    spare: "EntangledPair|None" = None
    generating: bool = False
    """Waiting for the link layer."""
    busy: bool = False
    """Pairs are claimed by a scheduled purification or swap."""
    purifying: bool = True
    """Elementary segment still eligible for purification."""
    op: Event | None = None
    """Scheduled purification or swap holding the pairs of this segment."""

    @property
    def ready(self) -> bool:
        """Holds one pair that is free to be swapped or delivered."""
        return (
            self.pair is not None and self.spare is None and not self.generating and not self.busy and not self.purifying
        )


@dataclass(eq=False)
class Request:
    """
    Demand for an end-to-end entangled pair along a fixed path.
    """

    request_id: int
    src: int
    dst: int
    path: list[int]
    """Node ids from src to dst."""
    links: list[int]
    """Link ids along the path; links[i] connects path[i] and path[i+1]."""
    fidelity_target: float | None = None
    link_fidelity_target: float | None = None
    purif_rounds: int = 0
    max_retries: int | None = 3
    timeout: float | None = None
    start_time: float = 0.0
    swap_order: list[int] | None = None
    """Relay path indices in swapping order, None means as soon as possible."""

    state: RequestState = RequestState.PENDING
    reason: FailureReason | None = None
    fidelity: float | None = None
    """Fidelity of the delivered pair."""
    started_at: Time | None = None
    completed_at: Time | None = None

    attempt: int = 0
    """1-based number of the current path attempt."""
    retries: int = 0
    gen_attempts: int = 0
    purif_ok: int = 0
    purif_fail: int = 0
    swap_ok: int = 0
    swap_fail: int = 0
    preemptions: int = 0
    """Path attempts abandoned to let an older request through a contended node."""

    segments: list[Segment] = field(default_factory=list)
    timeout_event: Event | None = None
    held_by: "Request|None" = None
    """Older request this one was preempted by; it resumes once that request completes."""

    @property
    def is_active(self) -> bool:
        return self.state == RequestState.IN_PROGRESS

    @property
    def is_finished(self) -> bool:
        return self.state in (RequestState.SATISFIED, RequestState.FAILED)

    @property
    def target_met(self) -> bool:
        return (
            self.state == RequestState.SATISFIED
            and self.fidelity is not None
            and (self.fidelity_target is None or self.fidelity >= self.fidelity_target)
        )

    def __repr__(self) -> str:
        return f"<request {self.request_id} {self.src}->{self.dst} {self.state.name}>"


def _check_fidelity(what: str, value: float | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not (isinstance(value, (int, float)) and 0.0 <= value <= 1.0):
        raise RequestError(f"{what} must be within [0,1], got {value}")


def make_request(
    network: "QuantumNetwork", spec: RequestSpec, request_id: int, *, default_swap_order: SwapOrder = "l2r"
) -> Request:
    """
    Validate a request description against the network and resolve names into ids.

    Raises:
        RequestError - request is malformed.
    """
    where = f"request {request_id}"
    src, dst = spec["src"], spec["dst"]
    if src == dst:
        raise RequestError(f"{where}: source and destination are both {src}")
    names = spec.get("path", [src, dst])
    if len(names) < 2 or names[0] != src or names[-1] != dst:
        raise RequestError(f"{where}: path {names} must run from {src} to {dst}")
    if len(set(names)) != len(names):
        raise RequestError(f"{where}: path {names} visits a node twice")

    try:
        path = [network.get_node(name).id for name in names]
    except IndexError as e:
        raise RequestError(f"{where}: {e}") from None
    links: list[int] = []
    for u, v in zip(path, path[1:]):
        try:
            links.append(network.get_link(u, v).id)
        except IndexError:
            raise RequestError(f"{where}: path edge {network.nodes[u].name}-{network.nodes[v].name} does not exist")
    for relay in path[1:-1]:
        if network.nodes[relay].capacity < 2:
            raise RequestError(f"{where}: relay {network.nodes[relay].name} needs memory capacity of at least 2")

    fidelity_target = spec.get("fidelity_target", None)
    _check_fidelity(f"{where}: fidelity_target", fidelity_target)
    link_fidelity_target = spec.get("link_fidelity_target", fidelity_target)
    _check_fidelity(f"{where}: link_fidelity_target", link_fidelity_target)

    purif_rounds = spec.get("purif_rounds", 0)
    if not isinstance(purif_rounds, int) or isinstance(purif_rounds, bool) or purif_rounds < 0:
        raise RequestError(f"{where}: purif_rounds must be a non-negative integer")
    max_retries = spec.get("max_retries", 3)
    if max_retries is not None and (not isinstance(max_retries, int) or max_retries < 0):
        raise RequestError(f"{where}: max_retries must be a non-negative integer or None")
    timeout = spec.get("timeout", None)
    if timeout is not None and not timeout > 0:
        raise RequestError(f"{where}: timeout must be positive")
    if purif_rounds > 0:
        # a purifying segment holds two pairs at each end, next to the pair of the adjacent segment at a relay
        for i, node in enumerate(path):
            need = 2 if i in (0, len(path) - 1) else 3
            if network.nodes[node].capacity < need:
                raise RequestError(f"{where}: purification needs memory capacity of at least {need} at {names[i]}")
    start_time = spec.get("start_time", 0.0)
    if not start_time >= 0:
        raise RequestError(f"{where}: start_time must be non-negative")

    order = spec.get("swap_order", default_swap_order)
    relays = list(range(1, len(path) - 1))
    match order:
        case "l2r":
            swap_order = relays
        case "r2l":
            swap_order = relays[::-1]
        case "asap":
            swap_order = None
        case list():
            index = {name: i for i, name in enumerate(names)}
            swap_order = [index.get(name, -1) for name in order]
            if sorted(swap_order) != relays:
                raise RequestError(f"{where}: swap order {order} must list each relay of {names[1:-1]} once")
        case _:
            raise RequestError(f"{where}: unknown swap order {order}")

    return Request(
        request_id,
        path[0],
        path[-1],
        path,
        links,
        fidelity_target=fidelity_target,
        link_fidelity_target=link_fidelity_target,
        purif_rounds=purif_rounds,
        max_retries=max_retries,
        timeout=timeout,
        start_time=start_time,
        swap_order=swap_order,
    )
