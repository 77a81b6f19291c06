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

from typing import TYPE_CHECKING, Any, final

from typing_extensions import override

from qnls.simulator import Event, Time

if TYPE_CHECKING:
    from qnls.entity.node import Application
    from qnls.entity.qchannel import QuantumLink
    from qnls.models.epr import EntangledPair
    from qnls.network.protocol.purification import PurificationRequester
    from qnls.network.protocol.swapping import SwapRequester
    from qnls.network.request import Request


class ProtocolEvent(Event):
    """
    Event addressed to a protocol engine.
    """

    def __init__(self, app: "Application", *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(t, name, by)
        self.app = app

    @override
    def invoke(self) -> None:
        self.app.handle(self)


@final
class AttemptEntanglement(ProtocolEvent):
    """
    Event in LinkLayer to make one optical attempt on a link.
    """

    def __init__(self, app: "Application", link: "QuantumLink", *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(app, t=t, name=name, by=by)
        self.link = link


@final
class HeraldResult(ProtocolEvent):
    """
    Event in LinkLayer that delivers the herald of a successful attempt.
    """

    def __init__(
        self,
        app: "Application",
        link: "QuantumLink",
        pair: "EntangledPair",
        *,
        attempts: int,
        t: Time,
        name: str | None = None,
        by: Any = None,
    ):
        super().__init__(app, t=t, name=name, by=by)
        self.link = link
        self.pair = pair
        self.attempts = attempts


@final
class PurificationAttempt(ProtocolEvent):
    """
    Event in PurificationEngine to distill two pairs.
    """

    def __init__(
        self,
        app: "Application",
        keep: "EntangledPair",
        sacrifice: "EntangledPair",
        *,
        requester: "PurificationRequester",
        tag: Any,
        t: Time,
        name: str | None = None,
        by: Any = None,
    ):
        super().__init__(app, t=t, name=name, by=by)
        self.keep = keep
        self.sacrifice = sacrifice
        self.requester = requester
        self.tag = tag


@final
class SwapAttempt(ProtocolEvent):
    """
    Event in SwappingEngine to join two pairs at a relay node.
    """

    def __init__(
        self,
        app: "Application",
        relay: int,
        left: "EntangledPair",
        right: "EntangledPair",
        *,
        requester: "SwapRequester",
        tag: Any,
        t: Time,
        name: str | None = None,
        by: Any = None,
    ):
        super().__init__(app, t=t, name=name, by=by)
        self.relay = relay
        self.left = left
        self.right = right
        self.requester = requester
        self.tag = tag


@final
class RequestStart(ProtocolEvent):
    """
    Event in PathComposer to begin serving a request.
    """

    def __init__(self, app: "Application", request: "Request", *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(app, t=t, name=name, by=by)
        self.request = request


@final
class RequestTimeout(ProtocolEvent):
    """
    Event in PathComposer that fires when a path attempt takes too long.
    """

    def __init__(
        self, app: "Application", request: "Request", *, attempt: int, t: Time, name: str | None = None, by: Any = None
    ):
        super().__init__(app, t=t, name=name, by=by)
        self.request = request
        self.attempt = attempt


@final
class RequestCompleted(ProtocolEvent):
    """
    Event emitted by PathComposer when a request reaches a terminal state.
    Statistics collectors observe it through `Simulator.watch_event`.
    """

    def __init__(self, app: "Application", request: "Request", *, t: Time, name: str | None = None, by: Any = None):
        super().__init__(app, t=t, name=name, by=by)
        self.request = request
