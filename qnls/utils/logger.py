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

import os
import sys
from logging import Filter, Logger, LoggerAdapter, LogRecord, StreamHandler, getLogger
from typing import TYPE_CHECKING, Literal, cast

from typing_extensions import override

if TYPE_CHECKING:
    from qnls.simulator import Simulator


class SimLogAdapter(LoggerAdapter):
    """
    Logger that stamps each entry with the simulation time and, when given, the request it concerns.

    Pass ``extra={"request": request}`` to tag an entry with a request.
    The context is also set on the log record as ``sim_time`` (seconds) and ``request_id``,
    so that handlers and filters can pick it up, e.g. ``RequestFilter``.
    """

    def __init__(self, logger: Logger):
        super().__init__(logger)
        self._simulator: "Simulator|None" = None

    @override
    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        request = extra.pop("request", None)
        prefix = ""
        if self._simulator:
            tc = self._simulator.tc
            extra["sim_time"] = tc.sec
            prefix = f"[{tc}] "
        if request is not None:
            extra["request_id"] = request.request_id
            prefix += f"{request}: "
        kwargs["extra"] = extra
        return f"{prefix}{msg}", kwargs

    def install(self, simulator: "Simulator|None"):
        """
        Prepend simulator timestamp to log entries.
        Passing None detaches the simulator.
        """
        self._simulator = simulator

    def set_default_level(self, dflt_level: Literal["CRITICAL", "FATAL", "ERROR", "WARN", "INFO", "DEBUG"]):
        """
        Configure logging level.

        If `QNLS_LOGLVL` environment variable contains a valid log level, it is used.
        Otherwise, `dflt_level` is used as the logging level.
        """
        try:
            self.setLevel(os.getenv("QNLS_LOGLVL", dflt_level))
        except ValueError:  # QNLS_LOGLVL is not a valid level
            self.setLevel(dflt_level)


class RequestFilter(Filter):
    """
    Pass only entries tagged with one request, e.g. to trace a single request through a long run::

        handler.addFilter(RequestFilter(7))
    """

    def __init__(self, request_id: int):
        super().__init__()
        self.request_id = request_id

    @override
    def filter(self, record: LogRecord) -> bool:
        return getattr(record, "request_id", None) == self.request_id


log = SimLogAdapter(getLogger("qnls"))
"""
The default ``logger`` used by QNLS.
"""

log.set_default_level("INFO")
cast(Logger, log.logger).addHandler(StreamHandler(sys.stdout))
