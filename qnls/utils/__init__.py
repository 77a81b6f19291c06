from qnls.utils.json import json_default, json_encodable
from qnls.utils.logger import RequestFilter, log
from qnls.utils.random import FixedRng, make_rng, spawn_seeds
from qnls.utils.timeavg import TimeAverage
from qnls.utils.timeout import WallClockTimeout

__all__ = [
    "FixedRng",
    "RequestFilter",
    "TimeAverage",
    "WallClockTimeout",
    "json_default",
    "json_encodable",
    "log",
    "make_rng",
    "spawn_seeds",
]
