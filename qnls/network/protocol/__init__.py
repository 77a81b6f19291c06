from qnls.network.protocol.composer import PathComposer, SegmentTag, SwapTag
from qnls.network.protocol.event import (
    AttemptEntanglement,
    HeraldResult,
    ProtocolEvent,
    PurificationAttempt,
    RequestCompleted,
    RequestStart,
    RequestTimeout,
    SwapAttempt,
)
from qnls.network.protocol.link_layer import GenerationRequester, LinkLayer
from qnls.network.protocol.purification import (
    PurificationCounters,
    PurificationEngine,
    PurificationRequester,
    PurificationResult,
)
from qnls.network.protocol.swapping import SwapCounters, SwappingEngine, SwapRequester, SwapResult

__all__ = [
    "AttemptEntanglement",
    "GenerationRequester",
    "HeraldResult",
    "LinkLayer",
    "PathComposer",
    "ProtocolEvent",
    "PurificationAttempt",
    "PurificationCounters",
    "PurificationEngine",
    "PurificationRequester",
    "PurificationResult",
    "RequestCompleted",
    "RequestStart",
    "RequestTimeout",
    "SegmentTag",
    "SwapAttempt",
    "SwapCounters",
    "SwapRequester",
    "SwapResult",
    "SwapTag",
    "SwappingEngine",
]
