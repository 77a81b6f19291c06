from qnls.network.network import QuantumNetwork
from qnls.network.request import (
    FailureReason,
    Request,
    RequestError,
    RequestSpec,
    RequestState,
    Segment,
    SwapOrder,
    make_request,
)
from qnls.network.topology import ConfigurationError, CustomTopology, LinearTopology, Topo, Topology, TopologyError

__all__ = [
    "ConfigurationError",
    "CustomTopology",
    "FailureReason",
    "LinearTopology",
    "QuantumNetwork",
    "Request",
    "RequestError",
    "RequestSpec",
    "RequestState",
    "Segment",
    "SwapOrder",
    "Topo",
    "Topology",
    "TopologyError",
    "make_request",
]
