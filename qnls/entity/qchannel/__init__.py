from qnls.entity.qchannel.qchannel import GenerationJob, LinkCounters, LinkState, QuantumLink, QuantumLinkInitKwargs

__all__ = [
    "GenerationJob",
    "LinkCounters",
    "LinkState",
    "QuantumLink",
    "QuantumLinkInitKwargs",
]
