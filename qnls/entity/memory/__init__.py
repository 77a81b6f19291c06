from qnls.entity.memory.manager import ResourceManager
from qnls.entity.memory.memory import MemoryCounters, QuantumMemory, QuantumMemoryInitKwargs
from qnls.entity.memory.memory_slot import MemorySlot, SlotState

__all__ = [
    "MemoryCounters",
    "MemorySlot",
    "QuantumMemory",
    "QuantumMemoryInitKwargs",
    "ResourceManager",
    "SlotState",
]

for name in __all__:
    globals()[name].__module__ = __name__
