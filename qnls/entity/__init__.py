from qnls.entity.entity import Entity
from qnls.entity.memory import QuantumMemory, ResourceManager
from qnls.entity.node import Application, QNode
from qnls.entity.qchannel import QuantumLink

__all__ = [
    "Application",
    "Entity",
    "QNode",
    "QuantumLink",
    "QuantumMemory",
    "ResourceManager",
]
