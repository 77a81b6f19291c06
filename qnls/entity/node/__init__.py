from qnls.entity.node.app import Application, ApplicationT
from qnls.entity.node.qnode import QNode

__all__ = [
    "Application",
    "ApplicationT",
    "QNode",
]
