from qnls.simulation import (
    ProgressEvent,
    Simulation,
    SimulationConfig,
    SimulationResult,
    run_replications,
    run_simulation,
)

__all__ = [
    "ProgressEvent",
    "Simulation",
    "SimulationConfig",
    "SimulationResult",
    "run_replications",
    "run_simulation",
]
