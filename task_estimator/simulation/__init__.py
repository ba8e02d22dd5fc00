"""
Monte Carlo Simulation Module
"""

from .engine import (
    SimulationEngine,
    SimulationError,
    CapacityExceededError,
    SimulationCancelledError,
    SimulationStateError,
    run_simulation,
    run_simulation_progressive,
)
from .models import (
    EngineState,
    Task,
    SimulationConfig,
    SimulationRun,
    TaskResult,
    ProgressUpdate,
)

__all__ = [
    # Engine
    "SimulationEngine",
    "run_simulation",
    "run_simulation_progressive",
    # Errors
    "SimulationError",
    "CapacityExceededError",
    "SimulationCancelledError",
    "SimulationStateError",
    # Models
    "EngineState",
    "Task",
    "SimulationConfig",
    "SimulationRun",
    "TaskResult",
    "ProgressUpdate",
]
