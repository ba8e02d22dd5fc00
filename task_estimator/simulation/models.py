"""
Data models for the simulation engine
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from loguru import logger

from ..stats.models import ResultSummary

DEFAULT_PASSES = 10000
DEFAULT_PROGRESS_INTERVAL = 1000
DEFAULT_MAX_HISTOGRAM_CAPACITY = 10_000_000


class EngineState(str, Enum):
    IDLE = "idle"
    SIZING = "sizing"
    ITERATING = "iterating"
    YIELDED = "yielded"
    COMPILING = "compiling"
    DONE = "done"
    CANCELLED = "cancelled"


class Task(BaseModel):
    """A single estimated task"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique task identifier (defaults to name)")
    name: str = Field(..., description="Task name")
    min: float = Field(..., ge=0, description="Minimum estimate in time units")
    max: float = Field(..., ge=0, description="Maximum estimate in time units")
    confidence: float = Field(..., ge=0, le=1, description="Probability (0-1) the outcome is within [min, max]")
    hourly_cost: float = Field(default=0.0, ge=0, description="Cost per hour of work")

    @model_validator(mode="before")
    @classmethod
    def _default_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id") and data.get("name"):
            data = {**data, "id": str(data["name"])}
        return data

    @model_validator(mode="after")
    def _check_range(self) -> "Task":
        if self.max < self.min:
            raise ValueError(f"max ({self.max}) must not be less than min ({self.min})")
        return self

    def log_details(self) -> None:
        """Log task details for debugging"""
        logger.debug(
            f"Task: {self.id} | {self.name} | "
            f"Range: {self.min}-{self.max} | Confidence: {self.confidence:.0%} | "
            f"Cost/h: {self.hourly_cost:.2f}"
        )


class SimulationConfig(BaseModel):
    """Configuration for a simulation run"""
    passes: int = Field(default=DEFAULT_PASSES, ge=0)
    progress_interval: int = Field(default=DEFAULT_PROGRESS_INTERVAL, ge=1)
    hours_per_time_unit: float = Field(default=1.0, gt=0, description="1 for hours mode, 8 for days mode")
    random_seed: Optional[int] = Field(default=None)
    max_histogram_capacity: int = Field(default=DEFAULT_MAX_HISTOGRAM_CAPACITY, ge=1)
    record_outcomes: bool = Field(default=False, description="Keep every iteration's per-task outcomes")


class TaskResult(BaseModel):
    """Per-task outcome distribution"""
    task_id: str
    name: str
    times: ResultSummary
    costs: ResultSummary


class ProgressUpdate(BaseModel):
    """Interim state reported after a batch"""
    processed_passes: int
    total_passes: int
    has_more_batches: bool
    times: ResultSummary
    costs: ResultSummary

    @property
    def fraction_complete(self) -> float:
        if self.total_passes == 0:
            return 1.0
        return self.processed_passes / self.total_passes


class SimulationRun(BaseModel):
    """Complete results of a simulation run"""
    config: SimulationConfig = Field(default_factory=SimulationConfig)
    passes: int = Field(default=0, description="Iterations actually executed")
    times: ResultSummary = Field(default_factory=ResultSummary)
    costs: ResultSummary = Field(default_factory=ResultSummary)
    task_results: List[TaskResult] = Field(default_factory=list)
    running_time_ms: float = Field(default=0.0, description="Wall clock time of the run")
    outcomes: Optional[List[Dict[str, Dict[str, float]]]] = Field(
        default=None,
        description="Per-iteration outcomes: [iteration] -> task_id -> {time, cost}"
    )

    def task_result(self, task_id: str) -> Optional[TaskResult]:
        """Look up a task's result by id"""
        for result in self.task_results:
            if result.task_id == task_id:
                return result
        return None

    def summary(self) -> Dict:
        """Get summary dictionary"""
        return {
            "passes": self.passes,
            "running_time_ms": round(self.running_time_ms, 1),
            "time_median": round(self.times.median, 2),
            "time_std_dev": round(self.times.standard_deviation, 2),
            "time_likely_range": (self.times.likely_min, self.times.likely_max),
            "cost_median": round(self.costs.median, 2),
            "cost_std_dev": round(self.costs.standard_deviation, 2),
            "cost_likely_range": (self.costs.likely_min, self.costs.likely_max),
            "tasks": len(self.task_results),
            "task_ranges": {
                result.task_id: {"time": result.times.to_dict(), "cost": result.costs.to_dict()}
                for result in self.task_results
            },
        }
