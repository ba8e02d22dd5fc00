"""
Simulation Engine - Monte Carlo aggregation of task outcomes

Each iteration draws one outcome per task, sums them into run totals and
buckets totals and per-task outcomes into frequency histograms. Histograms
are sized once up front from the tasks' worst-case bounds and never resized.

The engine can run synchronously, progressively under asyncio (one
cooperative yield per batch), or be stepped batch by batch from an external
scheduler through run_batch().
"""

import asyncio
import inspect
import math
import time
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union
import numpy as np
from loguru import logger

from ..estimates.bounds import BoundsCalculator, calculate_upper_bound
from ..estimates.outcome import OutcomeModel
from ..estimates.sampler import RandomSampler
from ..stats.models import ResultSummary
from ..utils.numbers import round_half_up
from .models import (
    DEFAULT_MAX_HISTOGRAM_CAPACITY, DEFAULT_PASSES, DEFAULT_PROGRESS_INTERVAL,
    EngineState, ProgressUpdate, SimulationConfig, SimulationRun, Task, TaskResult
)

ProgressCallback = Callable[[ProgressUpdate], Union[None, Awaitable[None]]]


class SimulationError(Exception):
    """Simulation error base class"""
    pass


class CapacityExceededError(SimulationError):
    """Histogram capacity above the configured ceiling"""

    def __init__(self, histogram: str, capacity: int, limit: int):
        self.histogram = histogram
        self.capacity = capacity
        self.limit = limit
        super().__init__(
            f"{histogram} histogram needs {capacity:,} buckets, "
            f"limit is {limit:,}"
        )


class SimulationCancelledError(SimulationError):
    """Run cancelled at a batch boundary"""
    pass


class SimulationStateError(SimulationError):
    """Operation not valid in the engine's current state"""
    pass


class HistogramAccumulator:
    """Fixed-capacity frequency histogram with running min/max"""

    def __init__(self, capacity: int):
        self.counts = np.zeros(capacity + 1, dtype=np.int64)
        self.min: Optional[int] = None
        self.max: Optional[int] = None

    def add(self, value: int) -> None:
        self.counts[value] += 1
        if self.min is None or value < self.min:
            self.min = value
        if self.max is None or value > self.max:
            self.max = value

    def summary(self) -> ResultSummary:
        return ResultSummary.from_histogram(self.counts, self.min, self.max)


class TaskAccumulator:
    """Time and cost histograms for one task"""

    def __init__(self, task: Task, time_capacity: int, cost_capacity: int):
        self.task = task
        self.times = HistogramAccumulator(time_capacity)
        self.costs = HistogramAccumulator(cost_capacity)

    def result(self) -> TaskResult:
        return TaskResult(
            task_id=self.task.id,
            name=self.task.name,
            times=self.times.summary(),
            costs=self.costs.summary()
        )


class SimulationEngine:
    """
    Monte Carlo Task Estimate Engine

    States: IDLE -> SIZING -> ITERATING -> (YIELDED <-> ITERATING)
            -> COMPILING -> DONE, or CANCELLED at a batch boundary.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        passes: int = DEFAULT_PASSES,
        hours_per_time_unit: float = 1.0,
        random_seed: Optional[int] = None,
        sampler: Optional[RandomSampler] = None,
        max_histogram_capacity: int = DEFAULT_MAX_HISTOGRAM_CAPACITY,
        record_outcomes: bool = False
    ):
        """
        Initialize Simulation Engine

        Args:
            tasks: Validated tasks, simulated in order
            passes: Number of simulation iterations
            hours_per_time_unit: Cost multiplier (1 for hours, 8 for days)
            random_seed: Seed for the default sampler
            sampler: Random source override (takes precedence over random_seed)
            max_histogram_capacity: Largest histogram the engine will allocate
            record_outcomes: Keep per-iteration per-task outcomes for drill-down
        """
        self.config = SimulationConfig(
            passes=max(0, int(passes)),
            hours_per_time_unit=float(hours_per_time_unit) if hours_per_time_unit else 1.0,
            random_seed=random_seed,
            max_histogram_capacity=max_histogram_capacity,
            record_outcomes=record_outcomes
        )
        self.outcome_model = OutcomeModel(sampler or RandomSampler(random_seed))

        self._tasks: List[Task] = list(tasks)
        self._state = EngineState.IDLE
        self._processed = 0
        self._start_time = 0.0
        self._times: Optional[HistogramAccumulator] = None
        self._costs: Optional[HistogramAccumulator] = None
        self._task_accumulators: List[TaskAccumulator] = []
        self._outcomes: Optional[List[Dict[str, Dict[str, float]]]] = None

        logger.info(
            f"SimulationEngine initialized: {len(self._tasks)} tasks, "
            f"{self.config.passes:,} passes, "
            f"hours/unit={self.config.hours_per_time_unit}, seed={random_seed}"
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def processed_passes(self) -> int:
        return self._processed

    @property
    def total_passes(self) -> int:
        return self.config.passes

    def _require_state(self, *allowed: EngineState) -> None:
        if self._state not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise SimulationStateError(
                f"Engine is {self._state.value}, expected one of: {names}"
            )

    def prepare(self) -> None:
        """
        Size and allocate all histograms

        Raises:
            CapacityExceededError: if any histogram would exceed the ceiling
        """
        self._require_state(EngineState.IDLE)
        self._state = EngineState.SIZING
        self._start_time = time.perf_counter()

        multiplier = self.config.hours_per_time_unit
        limit = self.config.max_histogram_capacity

        task_time_bounds = [
            math.ceil(BoundsCalculator.upper_bound(task.max, task.confidence))
            for task in self._tasks
        ]
        task_cost_bounds = [
            math.ceil(bound * task.hourly_cost * multiplier)
            for bound, task in zip(task_time_bounds, self._tasks)
        ]

        # Each task outcome is rounded before summing, so the sum of the
        # per-task ceilings can exceed the ceiling of the sum.
        time_capacity = max(math.ceil(calculate_upper_bound(self._tasks)), sum(task_time_bounds))
        cost_capacity = math.ceil(sum(
            bound * task.hourly_cost * multiplier
            for bound, task in zip(task_time_bounds, self._tasks)
        ))

        if time_capacity > limit:
            raise CapacityExceededError("time", time_capacity, limit)
        if cost_capacity > limit:
            raise CapacityExceededError("cost", cost_capacity, limit)

        logger.debug(
            f"Sizing histograms: time={time_capacity + 1:,} buckets, "
            f"cost={cost_capacity + 1:,} buckets"
        )

        self._times = HistogramAccumulator(time_capacity)
        self._costs = HistogramAccumulator(cost_capacity)
        self._task_accumulators = [
            TaskAccumulator(task, time_bound, cost_bound)
            for task, time_bound, cost_bound in zip(self._tasks, task_time_bounds, task_cost_bounds)
        ]
        self._outcomes = [] if self.config.record_outcomes else None
        self._processed = 0

        self._state = EngineState.ITERATING

    def _run_iteration(self) -> None:
        """Draw one outcome per task and bucket the run totals"""
        multiplier = self.config.hours_per_time_unit
        total_time = 0
        total_cost = 0.0
        outcome = {} if self._outcomes is not None else None

        for accumulator in self._task_accumulators:
            task = accumulator.task
            task_time = self.outcome_model.sample_outcome(task.min, task.max, task.confidence)
            task_cost = task_time * task.hourly_cost * multiplier
            total_time += task_time
            total_cost += task_cost

            accumulator.times.add(task_time)
            accumulator.costs.add(round_half_up(task_cost))
            if outcome is not None:
                outcome[task.id] = {"time": task_time, "cost": task_cost}

        self._times.add(total_time)
        self._costs.add(round_half_up(total_cost))
        if outcome is not None:
            self._outcomes.append(outcome)

    def _iterate(self, count: int) -> None:
        for _ in range(count):
            self._run_iteration()
        self._processed += count

    def run_batch(self, batch_size: int) -> ProgressUpdate:
        """
        Run up to batch_size iterations and report interim statistics

        Lets an external scheduler drive the engine one batch at a time.
        Prepares the engine on first use.

        Args:
            batch_size: Maximum number of iterations to run

        Returns:
            ProgressUpdate with histograms so far
        """
        if self._state == EngineState.IDLE:
            self.prepare()
        self._require_state(EngineState.ITERATING, EngineState.YIELDED)
        self._state = EngineState.ITERATING

        count = min(max(1, int(batch_size)), self.total_passes - self._processed)
        self._iterate(count)

        has_more = self._processed < self.total_passes
        update = ProgressUpdate(
            processed_passes=self._processed,
            total_passes=self.total_passes,
            has_more_batches=has_more,
            times=self._times.summary(),
            costs=self._costs.summary()
        )

        logger.debug(
            f"Batch complete: {self._processed:,}/{self.total_passes:,} passes, "
            f"time median={update.times.median}"
        )

        if has_more:
            self._state = EngineState.YIELDED
        return update

    def compile(self) -> SimulationRun:
        """
        Build final statistics once every pass has run

        Returns:
            SimulationRun owned by the caller
        """
        self._require_state(EngineState.ITERATING, EngineState.YIELDED)
        if self._processed < self.total_passes:
            raise SimulationStateError(
                f"Only {self._processed:,} of {self.total_passes:,} passes have run"
            )
        self._state = EngineState.COMPILING

        result = SimulationRun(
            config=self.config,
            passes=self._processed,
            times=self._times.summary(),
            costs=self._costs.summary(),
            task_results=[accumulator.result() for accumulator in self._task_accumulators],
            running_time_ms=(time.perf_counter() - self._start_time) * 1000,
            outcomes=self._outcomes
        )

        self._release()
        self._state = EngineState.DONE

        logger.info("=" * 60)
        logger.info("Monte Carlo Estimate Complete:")
        logger.info(f"  Passes: {result.passes:,} in {result.running_time_ms:,.0f} ms")
        logger.info(
            f"  Time: median={result.times.median:.1f}, sd={result.times.standard_deviation:.2f}, "
            f"likely {result.times.likely_min}-{result.times.likely_max}"
        )
        logger.info(
            f"  Cost: median={result.costs.median:,.1f}, sd={result.costs.standard_deviation:,.2f}, "
            f"likely {result.costs.likely_min:,}-{result.costs.likely_max:,}"
        )
        logger.info("=" * 60)

        return result

    def _release(self) -> None:
        """Drop histogram references once the run is over"""
        self._times = None
        self._costs = None
        self._task_accumulators = []
        self._outcomes = None

    def run(self) -> SimulationRun:
        """Run every pass in one uninterrupted loop"""
        self.prepare()
        self._iterate(self.total_passes)
        return self.compile()

    async def run_progressive(
        self,
        on_progress: Optional[ProgressCallback] = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        cancel_event: Optional[asyncio.Event] = None
    ) -> SimulationRun:
        """
        Run in batches, yielding to the event loop between them

        Args:
            on_progress: Called with a ProgressUpdate after each batch whose
                processed count is a multiple of the interval, and always
                after the final batch. Awaited when it returns an awaitable.
            progress_interval: Iterations per batch
            cancel_event: Checked at every batch boundary

        Returns:
            SimulationRun once every pass has run

        Raises:
            SimulationCancelledError: if cancel_event was set
        """
        interval = max(1, int(progress_interval))
        self.config = self.config.model_copy(update={"progress_interval": interval})
        self.prepare()

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._release()
                self._state = EngineState.CANCELLED
                logger.warning(
                    f"Simulation cancelled after {self._processed:,}/{self.total_passes:,} passes"
                )
                raise SimulationCancelledError(
                    f"Cancelled after {self._processed:,} of {self.total_passes:,} passes"
                )

            update = self.run_batch(interval)

            should_report = update.processed_passes % interval == 0 or not update.has_more_batches
            if on_progress is not None and should_report:
                outcome = on_progress(update)
                if inspect.isawaitable(outcome):
                    await outcome

            if not update.has_more_batches:
                break
            await asyncio.sleep(0)

        return self.compile()


def _normalize_interval(progress_interval) -> int:
    try:
        interval = int(progress_interval)
    except (TypeError, ValueError):
        interval = 0
    return max(1, interval or DEFAULT_PROGRESS_INTERVAL)


def run_simulation(
    passes: int,
    tasks: Sequence[Task],
    hours_per_time_unit: float = 1.0,
    sampler: Optional[RandomSampler] = None,
    random_seed: Optional[int] = None,
    max_histogram_capacity: int = DEFAULT_MAX_HISTOGRAM_CAPACITY,
    record_outcomes: bool = False
) -> SimulationRun:
    """Run a simulation synchronously"""
    engine = SimulationEngine(
        tasks,
        passes=passes,
        hours_per_time_unit=hours_per_time_unit,
        random_seed=random_seed,
        sampler=sampler,
        max_histogram_capacity=max_histogram_capacity,
        record_outcomes=record_outcomes
    )
    return engine.run()


async def run_simulation_progressive(
    passes: int,
    tasks: Sequence[Task],
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    hours_per_time_unit: float = 1.0,
    sampler: Optional[RandomSampler] = None,
    random_seed: Optional[int] = None,
    max_histogram_capacity: int = DEFAULT_MAX_HISTOGRAM_CAPACITY,
    record_outcomes: bool = False,
    cancel_event: Optional[asyncio.Event] = None
) -> SimulationRun:
    """
    Run a simulation in batches and report interim histograms

    Invalid intervals fall back to 1000 (zero or unparseable) or 1 (negative).
    """
    engine = SimulationEngine(
        tasks,
        passes=passes,
        hours_per_time_unit=hours_per_time_unit,
        random_seed=random_seed,
        sampler=sampler,
        max_histogram_capacity=max_histogram_capacity,
        record_outcomes=record_outcomes
    )
    return await engine.run_progressive(
        on_progress=on_progress,
        progress_interval=_normalize_interval(progress_interval),
        cancel_event=cancel_event
    )
