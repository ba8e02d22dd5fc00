#!/usr/bin/env python3
"""
Task Estimator - Main Entry Point

- Load task list from YAML configuration
- Run progressive Monte Carlo simulation
- Log total time and cost estimates
- Log per-task likely ranges
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from loguru import logger

from .simulation.models import (
    DEFAULT_MAX_HISTOGRAM_CAPACITY, DEFAULT_PASSES, DEFAULT_PROGRESS_INTERVAL, Task
)
from .utils.numbers import percent_to_fraction

# Configure logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="INFO"
)


def load_config(config_path: Optional[str] = None) -> dict:
    """Load configuration from YAML file"""
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / "config.yaml"

    if not os.path.exists(config_path):
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return {}

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    logger.info(f"Loaded configuration from {config_path}")
    return config


def load_tasks(config: dict) -> List[Task]:
    """
    Build validated tasks from the configuration's task list

    Confidence is given as a percentage (0-100) and converted to a fraction.

    Args:
        config: Parsed configuration dictionary

    Returns:
        List of Task objects in file order
    """
    tasks = []
    for i, row in enumerate(config.get("tasks") or [], 1):
        task = Task(
            id=str(row.get("id") or row.get("name") or i),
            name=str(row.get("name") or f"Task {i}"),
            min=row.get("min", 0),
            max=row.get("max", 0),
            confidence=percent_to_fraction(row.get("confidence", 90)),
            hourly_cost=row.get("cost", 0)
        )
        task.log_details()
        tasks.append(task)

    logger.info(f"Loaded {len(tasks)} tasks")
    return tasks


def run_estimate(
    passes: Optional[int] = None,
    progress_interval: Optional[int] = None,
    hours_per_time_unit: Optional[float] = None,
    random_seed: Optional[int] = None,
    config_path: Optional[str] = None
) -> Dict:
    """
    Run a complete estimate

    Args:
        passes: Number of Monte Carlo passes
        progress_interval: Passes between progress reports
        hours_per_time_unit: Cost multiplier override (1 for hours, 8 for days)
        random_seed: Seed for reproducible runs
        config_path: Path to configuration file

    Returns:
        Dictionary with the tasks, the simulation run and its summary
    """
    from .simulation import run_simulation_progressive

    config = load_config(config_path)
    sim_config = config.get("simulation", {}) or {}

    if passes is None:
        passes = sim_config.get("passes", DEFAULT_PASSES)
    if progress_interval is None:
        progress_interval = sim_config.get("progress_interval", DEFAULT_PROGRESS_INTERVAL)
    if hours_per_time_unit is None:
        hours_per_time_unit = sim_config.get("hours_per_time_unit", 1.0)
    if random_seed is None:
        random_seed = sim_config.get("random_seed")

    tasks = load_tasks(config)
    if not tasks:
        raise ValueError("No tasks configured")

    logger.info("=" * 70)
    logger.info("  Task Estimator")
    logger.info("=" * 70)
    logger.info(f"  Tasks: {len(tasks)}")
    logger.info(f"  Monte Carlo: {passes:,} passes, progress every {progress_interval:,}")
    logger.info(f"  Hours per time unit: {hours_per_time_unit}")
    logger.info("=" * 70)

    def report_progress(update) -> None:
        logger.info(
            f"  {update.fraction_complete:6.1%} | "
            f"time median {update.times.median:.1f} "
            f"(likely {update.times.likely_min}-{update.times.likely_max})"
        )

    simulation = asyncio.run(run_simulation_progressive(
        passes,
        tasks,
        on_progress=report_progress,
        progress_interval=progress_interval,
        hours_per_time_unit=hours_per_time_unit,
        random_seed=random_seed,
        max_histogram_capacity=sim_config.get("max_histogram_capacity", DEFAULT_MAX_HISTOGRAM_CAPACITY)
    ))

    summary = simulation.summary()

    logger.info("\n  Per-task likely ranges:")
    for task in tasks:
        ranges = summary["task_ranges"][task.id]
        logger.info(
            f"    {task.name}: time {ranges['time']['likely_min']}-{ranges['time']['likely_max']}, "
            f"cost {ranges['cost']['likely_min']:,}-{ranges['cost']['likely_max']:,}"
        )

    return {"tasks": tasks, "simulation": simulation, "summary": summary}


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Task Estimator - Monte Carlo estimates for task lists"
    )

    parser.add_argument(
        "--passes", "-p",
        type=int,
        default=None,
        help=f"Number of Monte Carlo passes (default: from config or {DEFAULT_PASSES})"
    )

    parser.add_argument(
        "--interval", "-i",
        type=int,
        default=None,
        help=f"Passes between progress reports (default: from config or {DEFAULT_PROGRESS_INTERVAL})"
    )

    parser.add_argument(
        "--hours-per-unit",
        type=float,
        default=None,
        help="Hours per time unit: 1 for hours, 8 for days (default: from config or 1)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible runs"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file (default: config/config.yaml)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        run_estimate(
            passes=args.passes,
            progress_interval=args.interval,
            hours_per_time_unit=args.hours_per_unit,
            random_seed=args.seed,
            config_path=args.config
        )

        return 0

    except KeyboardInterrupt:
        logger.info("\nEstimate cancelled by user")
        return 1

    except Exception as e:
        logger.exception(f"Estimate failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
