"""High-level entry points used by the UI and callers."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from time import perf_counter
from typing import Any, Final, Optional

from .analysis import summarize_runs
from .cost import MarketPrices
from .data import DEFAULT_TABLE, ProbabilityTable
from .models import (
    DEFAULT_CONFIG,
    MonteCarloSummary,
    ResourceLimits,
    SimulationConfig,
    SimulationResult,
)
from .simulation import ProgressFn, StopFn, run_recorded, simulate_many

logger = logging.getLogger(__name__)

DEFAULT_RUNS: Final[int] = 10_000


def make_config(**overrides: Any) -> SimulationConfig:
    """Return ``DEFAULT_CONFIG`` with the given fields replaced.

    ``prices`` may be a :class:`MarketPrices` or a partial mapping of price
    names. The result is validated.

    Raises
    ------
    ValueError
        If the resulting configuration is invalid.
    """

    prices = overrides.pop("prices", None)
    if prices is not None and not isinstance(prices, MarketPrices):
        prices = MarketPrices.from_mapping(dict(prices))
    if prices is not None:
        overrides["prices"] = prices
    config = replace(DEFAULT_CONFIG, **overrides)
    config.validate()
    return config


def simulate_single(
    config: SimulationConfig,
    seed: Optional[int] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> SimulationResult:
    """Run one simulation with its full step history for replay."""

    return run_recorded(config, seed, table)


def run_monte_carlo(
    config: SimulationConfig,
    runs: int = DEFAULT_RUNS,
    seed: Optional[int] = 42,
    limits: Optional[ResourceLimits] = None,
    processes: int = 1,
    progress: Optional[ProgressFn] = None,
    should_stop: Optional[StopFn] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> MonteCarloSummary:
    """Run a Monte Carlo batch and aggregate the per-run totals.

    Parameters
    ----------
    config:
        Configuration shared by every run.
    runs:
        Number of independent runs to execute.
    seed:
        Master seed; the same seed always yields the same summary.
    limits:
        Optional resource caps. Runs that hit a cap count as failures and keep
        the cost they had accrued.
    processes:
        Worker processes used for the batch.
    progress:
        Optional callback receiving the completed percentage.
    should_stop:
        Optional cancellation check polled between runs.
    table:
        Probability rules to apply.

    Returns
    -------
    MonteCarloSummary
        Aggregated statistics over the completed runs.
    """

    compute_start = perf_counter()
    results = simulate_many(
        config,
        runs=runs,
        seed=seed,
        limits=limits,
        processes=processes,
        progress=progress,
        should_stop=should_stop,
        table=table,
    )
    summary = summarize_runs(results, config.target_level)
    summary.compute_seconds = perf_counter() - compute_start
    logger.info(
        "Monte Carlo %d runs to +%d: success %.2f%%, median silver %.0f (%.2fs)",
        summary.num_simulations,
        config.target_level,
        summary.success_rate * 100,
        summary.silver.p50,
        summary.compute_seconds,
    )
    return summary


def format_number(num: float) -> str:
    """Format large numbers with K/M/B suffixes."""

    if math.isinf(num):
        return "∞"
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.1f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return f"{num:.0f}"


def format_silver(silver: float) -> str:
    return f"{format_number(silver)} Silver"
