"""Order statistics, histograms and survival curves over Monte Carlo batches."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Final

import numpy as np

from .models import (
    Distribution,
    DistributionStats,
    FastRunResult,
    HistogramBucket,
    MonteCarloSummary,
    PercentileStats,
    SurvivalPoint,
)

HISTOGRAM_BUCKETS: Final[int] = 20
SURVIVAL_POINTS: Final[int] = 50


def percentile(sorted_values: Sequence[float] | np.ndarray, p: float) -> float:
    """Return the value at index ``floor(N * p)`` clamped to ``N - 1``.

    The index is not interpolated so fixtures stay reproducible. An empty
    population yields ``0``.
    """

    n = len(sorted_values)
    if n == 0:
        return 0.0
    index = min(int(math.floor(n * p)), n - 1)
    return float(sorted_values[index])


def percentile_stats(values: Sequence[float] | np.ndarray) -> PercentileStats:
    """Sort ``values`` and return mean, p50, p90, p99 and the worst case."""

    population = np.sort(np.asarray(values, dtype=np.float64))
    if population.size == 0:
        return PercentileStats()
    return PercentileStats(
        average=float(population.mean()),
        p50=percentile(population, 0.5),
        p90=percentile(population, 0.9),
        p99=percentile(population, 0.99),
        worst=float(population[-1]),
    )


def build_histogram(
    sorted_values: Sequence[float] | np.ndarray,
    bucket_count: int = HISTOGRAM_BUCKETS,
) -> tuple[list[HistogramBucket], DistributionStats]:
    """Split ``[min, max]`` into equal-width buckets and count the population.

    Parameters
    ----------
    sorted_values:
        Population sorted ascending.
    bucket_count:
        Number of buckets. When every value is equal the bucket width is 1.

    Returns
    -------
    tuple[list[HistogramBucket], DistributionStats]
        Buckets with count, percentage and cumulative figures, plus the
        population's min, max and mean.
    """

    if bucket_count <= 0:
        raise ValueError("bucket_count must be positive.")
    population = np.asarray(sorted_values, dtype=np.float64)
    n = population.size
    if n == 0:
        return [], DistributionStats()

    low = float(population[0])
    high = float(population[-1])
    mean = float(population.mean())
    width = (high - low) / bucket_count if high > low else 1.0

    indices = np.floor((population - low) / width).astype(np.int64)
    np.clip(indices, 0, bucket_count - 1, out=indices)
    counts = np.bincount(indices, minlength=bucket_count)

    buckets: list[HistogramBucket] = []
    cumulative = 0
    for index, count in enumerate(counts.tolist()):
        cumulative += count
        buckets.append(
            HistogramBucket(
                min=low + index * width,
                max=low + (index + 1) * width,
                count=count,
                percentage=count / n * 100,
                cumulative_count=cumulative,
                cumulative_percentage=cumulative / n * 100,
            )
        )
    return buckets, DistributionStats(min=low, max=high, mean=mean)


def build_distribution(
    values: Sequence[float] | np.ndarray,
    bucket_count: int = HISTOGRAM_BUCKETS,
) -> Distribution:
    """Return histogram, range statistics and percentiles for ``values``."""

    population = np.sort(np.asarray(values, dtype=np.float64))
    buckets, stats = build_histogram(population, bucket_count)
    return Distribution(buckets=buckets, stats=stats, percentiles=percentile_stats(population))


def survival_curve(
    costs: Sequence[float] | np.ndarray,
    successes: Sequence[bool] | np.ndarray,
    points: int = SURVIVAL_POINTS,
) -> list[SurvivalPoint]:
    """Return the share of runs that succeeded within each budget level.

    Runs are ordered by cost once; ``points`` equally spaced budgets from the
    cheapest to the most expensive run are swept with a single advancing
    pointer, counting successful runs whose cost does not exceed the budget.
    Percentages are relative to every run, failed ones included.
    """

    cost_array = np.asarray(costs, dtype=np.float64)
    success_array = np.asarray(successes, dtype=bool)
    if cost_array.shape != success_array.shape:
        raise ValueError("costs and successes must have the same length.")
    n = cost_array.size
    if n == 0 or points <= 0:
        return []

    order = np.argsort(cost_array, kind="stable")
    sorted_costs = cost_array[order].tolist()
    sorted_successes = success_array[order].tolist()
    low = sorted_costs[0]
    high = sorted_costs[-1]
    step = (high - low) / (points - 1) if points > 1 else 0.0

    curve: list[SurvivalPoint] = []
    pointer = 0
    success_count = 0
    for index in range(points):
        budget = high if index == points - 1 else low + index * step
        while pointer < n and sorted_costs[pointer] <= budget:
            if sorted_successes[pointer]:
                success_count += 1
            pointer += 1
        curve.append(SurvivalPoint(silver=budget, success_rate=success_count / n * 100))
    return curve


def completion_rate(successes: int, total: int) -> float:
    return successes / total if total > 0 else 0.0


def expected_cost_per_success(mean_cost: float, rate: float) -> float:
    """Return the mean cost divided by the completion rate (``inf`` at 0)."""

    return mean_cost / rate if rate > 0 else math.inf


def expected_attempts_to_succeed(rate: float) -> float:
    """Return how many batches of effort a single success takes on average."""

    return 1.0 / rate if rate > 0 else math.inf


def summarize_runs(
    results: Sequence[FastRunResult],
    target_level: int,
    with_distribution: bool = True,
    bucket_count: int = HISTOGRAM_BUCKETS,
    survival_points: int = SURVIVAL_POINTS,
) -> MonteCarloSummary:
    """Aggregate per-run totals into a :class:`MonteCarloSummary`.

    Failed runs (stopped by a resource cap) stay in every percentile
    population with the cost they had accrued. The histograms and the
    survival curve are only built when at least one run failed.
    """

    n = len(results)
    silver = np.fromiter((run.silver for run in results), dtype=np.float64, count=n)
    successes = np.fromiter((run.success for run in results), dtype=bool, count=n)

    silver_stats = percentile_stats(silver)
    rate = completion_rate(int(successes.sum()), n)

    summary = MonteCarloSummary(
        num_simulations=n,
        target_level=target_level,
        silver=silver_stats,
        crystals=percentile_stats([run.crystals for run in results]),
        scrolls=percentile_stats([run.scrolls for run in results]),
        exquisite=percentile_stats([run.exquisite_crystals for run in results]),
        attempts=percentile_stats([run.attempts for run in results]),
        level_drops=percentile_stats([run.level_drops for run in results]),
        anvil_triggers=percentile_stats([run.anvil_triggers for run in results]),
        success_rate=rate,
        expected_cost_per_success=expected_cost_per_success(silver_stats.average, rate),
        expected_attempts_to_succeed=expected_attempts_to_succeed(rate),
    )

    if with_distribution and n > 0 and not successes.all():
        summary.distribution = build_distribution(silver, bucket_count)
        summary.failed_distribution = build_distribution(silver[~successes], bucket_count)
        summary.survival_curve = survival_curve(silver, successes, survival_points)
    return summary
