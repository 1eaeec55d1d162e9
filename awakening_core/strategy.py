"""Strategy finder: compare restoration and Hepta/Okta plans by Monte Carlo."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Final, Optional

import numpy as np

from .analysis import completion_rate, percentile
from .data import DEFAULT_TABLE, ProbabilityTable, roman
from .models import (
    FastRunResult,
    ResourceLimits,
    ResourceSnapshot,
    SimulationConfig,
    StrategyResult,
)
from .simulation import ProgressFn, simulate_many

logger = logging.getLogger(__name__)

MIN_RESTORATION_LEVEL: Final[int] = 4
HEPTA_OKTA_RESTORATION_FROM: Final[int] = 6
FEASIBLE_SUCCESS_RATE: Final[float] = 0.5

HEPTA_OKTA_STRATEGIES: Final[list[tuple[bool, bool, str]]] = [
    (True, True, "Hepta+Okta"),
    (True, False, "Hepta only"),
    (False, True, "Okta only"),
    (False, False, "Normal"),
]


def _snapshot(run: FastRunResult) -> ResourceSnapshot:
    return ResourceSnapshot(
        crystals=run.crystals,
        scrolls=run.scrolls,
        silver=run.silver,
        exquisite=run.exquisite_crystals,
    )


def _ranked_snapshots(
    runs: Sequence[FastRunResult],
) -> tuple[ResourceSnapshot, ResourceSnapshot, ResourceSnapshot]:
    """Return the p50, p90 and worst runs ranked by silver.

    All resources are read from the same run so each snapshot is a cost that
    actually occurred.
    """

    if not runs:
        empty = ResourceSnapshot(0, 0, 0, 0)
        return empty, empty, empty
    silver = np.fromiter((run.silver for run in runs), dtype=np.float64, count=len(runs))
    order = np.argsort(silver, kind="stable")
    ranked = [runs[index] for index in order.tolist()]
    positions = list(range(len(ranked)))
    p50 = ranked[int(percentile(positions, 0.5))]
    p90 = ranked[int(percentile(positions, 0.9))]
    return _snapshot(p50), _snapshot(p90), _snapshot(ranked[-1])


def _evaluate(
    label: str,
    config: SimulationConfig,
    runs: int,
    seed: Optional[int],
    limits: Optional[ResourceLimits],
    table: ProbabilityTable,
) -> StrategyResult:
    results = simulate_many(config, runs=runs, seed=seed, limits=limits, table=table)
    p50, p90, worst = _ranked_snapshots(results)
    rate = completion_rate(sum(1 for run in results if run.success), len(results))
    return StrategyResult(
        label=label,
        p50=p50,
        p90=p90,
        worst=worst,
        success_rate=rate,
        feasible=rate >= FEASIBLE_SUCCESS_RATE,
        restoration_from=config.restoration_from,
        use_hepta=config.use_hepta,
        use_okta=config.use_okta,
    )


def run_restoration_strategy(
    config: SimulationConfig,
    runs: int,
    seed: Optional[int] = None,
    limits: Optional[ResourceLimits] = None,
    progress: Optional[ProgressFn] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> list[StrategyResult]:
    """Compare every restoration starting level between start and target.

    Valks and Hepta/Okta are disabled so the comparison isolates restoration.
    Candidates run from ``max(IV, start + 1)`` to ``target - 1``.
    """

    first = max(MIN_RESTORATION_LEVEL, config.start_level + 1)
    options = list(range(first, config.target_level))
    logger.info("Restoration strategy: %d candidates x %d runs", len(options), runs)

    results: list[StrategyResult] = []
    for index, restoration_from in enumerate(options):
        candidate = replace(
            config,
            start_hepta=0,
            start_okta=0,
            restoration_from=restoration_from,
            use_hepta=False,
            use_okta=False,
            valks10_from=0,
            valks50_from=0,
            valks100_from=0,
        )
        results.append(_evaluate(f"+{roman(restoration_from)}", candidate, runs, seed, limits, table))
        if progress is not None:
            progress((index + 1) / len(options) * 100)
    recommend(results)
    return results


def run_hepta_okta_strategy(
    config: SimulationConfig,
    runs: int,
    seed: Optional[int] = None,
    limits: Optional[ResourceLimits] = None,
    progress: Optional[ProgressFn] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> list[StrategyResult]:
    """Compare Hepta/Okta combinations from level 0 with restoration from VI."""

    logger.info("Hepta/Okta strategy: %d candidates x %d runs", len(HEPTA_OKTA_STRATEGIES), runs)
    results: list[StrategyResult] = []
    for index, (use_hepta, use_okta, label) in enumerate(HEPTA_OKTA_STRATEGIES):
        candidate = replace(
            config,
            start_level=0,
            start_hepta=0,
            start_okta=0,
            restoration_from=HEPTA_OKTA_RESTORATION_FROM,
            use_hepta=use_hepta,
            use_okta=use_okta,
            valks10_from=0,
            valks50_from=0,
            valks100_from=0,
        )
        results.append(_evaluate(label, candidate, runs, seed, limits, table))
        if progress is not None:
            progress((index + 1) / len(HEPTA_OKTA_STRATEGIES) * 100)
    recommend(results)
    return results


def recommend(results: Sequence[StrategyResult]) -> Optional[StrategyResult]:
    """Mark and return the feasible strategy with the lowest median silver."""

    feasible = [result for result in results if result.feasible]
    if not feasible:
        return None
    best = min(feasible, key=lambda result: result.p50.silver)
    best.recommendation = "Recommended"
    return best
