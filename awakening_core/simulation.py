"""Batch runners and the Monte Carlo driver built on :class:`AwakeningEngine`."""

from __future__ import annotations

import logging
import multiprocessing as mp
import os
import random
from collections.abc import Callable, Sequence
from typing import Final, Optional

from .data import DEFAULT_TABLE, ProbabilityTable
from .engine import AwakeningEngine
from .models import FastRunResult, ResourceLimits, SimulationConfig, SimulationResult
from .rng import UINT32_MASK

logger = logging.getLogger(__name__)

PROGRESS_REPORT_INTERVAL: Final[int] = 1000

ProgressFn = Callable[[float], None]
StopFn = Callable[[], bool]


def run_recorded(
    config: SimulationConfig,
    seed: Optional[int] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> SimulationResult:
    """Run one simulation to the target, keeping every step for playback."""

    engine = AwakeningEngine(config, seed, table)
    return engine.run_full_simulation(record_steps=True)


def run_capped(
    config: SimulationConfig,
    seed: Optional[int] = None,
    limits: Optional[ResourceLimits] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> FastRunResult:
    """Run one simulation keeping only scalar totals, honouring ``limits``."""

    engine = AwakeningEngine(config, seed, table)
    return engine.run_fast(limits)


def derive_seeds(runs: int, seed: Optional[int]) -> list[Optional[int]]:
    """Return one 32-bit seed per run, derived deterministically from ``seed``.

    ``None`` yields ``None`` for every run, which makes each run use its own
    non-deterministic generator.
    """

    if runs < 0:
        raise ValueError("runs cannot be negative.")
    if seed is None:
        return [None] * runs
    master = random.Random(seed & UINT32_MASK)
    return [master.getrandbits(32) for _ in range(runs)]


def _split_work(seeds: Sequence[Optional[int]], processes: int) -> list[list[Optional[int]]]:
    chunk_size, remainder = divmod(len(seeds), processes)
    chunks: list[list[Optional[int]]] = []
    start = 0
    for index in range(processes):
        end = start + chunk_size + (1 if index < remainder else 0)
        if end > start:
            chunks.append(list(seeds[start:end]))
        start = end
    return chunks


def _run_chunk(
    config: SimulationConfig,
    seeds: Sequence[Optional[int]],
    limits: Optional[ResourceLimits],
    table: ProbabilityTable,
) -> list[FastRunResult]:
    return [run_capped(config, seed, limits, table) for seed in seeds]


def simulate_many(
    config: SimulationConfig,
    runs: int = 10000,
    seed: Optional[int] = 42,
    limits: Optional[ResourceLimits] = None,
    processes: int = 1,
    progress: Optional[ProgressFn] = None,
    should_stop: Optional[StopFn] = None,
    table: ProbabilityTable = DEFAULT_TABLE,
) -> list[FastRunResult]:
    """Run ``runs`` independent simulations and return their scalar totals.

    Parameters
    ----------
    config:
        Configuration shared read-only by every run.
    runs:
        Number of independent runs.
    seed:
        Master seed used to derive one seed per run; ``None`` disables
        reproducibility.
    limits:
        Optional resource caps applied to every run.
    processes:
        Number of worker processes. Values above one split the seed list into
        contiguous chunks executed by a ``multiprocessing.Pool``; results keep
        seed order either way.
    progress:
        Advisory callback receiving the completed percentage.
    should_stop:
        Polled between runs (or between chunks when using processes). Once it
        returns True no further runs start and the completed runs are returned.
    """

    config.validate(table)
    seeds = derive_seeds(runs, seed)
    processes = max(1, min(processes, runs)) if runs > 0 else 1
    logger.debug("Starting batch of %d runs (seed=%s, processes=%d)", runs, seed, processes)

    results: list[FastRunResult] = []
    if processes == 1:
        for index, run_seed in enumerate(seeds):
            if should_stop is not None and should_stop():
                logger.info("Batch stopped after %d of %d runs", index, runs)
                break
            results.append(run_capped(config, run_seed, limits, table))
            completed = index + 1
            if progress is not None and (
                completed % PROGRESS_REPORT_INTERVAL == 0 or completed == runs
            ):
                progress(completed / runs * 100)
    else:
        chunks = _split_work(seeds, processes)
        with mp.Pool(len(chunks)) as pool:
            pending = pool.imap(
                _chunk_worker, [(config, chunk, limits, table) for chunk in chunks]
            )
            for chunk_results in pending:
                results.extend(chunk_results)
                if progress is not None:
                    progress(len(results) / runs * 100)
                if should_stop is not None and should_stop() and len(results) < runs:
                    logger.info("Batch stopped after %d of %d runs", len(results), runs)
                    break

    logger.debug("Finished batch: %d runs completed", len(results))
    return results


def _chunk_worker(
    args: tuple[SimulationConfig, list[Optional[int]], Optional[ResourceLimits], ProbabilityTable],
) -> list[FastRunResult]:
    return _run_chunk(*args)


def default_process_count(runs: int) -> int:
    """Return a worker count suited to ``runs`` on this machine."""

    return max(1, min(os.cpu_count() or 1, runs))
