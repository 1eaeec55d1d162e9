import pytest

from awakening_core import ResourceLimits, SimulationConfig, derive_seeds, simulate_many
from awakening_core.simulation import PROGRESS_REPORT_INTERVAL, _split_work

SMALL = SimulationConfig(start_level=0, target_level=5)


def test_derive_seeds_is_deterministic():
    assert derive_seeds(10, 42) == derive_seeds(10, 42)
    assert derive_seeds(10, 42) != derive_seeds(10, 43)
    assert all(0 <= seed < 2**32 for seed in derive_seeds(100, 7))


def test_derive_seeds_without_master_seed():
    assert derive_seeds(3, None) == [None, None, None]
    assert derive_seeds(0, 1) == []
    with pytest.raises(ValueError):
        derive_seeds(-1, 1)


def test_split_work_keeps_order_and_size():
    seeds = list(range(10))
    chunks = _split_work(seeds, 3)
    assert [len(chunk) for chunk in chunks] == [4, 3, 3]
    assert [seed for chunk in chunks for seed in chunk] == seeds


def test_batch_is_reproducible():
    first = simulate_many(SMALL, runs=200, seed=7)
    second = simulate_many(SMALL, runs=200, seed=7)
    assert first == second
    assert len(first) == 200
    assert all(run.success for run in first)


def test_batch_seed_changes_results():
    assert simulate_many(SMALL, runs=200, seed=1) != simulate_many(SMALL, runs=200, seed=2)


def test_progress_reports_up_to_hundred():
    reported = []
    simulate_many(SMALL, runs=PROGRESS_REPORT_INTERVAL * 2 + 10, seed=3, progress=reported.append)
    assert reported == sorted(reported)
    assert len(reported) == 3
    assert reported[-1] == pytest.approx(100.0)


def test_should_stop_keeps_completed_runs():
    calls = {"count": 0}

    def stop_after_five():
        calls["count"] += 1
        return calls["count"] > 5

    results = simulate_many(SMALL, runs=100, seed=3, should_stop=stop_after_five)
    assert len(results) == 5
    assert results == simulate_many(SMALL, runs=5, seed=3)


def test_limits_are_forwarded():
    results = simulate_many(SimulationConfig(), runs=50, seed=11, limits=ResourceLimits(crystals=3))
    assert all(not run.success for run in results)
    assert all(run.crystals == 3 for run in results)


def test_processes_do_not_change_results():
    single = simulate_many(SMALL, runs=120, seed=5, processes=1)
    pooled = simulate_many(SMALL, runs=120, seed=5, processes=2)
    assert pooled == single


def test_invalid_config_raises_before_running():
    with pytest.raises(ValueError):
        simulate_many(SimulationConfig(start_level=5, target_level=5), runs=10)
