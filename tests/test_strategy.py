from awakening_core import (
    FastRunResult,
    ResourceLimits,
    ResourceSnapshot,
    SimulationConfig,
    StrategyResult,
    recommend,
    run_hepta_okta_strategy,
    run_restoration_strategy,
)
from awakening_core.strategy import _ranked_snapshots


def run(silver, crystals):
    return FastRunResult(crystals, 0, silver, 0, crystals, 0, 0, 0, 9, True)


def strategy(label, silver, feasible=True):
    snapshot = ResourceSnapshot(crystals=1, scrolls=0, silver=silver)
    return StrategyResult(
        label=label,
        p50=snapshot,
        p90=snapshot,
        worst=snapshot,
        success_rate=1.0 if feasible else 0.0,
        feasible=feasible,
    )


def test_restoration_candidates_span_start_to_target():
    config = SimulationConfig(start_level=0, target_level=7)
    results = run_restoration_strategy(config, runs=40, seed=1)
    assert [result.label for result in results] == ["+IV", "+V", "+VI"]
    assert [result.restoration_from for result in results] == [4, 5, 6]
    assert all(result.feasible for result in results)
    recommended = [result for result in results if result.recommendation == "Recommended"]
    assert len(recommended) == 1
    assert recommended[0].p50.silver == min(result.p50.silver for result in results)


def test_restoration_candidates_start_above_current_level():
    config = SimulationConfig(start_level=5, target_level=8)
    results = run_restoration_strategy(config, runs=10, seed=2)
    assert [result.restoration_from for result in results] == [6, 7]


def test_restoration_progress_is_reported():
    reported = []
    run_restoration_strategy(
        SimulationConfig(start_level=3, target_level=6), runs=10, seed=3, progress=reported.append
    )
    assert reported == [50.0, 100.0]


def test_hepta_okta_candidates():
    config = SimulationConfig(start_level=4, target_level=9, start_hepta=0)
    results = run_hepta_okta_strategy(config, runs=10, seed=4)
    assert [result.label for result in results] == ["Hepta+Okta", "Hepta only", "Okta only", "Normal"]
    assert [(result.use_hepta, result.use_okta) for result in results] == [
        (True, True),
        (True, False),
        (False, True),
        (False, False),
    ]
    assert all(result.restoration_from == 6 for result in results)
    assert results[-1].p50.exquisite == 0
    assert results[0].p50.exquisite > 0


def test_infeasible_candidates_are_not_recommended():
    config = SimulationConfig(start_level=0, target_level=6)
    results = run_restoration_strategy(config, runs=10, seed=5, limits=ResourceLimits(crystals=2))
    assert all(not result.feasible for result in results)
    assert all(result.recommendation is None for result in results)


def test_recommend_picks_cheapest_feasible():
    options = [strategy("a", 300), strategy("b", 100, feasible=False), strategy("c", 200)]
    best = recommend(options)
    assert best is options[2]
    assert best.recommendation == "Recommended"
    assert options[0].recommendation is None
    assert recommend([strategy("x", 1, feasible=False)]) is None


def test_ranked_snapshots_come_from_single_runs():
    runs = [run(silver * 10, crystals=silver) for silver in (5, 1, 9, 3, 7)]
    p50, p90, worst = _ranked_snapshots(runs)
    assert (p50.silver, p50.crystals) == (50, 5)
    assert (p90.silver, p90.crystals) == (90, 9)
    assert worst.silver == 90
    empty = _ranked_snapshots([])
    assert empty[0].silver == 0
