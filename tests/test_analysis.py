import math

import pytest

from awakening_core import (
    FastRunResult,
    build_distribution,
    build_histogram,
    expected_attempts_to_succeed,
    expected_cost_per_success,
    percentile,
    percentile_stats,
    summarize_runs,
    survival_curve,
)


def run(silver, success=True, crystals=1, attempts=1, level_drops=0, anvil_triggers=0):
    return FastRunResult(
        crystals=crystals,
        scrolls=0,
        silver=silver,
        exquisite_crystals=0,
        attempts=attempts,
        valks10_used=0,
        valks50_used=0,
        valks100_used=0,
        final_level=9 if success else 4,
        success=success,
        level_drops=level_drops,
        anvil_triggers=anvil_triggers,
    )


def test_percentile_uses_floor_index():
    values = list(range(1, 11))
    assert percentile(values, 0.5) == 6
    assert percentile(values, 0.9) == 10
    assert percentile(values, 0.99) == 10
    assert percentile([], 0.5) == 0


def test_percentile_stats_sorts_input():
    stats = percentile_stats([10, 1, 5, 3])
    assert stats.average == pytest.approx(4.75)
    assert stats.p50 == 5
    assert stats.worst == 10


def test_histogram_places_maximum_in_last_bucket():
    buckets, stats = build_histogram([0, 5, 10], bucket_count=2)
    assert [bucket.count for bucket in buckets] == [1, 2]
    assert buckets[-1].cumulative_count == 3
    assert buckets[-1].cumulative_percentage == pytest.approx(100.0)
    assert (stats.min, stats.max, stats.mean) == (0, 10, 5)


def test_histogram_of_equal_values_uses_unit_width():
    buckets, stats = build_histogram([3, 3, 3], bucket_count=4)
    assert buckets[0].count == 3
    assert (buckets[0].min, buckets[0].max) == (3, 4)
    assert sum(bucket.count for bucket in buckets) == 3
    assert stats.min == stats.max == 3


def test_histogram_of_empty_population():
    buckets, stats = build_histogram([], bucket_count=5)
    assert buckets == []
    assert stats.mean == 0
    with pytest.raises(ValueError):
        build_histogram([1], bucket_count=0)


def test_distribution_counts_every_value():
    distribution = build_distribution([5, 1, 9, 2, 7], bucket_count=3)
    assert sum(bucket.count for bucket in distribution.buckets) == 5
    assert distribution.percentiles.p50 == 5


def test_survival_curve_counts_successes_within_budget():
    curve = survival_curve([1, 2, 3, 4], [True, False, True, True], points=4)
    assert [point.silver for point in curve] == [1, 2, 3, 4]
    assert [point.success_rate for point in curve] == [25, 25, 50, 75]


def test_survival_curve_is_monotonic_and_ends_at_success_rate():
    costs = [7, 3, 9, 1, 4, 4, 8]
    successes = [True, False, True, True, False, True, True]
    curve = survival_curve(costs, successes, points=10)
    rates = [point.success_rate for point in curve]
    assert rates == sorted(rates)
    assert rates[-1] == pytest.approx(5 / 7 * 100)
    assert survival_curve([], [], points=10) == []


def test_survival_curve_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        survival_curve([1, 2], [True], points=3)


def test_expected_cost_per_success():
    assert expected_cost_per_success(100.0, 0.5) == 200.0
    assert math.isinf(expected_cost_per_success(100.0, 0.0))
    assert expected_attempts_to_succeed(0.25) == 4.0
    assert math.isinf(expected_attempts_to_succeed(0.0))


def test_summary_skips_distributions_when_every_run_succeeds():
    summary = summarize_runs([run(10), run(20), run(30)], target_level=9)
    assert summary.num_simulations == 3
    assert summary.success_rate == 1.0
    assert summary.silver.p50 == 20
    assert summary.expected_cost_per_success == pytest.approx(20)
    assert summary.distribution is None
    assert summary.survival_curve is None


def test_summary_keeps_failed_runs_in_percentiles():
    results = [run(10), run(40, success=False), run(20), run(30, success=False)]
    summary = summarize_runs(results, target_level=9)
    assert summary.success_rate == 0.5
    assert summary.silver.worst == 40
    assert summary.silver.average == pytest.approx(25)
    assert summary.expected_cost_per_success == pytest.approx(50)
    assert summary.distribution is not None
    assert summary.failed_distribution.stats.min == 30
    assert summary.survival_curve[-1].success_rate == pytest.approx(50)


def test_summary_reports_drops_and_anvil_triggers():
    results = [run(10, level_drops=drops, anvil_triggers=drops // 2) for drops in (4, 0, 8, 2)]
    summary = summarize_runs(results, target_level=9)
    assert summary.level_drops.average == pytest.approx(3.5)
    assert summary.level_drops.p50 == 4
    assert summary.level_drops.worst == 8
    assert summary.anvil_triggers.worst == 4


def test_summary_of_empty_batch():
    summary = summarize_runs([], target_level=5)
    assert summary.num_simulations == 0
    assert summary.success_rate == 0.0
    assert math.isinf(summary.expected_cost_per_success)
    assert summary.distribution is None
