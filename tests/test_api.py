import logging

import pytest

from awakening_core import (
    DEFAULT_CONFIG,
    MarketPrices,
    ResourceLimits,
    format_number,
    format_silver,
    make_config,
    run_monte_carlo,
    simulate_single,
)


def test_make_config_applies_overrides():
    config = make_config(start_level=2, target_level=6, prices={"crystal_price": 1})
    assert config.start_level == 2
    assert config.target_level == 6
    assert config.prices == MarketPrices(crystal_price=1)
    assert config.restoration_from == DEFAULT_CONFIG.restoration_from


def test_make_config_validates():
    with pytest.raises(ValueError):
        make_config(start_level=9, target_level=9)
    with pytest.raises(ValueError):
        make_config(prices={"valks10_price": -5})


def test_simulate_single_records_steps():
    result = simulate_single(make_config(target_level=4), seed=42)
    assert result.success
    assert result.final_level == 4
    assert len(result.steps) == result.attempts
    assert result.steps[-1].ending_level == 4


def test_run_monte_carlo_summary(caplog):
    config = make_config(target_level=5)
    with caplog.at_level(logging.INFO, logger="awakening_core.api"):
        summary = run_monte_carlo(config, runs=300, seed=42)
    assert summary.num_simulations == 300
    assert summary.target_level == 5
    assert summary.success_rate == 1.0
    assert summary.silver.p50 <= summary.silver.p90 <= summary.silver.p99 <= summary.silver.worst
    assert summary.compute_seconds >= 0
    assert summary.distribution is None
    assert "Monte Carlo 300 runs" in caplog.text


def test_run_monte_carlo_is_reproducible():
    config = make_config(target_level=5)
    first = run_monte_carlo(config, runs=100, seed=9)
    second = run_monte_carlo(config, runs=100, seed=9)
    assert first.silver == second.silver
    assert first.attempts == second.attempts


def test_run_monte_carlo_with_limits_builds_curves():
    config = make_config(target_level=6)
    summary = run_monte_carlo(config, runs=200, seed=1, limits=ResourceLimits(crystals=12))
    assert 0 < summary.success_rate < 1
    assert summary.distribution is not None
    assert summary.failed_distribution is not None
    assert sum(bucket.count for bucket in summary.failed_distribution.buckets) == round(
        (1 - summary.success_rate) * 200
    )
    assert summary.level_drops.worst >= summary.level_drops.p50
    assert summary.survival_curve[-1].success_rate == pytest.approx(summary.success_rate * 100)


def test_format_number():
    assert format_number(999) == "999"
    assert format_number(1_500) == "1.5K"
    assert format_number(20_000_000) == "20.0M"
    assert format_number(3_200_000_000) == "3.2B"
    assert format_number(float("inf")) == "∞"
    assert format_silver(805_000_000) == "805.0M Silver"
