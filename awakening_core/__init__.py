"""Awakening enhancement cost simulator core."""

from __future__ import annotations

from .analysis import (
    HISTOGRAM_BUCKETS,
    SURVIVAL_POINTS,
    build_distribution,
    build_histogram,
    completion_rate,
    expected_attempts_to_succeed,
    expected_cost_per_success,
    percentile,
    percentile_stats,
    summarize_runs,
    survival_curve,
)
from .api import (
    DEFAULT_RUNS,
    format_number,
    format_silver,
    make_config,
    run_monte_carlo,
    simulate_single,
)
from .cost import CostModel, MarketPrices, exquisite_crystal_cost, restoration_attempt_cost
from .data import (
    ANVIL_THRESHOLDS,
    DEFAULT_PRICES,
    DEFAULT_TABLE,
    ENHANCEMENT_RATES,
    EXQUISITE_BLACK_CRYSTAL_RECIPE,
    HEPTA_OKTA_ANVIL_PITY,
    HEPTA_OKTA_SUCCESS_RATE,
    HEPTA_SUB_ENHANCEMENTS,
    OKTA_SUB_ENHANCEMENTS,
    RESTORATION_PER_ATTEMPT,
    RESTORATION_SUCCESS_RATE,
    ROMAN_NUMERALS,
    ProbabilityTable,
    SubPathRules,
    load_house_rules,
    load_price_presets,
    roman,
    save_price_presets,
)
from .engine import AwakeningEngine, SimulationCompleteError
from .models import (
    DEFAULT_CONFIG,
    Distribution,
    FastRunResult,
    HistogramBucket,
    MonteCarloSummary,
    PercentileStats,
    ResourceLimits,
    ResourceSnapshot,
    SimulationConfig,
    SimulationResult,
    StepResult,
    StrategyResult,
    SurvivalPoint,
)
from .rng import Mulberry32, make_rng
from .simulation import derive_seeds, run_capped, run_recorded, simulate_many
from .strategy import recommend, run_hepta_okta_strategy, run_restoration_strategy

__all__ = [
    "ANVIL_THRESHOLDS",
    "DEFAULT_CONFIG",
    "DEFAULT_PRICES",
    "DEFAULT_RUNS",
    "DEFAULT_TABLE",
    "ENHANCEMENT_RATES",
    "EXQUISITE_BLACK_CRYSTAL_RECIPE",
    "HEPTA_OKTA_ANVIL_PITY",
    "HEPTA_OKTA_SUCCESS_RATE",
    "HEPTA_SUB_ENHANCEMENTS",
    "HISTOGRAM_BUCKETS",
    "OKTA_SUB_ENHANCEMENTS",
    "RESTORATION_PER_ATTEMPT",
    "RESTORATION_SUCCESS_RATE",
    "ROMAN_NUMERALS",
    "SURVIVAL_POINTS",
    "AwakeningEngine",
    "CostModel",
    "Distribution",
    "FastRunResult",
    "HistogramBucket",
    "MarketPrices",
    "MonteCarloSummary",
    "Mulberry32",
    "PercentileStats",
    "ProbabilityTable",
    "ResourceLimits",
    "ResourceSnapshot",
    "SimulationCompleteError",
    "SimulationConfig",
    "SimulationResult",
    "StepResult",
    "StrategyResult",
    "SubPathRules",
    "SurvivalPoint",
    "build_distribution",
    "build_histogram",
    "completion_rate",
    "derive_seeds",
    "expected_attempts_to_succeed",
    "expected_cost_per_success",
    "exquisite_crystal_cost",
    "format_number",
    "format_silver",
    "load_house_rules",
    "load_price_presets",
    "make_config",
    "make_rng",
    "percentile",
    "percentile_stats",
    "recommend",
    "restoration_attempt_cost",
    "roman",
    "run_capped",
    "run_hepta_okta_strategy",
    "run_monte_carlo",
    "run_recorded",
    "run_restoration_strategy",
    "save_price_presets",
    "simulate_many",
    "simulate_single",
    "summarize_runs",
    "survival_curve",
]
