"""Dataclasses shared across the engine, runners and aggregation modules."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import NamedTuple, Optional

from .cost import MarketPrices
from .data import DEFAULT_TABLE, MAX_LEVEL, MIN_LEVEL, ProbabilityTable


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable per-run configuration.

    Valks thresholds compare against the level being attempted: a value of
    ``3`` applies the buff to attempts at III and above. Every eligible Valks
    is applied and the multipliers stack. ``0`` disables a threshold.
    """

    start_level: int = 0
    target_level: int = 9
    restoration_from: int = 6
    use_hepta: bool = False
    use_okta: bool = False
    start_hepta: int = 0
    start_okta: int = 0
    valks10_from: int = 1
    valks50_from: int = 3
    valks100_from: int = 5
    prices: MarketPrices = field(default_factory=MarketPrices)

    def validate(self, table: ProbabilityTable = DEFAULT_TABLE) -> None:
        """Raise ``ValueError`` if the configuration cannot describe a run.

        Sub-path progress is checked against ``table``, the rules the run will
        use.

        Raises
        ------
        ValueError
            If levels are out of range, ``start_level >= target_level``, a
            threshold is negative, or sub-path progress is set away from the
            level where that path applies.
        """

        for name in ("start_level", "target_level"):
            value = getattr(self, name)
            if not MIN_LEVEL <= value <= MAX_LEVEL:
                raise ValueError(f"{name} must be between {MIN_LEVEL} and {MAX_LEVEL}, got {value}.")
        if self.start_level >= self.target_level:
            raise ValueError(
                f"start_level ({self.start_level}) must be below target_level ({self.target_level})."
            )
        for name in ("restoration_from", "valks10_from", "valks50_from", "valks100_from"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative (use 0 to disable).")
        for path, progress in ((table.hepta, self.start_hepta), (table.okta, self.start_okta)):
            name = f"start_{path.name.lower()}"
            if not 0 <= progress < path.required:
                raise ValueError(f"{name} must be between 0 and {path.required - 1}.")
            if progress and self.start_level != path.start_level:
                raise ValueError(f"{name} requires start_level {path.start_level}.")


DEFAULT_CONFIG = SimulationConfig()


@dataclass(frozen=True)
class ResourceLimits:
    """Optional per-consumable caps; ``None`` means unlimited."""

    crystals: Optional[int] = None
    scrolls: Optional[int] = None
    valks10: Optional[int] = None
    valks50: Optional[int] = None
    valks100: Optional[int] = None
    exquisite: Optional[int] = None

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None and value < 0:
                raise ValueError(f"Limit '{item.name}' cannot be negative.")

    @classmethod
    def unlimited(cls) -> "ResourceLimits":
        return cls()

    def is_unlimited(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self))


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single enhancement or Hepta/Okta attempt."""

    success: bool
    anvil_triggered: bool
    starting_level: int
    ending_level: int
    valks_used: Optional[str] = None
    restoration_attempted: bool = False
    restoration_success: bool = False
    is_hepta_okta: bool = False
    sub_progress: int = 0
    sub_pity: int = 0
    path_complete: bool = False
    path_name: str = ""


class FastRunResult(NamedTuple):
    """Scalar totals of one run, as produced by the non-recording runner."""

    crystals: int
    scrolls: int
    silver: int
    exquisite_crystals: int
    attempts: int
    valks10_used: int
    valks50_used: int
    valks100_used: int
    final_level: int
    success: bool
    level_drops: int = 0
    anvil_triggers: int = 0


@dataclass(frozen=True)
class SimulationResult:
    """Totals of a complete run, optionally with its step history."""

    crystals: int
    scrolls: int
    silver: int
    exquisite_crystals: int
    attempts: int
    final_level: int
    anvil_energy: tuple[int, ...]
    valks10_used: int
    valks50_used: int
    valks100_used: int
    level_drops: int = 0
    anvil_triggers: int = 0
    success: bool = True
    steps: Optional[tuple[StepResult, ...]] = None

    def scalar_totals(self) -> FastRunResult:
        """Return the fields shared with :class:`FastRunResult`."""

        return FastRunResult(
            crystals=self.crystals,
            scrolls=self.scrolls,
            silver=self.silver,
            exquisite_crystals=self.exquisite_crystals,
            attempts=self.attempts,
            valks10_used=self.valks10_used,
            valks50_used=self.valks50_used,
            valks100_used=self.valks100_used,
            final_level=self.final_level,
            success=self.success,
            level_drops=self.level_drops,
            anvil_triggers=self.anvil_triggers,
        )


@dataclass(frozen=True)
class PercentileStats:
    """Order statistics for one quantity across a batch."""

    average: float = 0.0
    p50: float = 0.0
    p90: float = 0.0
    p99: float = 0.0
    worst: float = 0.0


@dataclass(frozen=True)
class HistogramBucket:
    min: float
    max: float
    count: int
    percentage: float
    cumulative_count: int
    cumulative_percentage: float


@dataclass(frozen=True)
class DistributionStats:
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0


@dataclass(frozen=True)
class Distribution:
    """Histogram, range statistics and percentiles for one population."""

    buckets: list[HistogramBucket]
    stats: DistributionStats
    percentiles: PercentileStats


@dataclass(frozen=True)
class SurvivalPoint:
    """Share of runs (in percent) that reached the target within ``silver``."""

    silver: float
    success_rate: float


@dataclass
class MonteCarloSummary:
    """Aggregated Monte Carlo metrics for a batch of runs."""

    num_simulations: int
    target_level: int
    silver: PercentileStats
    crystals: PercentileStats
    scrolls: PercentileStats
    exquisite: PercentileStats
    attempts: PercentileStats
    level_drops: PercentileStats
    anvil_triggers: PercentileStats
    success_rate: float
    expected_cost_per_success: float
    expected_attempts_to_succeed: float
    distribution: Optional[Distribution] = None
    failed_distribution: Optional[Distribution] = None
    survival_curve: Optional[list[SurvivalPoint]] = None
    compute_seconds: float = 0.0


@dataclass(frozen=True)
class ResourceSnapshot:
    """Crystals, scrolls, silver and exquisite crystals of one ranked run."""

    crystals: int
    scrolls: int
    silver: int
    exquisite: int = 0


@dataclass
class StrategyResult:
    """Percentile costs of one candidate strategy from the strategy finder."""

    label: str
    p50: ResourceSnapshot
    p90: ResourceSnapshot
    worst: ResourceSnapshot
    success_rate: float
    feasible: bool
    restoration_from: int = 0
    use_hepta: bool = False
    use_okta: bool = False
    recommendation: Optional[str] = None
