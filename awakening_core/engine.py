"""Stateful awakening enhancement engine."""

from __future__ import annotations

from typing import Optional

from .cost import CostModel
from .data import DEFAULT_TABLE, MAX_LEVEL, ProbabilityTable, SubPathRules, valks_label
from .models import (
    FastRunResult,
    ResourceLimits,
    SimulationConfig,
    SimulationResult,
    StepResult,
)
from .rng import make_rng


class SimulationCompleteError(RuntimeError):
    """Raised when stepping an engine that has already reached its target."""


class AwakeningEngine:
    """Single-run state machine for the awakening ladder.

    One engine owns one random generator and one set of counters. It is not
    shared between runs: every simulation starts from a fresh engine (or a
    :meth:`reset`, which restores the configured start state but keeps the
    generator's position).
    """

    def __init__(
        self,
        config: SimulationConfig,
        seed: Optional[int] = None,
        table: ProbabilityTable = DEFAULT_TABLE,
    ) -> None:
        """Validate the configuration and pre-compute per-tier lookups.

        Parameters
        ----------
        config:
            Run configuration; validated eagerly.
        seed:
            Optional 32-bit seed. ``None`` makes the run non-deterministic.
        table:
            Probability rules to apply.
        """

        config.validate(table)
        self.config = config
        self.table = table
        self.rng = make_rng(seed)
        self.cost = CostModel(config.prices, table)

        self.target_level = config.target_level
        self.restoration_from = config.restoration_from
        self.use_hepta = config.use_hepta
        self.use_okta = config.use_okta
        self.restoration_cost = self.cost.restoration_attempt
        self.exquisite_cost = self.cost.exquisite

        # Lookups indexed by the level being attempted (index 0 unused).
        thresholds = (config.valks10_from, config.valks50_from, config.valks100_from)
        valks_prices = config.prices.valks_prices()
        self._valks_applied: list[tuple[bool, bool, bool]] = [(False, False, False)]
        self._rates: list[float] = [0.0]
        self._valks_silver: list[int] = [0]
        for next_level in range(1, MAX_LEVEL + 1):
            applied = tuple(0 < start <= next_level for start in thresholds)
            self._valks_applied.append(applied)  # type: ignore[arg-type]
            self._rates.append(table.rate_for(next_level, applied))  # type: ignore[arg-type]
            self._valks_silver.append(
                sum(price for price, used in zip(valks_prices, applied) if used)
            )
        self._thresholds = table.threshold_cache()

        self.reset()

    def reset(self) -> None:
        """Restore the configured start state and zero all counters."""

        self.level = self.config.start_level
        self.anvil_energy = [0] * (MAX_LEVEL + 1)
        self.crystals = 0
        self.scrolls = 0
        self.silver = 0
        self.exquisite_crystals = 0
        self.valks10_used = 0
        self.valks50_used = 0
        self.valks100_used = 0
        self.attempts = 0
        self.level_drops = 0
        self.anvil_triggers = 0
        self.hepta_progress = self.config.start_hepta
        self.okta_progress = self.config.start_okta
        self.hepta_pity = 0
        self.okta_pity = 0

    def is_complete(self) -> bool:
        return self.level >= self.target_level

    def stats(self) -> dict[str, int]:
        """Return the current resource counters."""

        return {
            "crystals": self.crystals,
            "scrolls": self.scrolls,
            "silver": self.silver,
            "exquisite_crystals": self.exquisite_crystals,
            "valks10_used": self.valks10_used,
            "valks50_used": self.valks50_used,
            "valks100_used": self.valks100_used,
            "attempts": self.attempts,
            "level_drops": self.level_drops,
            "anvil_triggers": self.anvil_triggers,
        }

    def valks_for(self, next_level: int) -> tuple[bool, bool, bool]:
        """Return which Valks buffs apply to an attempt at ``next_level``."""

        return self._valks_applied[next_level]

    def rate_for(self, next_level: int) -> float:
        """Return the effective success rate of an attempt at ``next_level``."""

        return self._rates[next_level]

    def _should_use_hepta(self) -> bool:
        path = self.table.hepta
        return (
            (self.use_hepta or self.hepta_progress > 0)
            and self.level == path.start_level
            and self.hepta_progress < path.required
        )

    def _should_use_okta(self) -> bool:
        path = self.table.okta
        return (
            (self.use_okta or self.okta_progress > 0)
            and self.level == path.start_level
            and self.okta_progress < path.required
        )

    def step(self) -> StepResult:
        """Resolve exactly one attempt and return its outcome.

        Raises
        ------
        SimulationCompleteError
            If the target level has already been reached.
        """

        if self.is_complete():
            raise SimulationCompleteError("Simulation already complete")

        if self._should_use_hepta():
            return self._sub_path_step(self.table.hepta, is_okta=False)
        if self._should_use_okta():
            return self._sub_path_step(self.table.okta, is_okta=True)
        return self._enhancement_step()

    def _sub_path_step(self, path: SubPathRules, is_okta: bool) -> StepResult:
        progress = self.okta_progress if is_okta else self.hepta_progress
        pity = self.okta_pity if is_okta else self.hepta_pity

        self.exquisite_crystals += path.crystals_per_attempt
        self.silver += self.exquisite_cost * path.crystals_per_attempt
        self.attempts += 1

        anvil_triggered = path.pity > 0 and pity >= path.pity
        if anvil_triggered or self.rng() < path.success_rate:
            self.anvil_triggers += anvil_triggered
            progress += 1
            path_complete = progress >= path.required
            if path_complete:
                self.level = path.target_level
                self.anvil_energy[path.target_level] = 0
                progress = 0
            if is_okta:
                self.okta_progress, self.okta_pity = progress, 0
            else:
                self.hepta_progress, self.hepta_pity = progress, 0
            return StepResult(
                success=True,
                anvil_triggered=anvil_triggered,
                starting_level=path.start_level,
                ending_level=self.level,
                is_hepta_okta=True,
                sub_progress=progress,
                sub_pity=0,
                path_complete=path_complete,
                path_name=path.name,
            )

        pity += 1
        if is_okta:
            self.okta_pity = pity
        else:
            self.hepta_pity = pity
        return StepResult(
            success=False,
            anvil_triggered=False,
            starting_level=self.level,
            ending_level=self.level,
            is_hepta_okta=True,
            sub_progress=progress,
            sub_pity=pity,
            path_name=path.name,
        )

    def _enhancement_step(self) -> StepResult:
        starting_level = self.level
        next_level = starting_level + 1
        applied = self._valks_applied[next_level]
        valks_used = valks_label(applied)

        current_energy = self.anvil_energy[next_level]
        max_energy = self._thresholds[next_level]
        anvil_triggered = max_energy > 0 and current_energy >= max_energy

        self.attempts += 1
        self.crystals += 1
        self.silver += self.config.prices.crystal_price + self._valks_silver[next_level]
        used10, used50, used100 = applied
        self.valks10_used += used10
        self.valks50_used += used50
        self.valks100_used += used100

        if anvil_triggered or self.rng() < self._rates[next_level]:
            self.anvil_triggers += anvil_triggered
            self.level = next_level
            self.anvil_energy[next_level] = 0
            return StepResult(
                success=True,
                anvil_triggered=anvil_triggered,
                starting_level=starting_level,
                ending_level=next_level,
                valks_used=valks_used,
            )

        self.anvil_energy[next_level] = current_energy + 1
        restoration_attempted = False
        restoration_success = False
        if self.level > 0 and 0 < self.restoration_from <= self.level:
            restoration_attempted = True
            self.scrolls += self.table.restoration_per_attempt
            self.silver += self.restoration_cost
            if self.rng() < self.table.restoration_success_rate:
                restoration_success = True
            else:
                self.level -= 1
                self.level_drops += 1
        elif self.level > 0:
            self.level -= 1
            self.level_drops += 1

        return StepResult(
            success=False,
            anvil_triggered=False,
            starting_level=starting_level,
            ending_level=self.level,
            valks_used=valks_used,
            restoration_attempted=restoration_attempted,
            restoration_success=restoration_success,
        )

    def result(self, steps: Optional[list[StepResult]] = None) -> SimulationResult:
        """Snapshot the current totals as a :class:`SimulationResult`."""

        return SimulationResult(
            crystals=self.crystals,
            scrolls=self.scrolls,
            silver=self.silver,
            exquisite_crystals=self.exquisite_crystals,
            attempts=self.attempts,
            final_level=self.level,
            anvil_energy=tuple(self.anvil_energy),
            valks10_used=self.valks10_used,
            valks50_used=self.valks50_used,
            valks100_used=self.valks100_used,
            level_drops=self.level_drops,
            anvil_triggers=self.anvil_triggers,
            success=self.is_complete(),
            steps=tuple(steps) if steps is not None else None,
        )

    def run_full_simulation(self, record_steps: bool = False) -> SimulationResult:
        """Step until the target is reached, optionally keeping every outcome."""

        steps: list[StepResult] = []
        while not self.is_complete():
            step = self.step()
            if record_steps:
                steps.append(step)
        return self.result(steps if record_steps else None)

    def run_fast(self, limits: Optional[ResourceLimits] = None) -> FastRunResult:
        """Run to completion (or resource exhaustion) keeping only scalar counters.

        The resolution rules and random draw order are those of :meth:`step`,
        so for the same seed and no limits the totals match
        :meth:`run_full_simulation` exactly. With ``limits`` the run stops
        before spending a consumable beyond its cap and reports
        ``success=False`` with the totals accumulated so far.
        """

        if limits is None:
            limits = ResourceLimits()
        crystal_cap = limits.crystals
        scroll_cap = limits.scrolls
        valks10_cap = limits.valks10
        valks50_cap = limits.valks50
        valks100_cap = limits.valks100
        exquisite_cap = limits.exquisite

        rng = self.rng
        table = self.table
        level = self.level
        target_level = self.target_level
        anvil_energy = self.anvil_energy
        thresholds = self._thresholds
        rates = self._rates
        valks_applied = self._valks_applied
        valks_silver = self._valks_silver

        restoration_from = self.restoration_from
        restoration_per_attempt = table.restoration_per_attempt
        restoration_rate = table.restoration_success_rate
        restoration_cost = self.restoration_cost
        crystal_price = self.config.prices.crystal_price
        exquisite_cost = self.exquisite_cost

        hepta = table.hepta
        okta = table.okta
        use_hepta = self.use_hepta
        use_okta = self.use_okta
        hepta_progress = self.hepta_progress
        okta_progress = self.okta_progress
        hepta_pity = self.hepta_pity
        okta_pity = self.okta_pity

        crystals = self.crystals
        scrolls = self.scrolls
        silver = self.silver
        exquisite = self.exquisite_crystals
        attempts = self.attempts
        valks10 = self.valks10_used
        valks50 = self.valks50_used
        valks100 = self.valks100_used
        level_drops = self.level_drops
        anvil_triggers = self.anvil_triggers

        while level < target_level:
            if (use_hepta or hepta_progress > 0) and level == hepta.start_level and (
                hepta_progress < hepta.required
            ):
                if exquisite_cap is not None and exquisite + hepta.crystals_per_attempt > exquisite_cap:
                    break
                exquisite += hepta.crystals_per_attempt
                silver += exquisite_cost * hepta.crystals_per_attempt
                attempts += 1
                anvil_triggered = hepta.pity > 0 and hepta_pity >= hepta.pity
                if anvil_triggered or rng() < hepta.success_rate:
                    anvil_triggers += anvil_triggered
                    hepta_progress += 1
                    hepta_pity = 0
                    if hepta_progress >= hepta.required:
                        level = hepta.target_level
                        anvil_energy[level] = 0
                        hepta_progress = 0
                else:
                    hepta_pity += 1
                continue

            if (use_okta or okta_progress > 0) and level == okta.start_level and (
                okta_progress < okta.required
            ):
                if exquisite_cap is not None and exquisite + okta.crystals_per_attempt > exquisite_cap:
                    break
                exquisite += okta.crystals_per_attempt
                silver += exquisite_cost * okta.crystals_per_attempt
                attempts += 1
                anvil_triggered = okta.pity > 0 and okta_pity >= okta.pity
                if anvil_triggered or rng() < okta.success_rate:
                    anvil_triggers += anvil_triggered
                    okta_progress += 1
                    okta_pity = 0
                    if okta_progress >= okta.required:
                        level = okta.target_level
                        anvil_energy[level] = 0
                        okta_progress = 0
                else:
                    okta_pity += 1
                continue

            next_level = level + 1
            used10, used50, used100 = valks_applied[next_level]
            if crystal_cap is not None and crystals + 1 > crystal_cap:
                break
            if used10 and valks10_cap is not None and valks10 + 1 > valks10_cap:
                break
            if used50 and valks50_cap is not None and valks50 + 1 > valks50_cap:
                break
            if used100 and valks100_cap is not None and valks100 + 1 > valks100_cap:
                break

            attempts += 1
            crystals += 1
            silver += crystal_price + valks_silver[next_level]
            valks10 += used10
            valks50 += used50
            valks100 += used100

            current_energy = anvil_energy[next_level]
            max_energy = thresholds[next_level]
            anvil_triggered = max_energy > 0 and current_energy >= max_energy
            if anvil_triggered or rng() < rates[next_level]:
                anvil_triggers += anvil_triggered
                level = next_level
                anvil_energy[next_level] = 0
                continue

            anvil_energy[next_level] = current_energy + 1
            if level > 0 and 0 < restoration_from <= level:
                if scroll_cap is not None and scrolls + restoration_per_attempt > scroll_cap:
                    break
                scrolls += restoration_per_attempt
                silver += restoration_cost
                if rng() >= restoration_rate:
                    level -= 1
                    level_drops += 1
            elif level > 0:
                level -= 1
                level_drops += 1

        self.level = level
        self.hepta_progress, self.hepta_pity = hepta_progress, hepta_pity
        self.okta_progress, self.okta_pity = okta_progress, okta_pity
        self.crystals, self.scrolls, self.silver = crystals, scrolls, silver
        self.exquisite_crystals, self.attempts = exquisite, attempts
        self.valks10_used, self.valks50_used, self.valks100_used = valks10, valks50, valks100
        self.level_drops, self.anvil_triggers = level_drops, anvil_triggers

        return FastRunResult(
            crystals=crystals,
            scrolls=scrolls,
            silver=silver,
            exquisite_crystals=exquisite,
            attempts=attempts,
            valks10_used=valks10,
            valks50_used=valks50,
            valks100_used=valks100,
            final_level=level,
            success=level >= target_level,
            level_drops=level_drops,
            anvil_triggers=anvil_triggers,
        )
