import pytest

from awakening_core import (
    AwakeningEngine,
    ProbabilityTable,
    ResourceLimits,
    SimulationConfig,
    run_capped,
)

CONFIGS = [
    SimulationConfig(),
    SimulationConfig(start_level=0, target_level=4, restoration_from=0),
    SimulationConfig(start_level=5, target_level=10, restoration_from=5, use_hepta=True, use_okta=True),
    SimulationConfig(start_level=7, target_level=9, start_hepta=2, use_okta=True),
    SimulationConfig(start_level=3, target_level=8, valks10_from=4, valks50_from=0, valks100_from=6),
]


@pytest.mark.parametrize("config", CONFIGS)
def test_fast_path_matches_recorded_path(config):
    for seed in range(15):
        recorded_engine = AwakeningEngine(config, seed=seed)
        recorded = recorded_engine.run_full_simulation(record_steps=True)
        fast_engine = AwakeningEngine(config, seed=seed)
        fast = fast_engine.run_fast()
        assert fast == recorded.scalar_totals()
        assert fast_engine.anvil_energy == list(recorded.anvil_energy)
        assert fast.attempts == len(recorded.steps)


def test_empty_limits_match_unlimited():
    config = SimulationConfig(start_level=4, target_level=9, use_hepta=True)
    for seed in (3, 17, 99):
        capped = run_capped(config, seed, ResourceLimits())
        unlimited = run_capped(config, seed, None)
        assert capped == unlimited
        assert capped.success


def test_limits_reject_negative_caps():
    with pytest.raises(ValueError):
        ResourceLimits(crystals=-1)
    assert ResourceLimits.unlimited().is_unlimited()
    assert not ResourceLimits(scrolls=0).is_unlimited()


def test_crystal_cap_stops_run():
    result = run_capped(SimulationConfig(), seed=42, limits=ResourceLimits(crystals=5))
    assert result.crystals == 5
    assert result.attempts == 5
    assert not result.success
    assert result.final_level < 9


def test_exquisite_cap_stops_sub_path():
    config = SimulationConfig(start_level=7, target_level=8, use_hepta=True)
    result = run_capped(config, seed=1, limits=ResourceLimits(exquisite=2))
    assert result.exquisite_crystals == 2
    assert result.final_level == 7
    assert not result.success


def test_scroll_cap_stops_before_restoration(scripted):
    config = SimulationConfig(
        start_level=5,
        target_level=6,
        restoration_from=5,
        valks10_from=0,
        valks50_from=0,
        valks100_from=0,
    )
    engine = AwakeningEngine(config)
    engine.rng = scripted([0.99])
    result = engine.run_fast(ResourceLimits(scrolls=0))
    assert result.crystals == 1
    assert result.scrolls == 0
    assert result.final_level == 5
    assert not result.success
    assert engine.anvil_energy[6] == 1


def test_valks_cap_blocks_buffed_attempt():
    config = SimulationConfig(start_level=0, target_level=3, valks10_from=1)
    result = run_capped(config, seed=5, limits=ResourceLimits(valks10=0))
    assert result.attempts == 0
    assert result.silver == 0
    assert not result.success


def test_certain_rates_reach_ten_in_ten_attempts():
    table = ProbabilityTable(rates={tier: 1.0 for tier in range(1, 11)})
    config = SimulationConfig(
        start_level=0,
        target_level=10,
        restoration_from=0,
        valks10_from=0,
        valks50_from=0,
        valks100_from=0,
    )
    result = AwakeningEngine(config, seed=0, table=table).run_fast()
    assert result.success
    assert result.attempts == 10
    assert result.crystals == 10
    assert result.silver == 10 * config.prices.crystal_price


NO_VALKS = dict(valks10_from=0, valks50_from=0, valks100_from=0)

KNOWN_RUNS = [
    (
        42,
        SimulationConfig(
            start_level=5, target_level=9, restoration_from=6, use_hepta=True, use_okta=True, **NO_VALKS
        ),
        dict(
            crystals=645,
            scrolls=1200,
            silver=161_170_000_000,
            exquisite_crystals=160,
            attempts=805,
            level_drops=306,
            anvil_triggers=74,
        ),
    ),
    (
        2024,
        SimulationConfig(start_level=0, target_level=7, restoration_from=5, **NO_VALKS),
        dict(
            crystals=1047,
            scrolls=10200,
            silver=53_370_000_000,
            exquisite_crystals=0,
            attempts=1047,
            level_drops=489,
            anvil_triggers=117,
        ),
    ),
]


@pytest.mark.parametrize("seed, config, expected", KNOWN_RUNS)
def test_known_run_totals(seed, config, expected):
    result = AwakeningEngine(config, seed=seed).run_fast()
    assert result.success
    assert result.final_level == config.target_level
    assert {name: getattr(result, name) for name in expected} == expected


@pytest.mark.parametrize("config", CONFIGS)
def test_counters_match_step_history(config):
    for seed in range(10):
        result = AwakeningEngine(config, seed=seed).run_full_simulation(record_steps=True)
        drops = sum(step.ending_level < step.starting_level for step in result.steps)
        triggers = sum(step.anvil_triggered for step in result.steps)
        assert result.level_drops == drops
        assert result.anvil_triggers == triggers
        fast = AwakeningEngine(config, seed=seed).run_fast()
        assert (fast.level_drops, fast.anvil_triggers) == (drops, triggers)


def test_capped_run_keeps_counters():
    config = SimulationConfig(start_level=3, target_level=8, restoration_from=0, **NO_VALKS)
    engine = AwakeningEngine(config, seed=8)
    result = engine.run_fast(ResourceLimits(crystals=30))
    assert not result.success
    assert engine.stats()["level_drops"] == result.level_drops
    assert engine.stats()["anvil_triggers"] == result.anvil_triggers
    assert result.level_drops > 0
