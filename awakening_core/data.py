"""Domain constants, house-rule helpers, and the injectable probability table."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final, Optional

MIN_LEVEL: Final[int] = 0
MAX_LEVEL: Final[int] = 10

ENHANCEMENT_RATES: Final[dict[int, float]] = {
    1: 0.7,
    2: 0.6,
    3: 0.4,
    4: 0.2,
    5: 0.1,
    6: 0.07,
    7: 0.05,
    8: 0.03,
    9: 0.01,
    10: 0.005,
}

# Ancient Anvil energy; reaching the threshold guarantees the next attempt.
ANVIL_THRESHOLDS: Final[dict[int, int]] = {
    1: 0,
    2: 0,
    3: 2,
    4: 3,
    5: 5,
    6: 8,
    7: 10,
    8: 17,
    9: 50,
    10: 100,
}

FALLBACK_RATE: Final[float] = 0.01

VALKS_MULTIPLIER_10: Final[float] = 1.1
VALKS_MULTIPLIER_50: Final[float] = 1.5
VALKS_MULTIPLIER_100: Final[float] = 2.0
VALKS_TYPES: Final[tuple[str, ...]] = ("10", "50", "100")

RESTORATION_PER_ATTEMPT: Final[int] = 200
RESTORATION_SUCCESS_RATE: Final[float] = 0.5
RESTORATION_MARKET_BUNDLE_SIZE: Final[int] = 1000

HEPTA_SUB_ENHANCEMENTS: Final[int] = 5
OKTA_SUB_ENHANCEMENTS: Final[int] = 10
HEPTA_START_LEVEL: Final[int] = 7
OKTA_START_LEVEL: Final[int] = 8
HEPTA_OKTA_SUCCESS_RATE: Final[float] = 0.06
HEPTA_OKTA_ANVIL_PITY: Final[int] = 17
HEPTA_OKTA_CRYSTALS_PER_ATTEMPT: Final[int] = 1

EXQUISITE_BLACK_CRYSTAL_RECIPE: Final[dict[str, int]] = {
    "restoration_scrolls": 1050,
    "valks100": 2,
    "pristine_black_crystal": 10,
}

ROMAN_NUMERALS: Final[dict[int, str]] = {
    0: "0",
    1: "I",
    2: "II",
    3: "III",
    4: "IV",
    5: "V",
    6: "VI",
    7: "VII",
    8: "VIII",
    9: "IX",
    10: "X",
}

DEFAULT_PRICES: Final[dict[str, int]] = {
    "crystal_price": 50_000_000,
    "restoration_bundle_price": 100_000_000,  # per 1000 scrolls, 20M per attempt
    "valks10_price": 10_000_000,
    "valks50_price": 50_000_000,
    "valks100_price": 100_000_000,
}


@dataclass(frozen=True)
class SubPathRules:
    """Parameters of a Hepta/Okta style guaranteed-progress path."""

    name: str
    start_level: int
    required: int
    success_rate: float = HEPTA_OKTA_SUCCESS_RATE
    pity: int = HEPTA_OKTA_ANVIL_PITY
    crystals_per_attempt: int = HEPTA_OKTA_CRYSTALS_PER_ATTEMPT

    @property
    def target_level(self) -> int:
        return self.start_level + 1


@dataclass(frozen=True)
class ProbabilityTable:
    """Immutable set of enhancement rules injected into every engine.

    Custom house rules are built with :func:`dataclasses.replace` or
    :func:`load_house_rules` rather than by editing module state, so batches
    with different rules can run side by side.
    """

    rates: Mapping[int, float] = field(default_factory=lambda: dict(ENHANCEMENT_RATES))
    anvil_thresholds: Mapping[int, int] = field(default_factory=lambda: dict(ANVIL_THRESHOLDS))
    valks_multipliers: tuple[float, float, float] = (
        VALKS_MULTIPLIER_10,
        VALKS_MULTIPLIER_50,
        VALKS_MULTIPLIER_100,
    )
    restoration_per_attempt: int = RESTORATION_PER_ATTEMPT
    restoration_success_rate: float = RESTORATION_SUCCESS_RATE
    restoration_bundle_size: int = RESTORATION_MARKET_BUNDLE_SIZE
    hepta: SubPathRules = SubPathRules("Hepta", HEPTA_START_LEVEL, HEPTA_SUB_ENHANCEMENTS)
    okta: SubPathRules = SubPathRules("Okta", OKTA_START_LEVEL, OKTA_SUB_ENHANCEMENTS)
    exquisite_recipe: Mapping[str, int] = field(
        default_factory=lambda: dict(EXQUISITE_BLACK_CRYSTAL_RECIPE)
    )

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` when the table cannot describe the ladder.

        Raises
        ------
        ValueError
            If a tier is missing, a rate lies outside ``[0, 1]`` or a threshold
            is negative, or a sub-path would leave the ladder.
        """

        expected = set(range(1, MAX_LEVEL + 1))
        if set(self.rates) != expected:
            raise ValueError(f"rates must define tiers 1-{MAX_LEVEL}, got {sorted(self.rates)}")
        if set(self.anvil_thresholds) != expected:
            raise ValueError(
                f"anvil_thresholds must define tiers 1-{MAX_LEVEL}, "
                f"got {sorted(self.anvil_thresholds)}"
            )
        for tier, rate in self.rates.items():
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"Success rate for tier {tier} must be within [0, 1].")
        for tier, threshold in self.anvil_thresholds.items():
            if threshold < 0:
                raise ValueError(f"Anvil threshold for tier {tier} cannot be negative.")
        if any(multiplier <= 0 for multiplier in self.valks_multipliers):
            raise ValueError("Valks multipliers must be positive.")
        if not 0.0 <= self.restoration_success_rate <= 1.0:
            raise ValueError("Restoration success rate must be within [0, 1].")
        if self.restoration_bundle_size <= 0:
            raise ValueError("Restoration bundle size must be positive.")
        for path in (self.hepta, self.okta):
            if path.required <= 0:
                raise ValueError(f"{path.name} must require at least one sub-enhancement.")
            if not 0.0 <= path.success_rate <= 1.0:
                raise ValueError(f"{path.name} success rate must be within [0, 1].")
            if not MIN_LEVEL <= path.start_level < MAX_LEVEL:
                raise ValueError(
                    f"{path.name} must start between {MIN_LEVEL} and {MAX_LEVEL - 1}, "
                    f"got {path.start_level}."
                )

    def base_rate(self, tier: int) -> float:
        """Return the unbuffed success rate for reaching ``tier``."""

        return self.rates.get(tier, FALLBACK_RATE)

    def rate_for(self, tier: int, valks_applied: tuple[bool, bool, bool] = (False, False, False)) -> float:
        """Return the effective success rate for ``tier`` with stacked Valks, capped at 1."""

        rate = self.base_rate(tier)
        for applied, multiplier in zip(valks_applied, self.valks_multipliers):
            if applied:
                rate *= multiplier
        return min(1.0, rate)

    def anvil_threshold(self, tier: int) -> int:
        """Return the anvil threshold for ``tier``; 0 disables pity."""

        return self.anvil_thresholds.get(tier, 0)

    def threshold_cache(self) -> list[int]:
        """Return anvil thresholds indexed by tier (index 0 unused)."""

        return [0] + [self.anvil_threshold(tier) for tier in range(1, MAX_LEVEL + 1)]


DEFAULT_TABLE: Final[ProbabilityTable] = ProbabilityTable()


def roman(level: int) -> str:
    """Return the display numeral for an awakening level."""

    return ROMAN_NUMERALS.get(level, str(level))


# ---- User-maintained house rules and price presets ------------------------


def _parse_tier_mapping(raw: object, cast: type) -> dict[int, object]:
    """Coerce a JSON object with tier keys into ``{tier: cast(value)}``."""

    if not isinstance(raw, Mapping):
        return {}
    parsed: dict[int, object] = {}
    for key, value in raw.items():
        try:
            tier = int(key)
            parsed[tier] = cast(value)
        except (TypeError, ValueError):
            continue
    return parsed


def house_rules_from_mapping(
    raw_rules: Mapping[str, object],
    base: ProbabilityTable = DEFAULT_TABLE,
) -> ProbabilityTable:
    """Overlay JSON-compatible house rules onto ``base``.

    Only ``rates``, ``anvil_thresholds``, ``valks_multipliers`` and
    ``restoration_success_rate`` are recognised. Unknown tiers are ignored; the
    resulting table is validated, so out-of-range values raise ``ValueError``.
    """

    rates = dict(base.rates)
    for tier, value in _parse_tier_mapping(raw_rules.get("rates"), float).items():
        if tier in rates:
            rates[tier] = value  # type: ignore[assignment]

    thresholds = dict(base.anvil_thresholds)
    for tier, value in _parse_tier_mapping(raw_rules.get("anvil_thresholds"), int).items():
        if tier in thresholds:
            thresholds[tier] = value  # type: ignore[assignment]

    multipliers = base.valks_multipliers
    raw_multipliers = raw_rules.get("valks_multipliers")
    if isinstance(raw_multipliers, (list, tuple)) and len(raw_multipliers) == 3:
        try:
            multipliers = tuple(float(value) for value in raw_multipliers)  # type: ignore[assignment]
        except (TypeError, ValueError):
            multipliers = base.valks_multipliers

    restoration_rate = base.restoration_success_rate
    raw_restoration = raw_rules.get("restoration_success_rate")
    if raw_restoration is not None:
        try:
            restoration_rate = float(raw_restoration)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            restoration_rate = base.restoration_success_rate

    return replace(
        base,
        rates=rates,
        anvil_thresholds=thresholds,
        valks_multipliers=multipliers,
        restoration_success_rate=restoration_rate,
    )


def load_house_rules(path: str | Path | None) -> ProbabilityTable:
    """Load a house-rule JSON file, returning the default table when unavailable."""

    if not path:
        return DEFAULT_TABLE
    try:
        raw_data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (FileNotFoundError, OSError, json.JSONDecodeError):
        return DEFAULT_TABLE
    if not isinstance(raw_data, Mapping):
        return DEFAULT_TABLE
    return house_rules_from_mapping(raw_data)


def load_price_presets(path: str | Path | None) -> dict[str, dict[str, int]]:
    """Load named market price presets from the given JSON file."""

    if not path:
        return {}
    try:
        raw_data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError):
        return {}

    if not isinstance(raw_data, Mapping):
        return {}

    presets: dict[str, dict[str, int]] = {}
    for name, prices in raw_data.items():
        if not isinstance(name, str) or not isinstance(prices, Mapping):
            continue

        parsed: dict[str, int] = {}
        for price_name, value in prices.items():
            if price_name not in DEFAULT_PRICES:
                continue
            try:
                parsed[price_name] = int(value)
            except (TypeError, ValueError):
                continue

        if parsed:
            presets[name] = parsed

    return presets


def save_price_presets(presets: Mapping[str, Mapping[str, int]], path: str | Path) -> None:
    """Persist named market price presets as JSON."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    serializable = {
        name: {key: int(value) for key, value in sorted(prices.items()) if key in DEFAULT_PRICES}
        for name, prices in presets.items()
    }
    target.write_text(json.dumps(serializable, ensure_ascii=False, indent=2), encoding="utf-8")


def valks_label(applied: tuple[bool, bool, bool]) -> Optional[str]:
    """Return the ``"10+50+100"`` style label for the applied Valks, or ``None``."""

    names = [name for name, used in zip(VALKS_TYPES, applied) if used]
    return "+".join(names) if names else None
