"""Market price modelling and silver conversion for enhancement resources."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .data import DEFAULT_PRICES, DEFAULT_TABLE, ProbabilityTable


@dataclass(frozen=True)
class MarketPrices:
    """Silver price per unit of each consumable."""

    crystal_price: int = DEFAULT_PRICES["crystal_price"]
    restoration_bundle_price: int = DEFAULT_PRICES["restoration_bundle_price"]
    valks10_price: int = DEFAULT_PRICES["valks10_price"]
    valks50_price: int = DEFAULT_PRICES["valks50_price"]
    valks100_price: int = DEFAULT_PRICES["valks100_price"]

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if value < 0:
                raise ValueError(f"Price '{name}' cannot be negative.")

    @classmethod
    def from_mapping(cls, prices: dict[str, int]) -> "MarketPrices":
        """Build prices from a partial mapping, defaulting missing entries."""

        merged = dict(DEFAULT_PRICES)
        merged.update({key: int(value) for key, value in prices.items() if key in DEFAULT_PRICES})
        return cls(**merged)

    def valks_prices(self) -> tuple[int, int, int]:
        return (self.valks10_price, self.valks50_price, self.valks100_price)


def restoration_attempt_cost(bundle_price: int, table: ProbabilityTable = DEFAULT_TABLE) -> int:
    """Return the silver cost of one restoration attempt from a market bundle price.

    Parameters
    ----------
    bundle_price:
        Market price of ``table.restoration_bundle_size`` scrolls.
    table:
        Rules providing the bundle size and scrolls consumed per attempt.
    """

    if bundle_price == 0:
        return 0
    return (table.restoration_per_attempt * bundle_price) // table.restoration_bundle_size


def exquisite_crystal_cost(prices: MarketPrices, table: ProbabilityTable = DEFAULT_TABLE) -> int:
    """Return the silver cost of crafting one exquisite black crystal."""

    recipe = table.exquisite_recipe
    return (
        (recipe["restoration_scrolls"] * prices.restoration_bundle_price)
        // table.restoration_bundle_size
        + recipe["valks100"] * prices.valks100_price
        + recipe["pristine_black_crystal"] * prices.crystal_price
    )


class CostModel:
    """Silver conversion of consumable counts for a fixed price table."""

    def __init__(self, prices: MarketPrices, table: ProbabilityTable = DEFAULT_TABLE) -> None:
        self.prices = prices
        self.table = table
        self.restoration_attempt = restoration_attempt_cost(prices.restoration_bundle_price, table)
        self.exquisite = exquisite_crystal_cost(prices, table)

    def restoration_attempts(self, scrolls: int) -> int:
        """Return how many restoration attempts consumed ``scrolls`` scrolls."""

        return scrolls // self.table.restoration_per_attempt

    def silver_for(
        self,
        crystals: int = 0,
        scrolls: int = 0,
        valks10: int = 0,
        valks50: int = 0,
        valks100: int = 0,
        exquisite: int = 0,
    ) -> int:
        """Return total silver spent for the given consumable counts."""

        return (
            crystals * self.prices.crystal_price
            + self.restoration_attempts(scrolls) * self.restoration_attempt
            + valks10 * self.prices.valks10_price
            + valks50 * self.prices.valks50_price
            + valks100 * self.prices.valks100_price
            + exquisite * self.exquisite
        )
