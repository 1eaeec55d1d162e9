import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from awakening_core import SimulationConfig


@pytest.fixture
def scripted():
    """Factory for rng stand-ins that yield the given draws in order."""

    def _make(values):
        iterator = iter(values)
        return lambda: next(iterator)

    return _make


@pytest.fixture
def plain_config():
    """0 -> 3 with no Valks, no restoration and no sub-paths."""

    return SimulationConfig(
        start_level=0,
        target_level=3,
        restoration_from=0,
        valks10_from=0,
        valks50_from=0,
        valks100_from=0,
    )
