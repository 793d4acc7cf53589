"""Test helpers module for shared test utilities.

- constants: Asset and holder addresses, clock values
- factories: Engine, custody and pool factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    DEADLINE,
    FUNDING,
    NOW,
    OWNER,
    USDC,
    WETH,
    ZERO,
)
from tests.helpers.factories import FixedClock, funded_custody, make_engine, seed_pair

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "ZERO",
    "ALICE",
    "BOB",
    "CAROL",
    "OWNER",
    "NOW",
    "DEADLINE",
    "FUNDING",
    # Factories
    "FixedClock",
    "funded_custody",
    "make_engine",
    "seed_pair",
]
