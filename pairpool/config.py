"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pairpool.constants import FEE_DENOMINATOR, FEE_NUMERATOR, MINIMUM_LIQUIDITY, PRICE_SCALE


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for pool pricing and share issuance.

    Holding these values on an instance rather than reading module constants
    makes it easy to test with different fee levels and share floors.

    Attributes:
        fee_numerator: Part of the swap input that counts toward pricing (default: 997)
        fee_denominator: Fee base (default: 1000), so 997/1000 is a 0.3% fee
        minimum_liquidity: First deposit must mint strictly more shares than
            this, and a withdrawal may not leave 0 < total_shares <= this
        price_scale: Fixed-point scale for spot price queries (default: 1e18)
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    price_scale: int = PRICE_SCALE

    def __post_init__(self) -> None:
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, fee_denominator]: "
                f"{self.fee_numerator}/{self.fee_denominator}"
            )
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")
        if self.price_scale <= 0:
            raise ValueError(f"price_scale must be positive: {self.price_scale}")

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a configuration from environment variables.

        Configuration via environment variables:
        - PAIRPOOL_FEE_NUMERATOR (default: 997)
        - PAIRPOOL_FEE_DENOMINATOR (default: 1000)
        - PAIRPOOL_MINIMUM_LIQUIDITY (default: 100)
        - PAIRPOOL_PRICE_SCALE (default: 10**18)
        """
        return cls(
            fee_numerator=int(os.environ.get("PAIRPOOL_FEE_NUMERATOR", str(FEE_NUMERATOR))),
            fee_denominator=int(os.environ.get("PAIRPOOL_FEE_DENOMINATOR", str(FEE_DENOMINATOR))),
            minimum_liquidity=int(
                os.environ.get("PAIRPOOL_MINIMUM_LIQUIDITY", str(MINIMUM_LIQUIDITY))
            ),
            price_scale=int(os.environ.get("PAIRPOOL_PRICE_SCALE", str(PRICE_SCALE))),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
