"""Pydantic models and result records for the pool engine."""

from pairpool.models.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swapped
from pairpool.models.results import DepositResult, PairInfo, SwapResult, WithdrawResult
from pairpool.models.types import Address, Uint256

__all__ = [
    # Types
    "Address",
    "Uint256",
    # Events
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "PoolEvent",
    # Results
    "DepositResult",
    "WithdrawResult",
    "SwapResult",
    "PairInfo",
]
