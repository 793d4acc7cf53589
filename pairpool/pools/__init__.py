"""Pair identity, state and registry."""

from .pair_key import pair_key, sort_assets
from .registry import PairRegistry
from .state import PairState

__all__ = [
    "PairRegistry",
    "PairState",
    "pair_key",
    "sort_assets",
]
