"""Pair registry owned by a pool engine.

The registry maps canonical pair keys to PairState and grows monotonically:
pairs are created on their first committed deposit and never removed. It
also holds the per-pair guard that keeps a nested call from observing or
mutating a pair in the middle of an operation.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from pairpool.errors import PairNotFound, ReentrantCall
from pairpool.pools.pair_key import pair_key, sort_assets
from pairpool.pools.state import PairState

logger = structlog.get_logger()


class PairRegistry:
    """Registry of pairs keyed by canonical pair key.

    Lookups return working copies; nothing a caller does to a returned
    PairState is visible to the registry until commit().
    """

    def __init__(self) -> None:
        self._pairs: dict[str, PairState] = {}
        # Parallel existence flag; insertion order is creation order
        self._exists: dict[str, bool] = {}
        # Keys with an operation in flight
        self._locked: set[str] = set()

    def __len__(self) -> int:
        return len(self._pairs)

    def exists(self, key: str) -> bool:
        return self._exists.get(key, False)

    def get(self, key: str) -> PairState | None:
        """Working copy of the pair for key, or None if absent."""
        state = self._pairs.get(key)
        return state.copy() if state is not None else None

    def get_pair(self, asset_a: str, asset_b: str) -> PairState:
        """Working copy of the pair for two assets (order independent).

        Raises:
            InvalidAssetPair: If the identifiers do not form a valid pair
            PairNotFound: If no pair was created for these assets
        """
        key = pair_key(asset_a, asset_b)
        state = self.get(key)
        if state is None:
            low, high = sort_assets(asset_a, asset_b)
            raise PairNotFound(f"No pair for {low} / {high}")
        return state

    def load_or_new(self, asset_a: str, asset_b: str) -> PairState:
        """Working copy of the pair, or a fresh zero-state pair if absent.

        A fresh pair is not registered until it is committed.
        """
        key = pair_key(asset_a, asset_b)
        state = self.get(key)
        if state is not None:
            return state
        asset0, asset1 = sort_assets(asset_a, asset_b)
        return PairState(key=key, asset0=asset0, asset1=asset1)

    def commit(self, state: PairState) -> None:
        """Store a working copy as the pair's current state."""
        if state.key not in self._pairs:
            logger.info(
                "pair_created",
                pair=state.key[-8:],
                asset0=state.asset0[-8:],
                asset1=state.asset1[-8:],
            )
            self._exists[state.key] = True
        self._pairs[state.key] = state.copy()

    def pairs(self) -> list[tuple[str, str]]:
        """Canonical (asset0, asset1) of every pair, in creation order."""
        return [(self._pairs[k].asset0, self._pairs[k].asset1) for k in self._exists]

    def is_locked(self, key: str) -> bool:
        return key in self._locked

    @contextmanager
    def guard(self, key: str) -> Iterator[None]:
        """Hold exclusive access to a pair for the duration of an operation.

        Raises:
            ReentrantCall: If an operation on this pair is already in flight
        """
        if key in self._locked:
            logger.warning("reentrant_call_rejected", pair=key[-8:])
            raise ReentrantCall(f"Pair {key} is locked by an in-flight operation")
        self._locked.add(key)
        try:
            yield
        finally:
            self._locked.discard(key)
