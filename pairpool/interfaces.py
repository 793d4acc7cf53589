"""Collaborator interfaces for the pool engine.

The engine moves assets through a Custody, asks an ApprovalGate before
committing a swap, and hands settled records to an EventSink. Each is a
Protocol so any object with the right methods can be injected; in-memory
implementations are provided for embedding and tests.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import structlog

from pairpool.errors import CustodyError
from pairpool.models.events import LiquidityAdded, LiquidityRemoved, Swapped
from pairpool.models.types import normalize_address
from pairpool.safe_int import S

logger = structlog.get_logger()

PoolEventRecord = LiquidityAdded | LiquidityRemoved | Swapped


@runtime_checkable
class Custody(Protocol):
    """Moves assets between holders and engine custody.

    Each call either fully succeeds or raises without effect. The engine
    does not track allowances; authorization to pull is custody's concern.
    """

    def pull(self, asset: str, holder: str, amount: int) -> None:
        """Move amount of asset from holder into engine custody."""
        ...

    def push(self, asset: str, holder: str, amount: int) -> None:
        """Move amount of asset from engine custody to holder."""
        ...


@runtime_checkable
class ApprovalGate(Protocol):
    """Decides whether a fully sized swap may be committed."""

    def approve(self, asset_in: str, asset_out: str, amount_in: int, amount_out: int) -> bool:
        """Return True to allow the swap; False or raising rejects it."""
        ...


@runtime_checkable
class EventSink(Protocol):
    """Receives settled operation records."""

    def emit(self, event: PoolEventRecord) -> None: ...


class AllowAllGate:
    """Approval gate that approves every swap."""

    def approve(self, asset_in: str, asset_out: str, amount_in: int, amount_out: int) -> bool:
        _ = (asset_in, asset_out, amount_in, amount_out)
        return True


class EventLog:
    """EventSink that keeps records in order and fans them out to subscribers.

    Usage:
        log = EventLog()
        log.subscribe(indexer.handle)
        engine = PoolEngine(custody=custody, events=log)
    """

    def __init__(self) -> None:
        self.records: list[PoolEventRecord] = []
        self._subscribers: list[Callable[[PoolEventRecord], None]] = []

    def subscribe(self, callback: Callable[[PoolEventRecord], None]) -> None:
        self._subscribers.append(callback)

    def emit(self, event: PoolEventRecord) -> None:
        self.records.append(event)
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                # later subscribers still run
                logger.exception(
                    "event_subscriber_failed",
                    kind=event.kind,
                    subscriber=getattr(callback, "__qualname__", repr(callback)),
                )


class InMemoryCustody:
    """Custody backed by in-memory balances.

    Holder balances are keyed by (asset, holder); `held` tracks what the
    engine has in custody per asset, which must always equal the sum of
    that asset's reserves across pairs.
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._held: dict[str, int] = defaultdict(int)

    def mint(self, asset: str, holder: str, amount: int) -> None:
        """Credit holder with new units of asset (funding for embedding and tests)."""
        key = (normalize_address(asset), normalize_address(holder))
        self._balances[key] = (S(self._balances[key]) + S(amount)).to_uint256()

    def balance_of(self, asset: str, holder: str) -> int:
        return self._balances.get((normalize_address(asset), normalize_address(holder)), 0)

    def held(self, asset: str) -> int:
        """Amount of asset currently in engine custody."""
        return self._held.get(normalize_address(asset), 0)

    def pull(self, asset: str, holder: str, amount: int) -> None:
        """Move amount from holder into custody.

        Raises:
            CustodyError: If holder's balance is below amount
        """
        asset_norm = normalize_address(asset)
        key = (asset_norm, normalize_address(holder))
        balance = self._balances.get(key, 0)
        if balance < amount:
            raise CustodyError(f"{key[1]} holds {balance} of {asset_norm}, cannot pull {amount}")
        self._balances[key] = balance - amount
        self._held[asset_norm] = (S(self._held[asset_norm]) + S(amount)).to_uint256()

    def push(self, asset: str, holder: str, amount: int) -> None:
        """Move amount from custody to holder.

        Raises:
            CustodyError: If custody holds less than amount of asset
        """
        asset_norm = normalize_address(asset)
        held = self._held.get(asset_norm, 0)
        if held < amount:
            raise CustodyError(f"Custody holds {held} of {asset_norm}, cannot push {amount}")
        self._held[asset_norm] = held - amount
        key = (asset_norm, normalize_address(holder))
        self._balances[key] = (S(self._balances[key]) + S(amount)).to_uint256()
