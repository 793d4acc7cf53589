"""Return records for pool engine operations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DepositResult:
    """Settled deposit, amounts in the caller-supplied asset order."""

    amount_a: int
    amount_b: int
    liquidity: int


@dataclass(frozen=True)
class WithdrawResult:
    """Settled withdrawal, amounts in the caller-supplied asset order."""

    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class SwapResult:
    """Settled exact-input swap."""

    amount_in: int
    amount_out: int
    asset_in: str
    asset_out: str


@dataclass(frozen=True)
class PairInfo:
    """Read-only view of a pair in the caller-supplied asset order.

    All fields are zero (and exists is False) when the pair was never
    created.
    """

    reserve_a: int
    reserve_b: int
    total_shares: int
    exists: bool
