"""Per-pair pool state."""

from __future__ import annotations

from dataclasses import dataclass, field

from pairpool.errors import InsufficientLiquidityBalance
from pairpool.models.types import normalize_address
from pairpool.safe_int import S


@dataclass
class PairState:
    """Reserves and share ledger for one pair.

    asset0/asset1 are in canonical order and fixed at creation. The holder
    ledger is owned by value, so copy() yields a fully independent working
    copy that can be mutated and later committed or discarded.
    """

    key: str
    asset0: str
    asset1: str
    reserve0: int = 0
    reserve1: int = 0
    total_shares: int = 0
    # holder -> share balance; absent holders have zero
    balances: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True before the first deposit or after every share is redeemed."""
        return self.reserve0 == 0 and self.reserve1 == 0

    def is_asset0(self, asset: str) -> bool:
        """True if asset is the canonical low asset of this pair.

        Raises:
            ValueError: If asset is not in this pair
        """
        asset_norm = normalize_address(asset)
        if asset_norm == self.asset0:
            return True
        if asset_norm == self.asset1:
            return False
        raise ValueError(f"Asset {asset} not in pair {self.key}")

    def get_reserves(self, asset_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if self.is_asset0(asset_in):
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0

    def set_reserves(self, asset_a: str, reserve_a: int, reserve_b: int) -> None:
        """Set reserves given in (asset_a, other) order."""
        if self.is_asset0(asset_a):
            self.reserve0, self.reserve1 = reserve_a, reserve_b
        else:
            self.reserve0, self.reserve1 = reserve_b, reserve_a

    def balance_of(self, holder: str) -> int:
        return self.balances.get(normalize_address(holder), 0)

    def mint(self, holder: str, amount: int) -> None:
        """Credit shares to holder and the total supply."""
        holder_norm = normalize_address(holder)
        self.balances[holder_norm] = (S(self.balances.get(holder_norm, 0)) + S(amount)).value
        self.total_shares = (S(self.total_shares) + S(amount)).value

    def burn(self, holder: str, amount: int) -> None:
        """Debit shares from holder and the total supply.

        Raises:
            InsufficientLiquidityBalance: If holder owns fewer than amount shares
        """
        holder_norm = normalize_address(holder)
        balance = self.balances.get(holder_norm, 0)
        if balance < amount:
            raise InsufficientLiquidityBalance(
                f"Holder {holder_norm} has {balance} shares, cannot redeem {amount}"
            )
        remaining = balance - amount
        if remaining:
            self.balances[holder_norm] = remaining
        else:
            self.balances.pop(holder_norm, None)
        self.total_shares = (S(self.total_shares) - S(amount)).value

    def copy(self) -> PairState:
        """Independent working copy, holder ledger included."""
        return PairState(
            key=self.key,
            asset0=self.asset0,
            asset1=self.asset1,
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            total_shares=self.total_shares,
            balances=dict(self.balances),
        )
