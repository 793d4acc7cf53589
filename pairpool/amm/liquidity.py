"""Deposit sizing, share issuance and redemption math.

Functions here read a PairState working copy and return amounts; the
mutating helpers apply already-validated amounts to that copy. Nothing in
this module touches the registry or custody.
"""

from __future__ import annotations

import structlog

from pairpool.amm.math import floor_sqrt, quote
from pairpool.errors import InsufficientLiquidity, InsufficientLiquidityAmounts
from pairpool.pools.state import PairState
from pairpool.safe_int import S

logger = structlog.get_logger()


def compute_deposit_amounts(
    state: PairState,
    asset_a: str,
    amount_a_desired: int,
    amount_b_desired: int,
    amount_a_min: int,
    amount_b_min: int,
) -> tuple[int, int]:
    """Size a deposit against the current reserve ratio.

    An empty pool accepts the desired amounts as given. Otherwise B is
    quoted against the desired A first; only if that exceeds the desired B
    is A quoted against the desired B instead. Either way neither desired
    amount is exceeded and the existing ratio is kept, so existing holders
    are never diluted.

    Args:
        state: Pair working copy
        asset_a: Which pair asset the "a" amounts refer to
        amount_a_desired: Most of A the caller will deposit
        amount_b_desired: Most of B the caller will deposit
        amount_a_min: Least of A the caller accepts
        amount_b_min: Least of B the caller accepts

    Returns:
        (amount_a, amount_b) to deposit, in the caller's order

    Raises:
        InsufficientLiquidityAmounts: If a desired amount is zero or the
            matched amount falls below its minimum
    """
    if amount_a_desired == 0 or amount_b_desired == 0:
        raise InsufficientLiquidityAmounts(
            f"Deposit amounts must be positive: ({amount_a_desired}, {amount_b_desired})"
        )

    if state.is_empty:
        return amount_a_desired, amount_b_desired

    reserve_a, reserve_b = state.get_reserves(asset_a)

    amount_b_optimal = quote(amount_a_desired, reserve_a, reserve_b)
    if amount_b_optimal <= amount_b_desired:
        if amount_b_optimal < amount_b_min:
            raise InsufficientLiquidityAmounts(
                f"Matched B amount {amount_b_optimal} below minimum {amount_b_min}"
            )
        amount_a, amount_b = amount_a_desired, amount_b_optimal
    else:
        amount_a_optimal = quote(amount_b_desired, reserve_b, reserve_a)
        # quote(b_desired) <= a_desired follows from quote(a_desired) > b_desired
        if amount_a_optimal > amount_a_desired:
            raise InsufficientLiquidityAmounts(
                f"Matched A amount {amount_a_optimal} exceeds desired {amount_a_desired}"
            )
        if amount_a_optimal < amount_a_min:
            raise InsufficientLiquidityAmounts(
                f"Matched A amount {amount_a_optimal} below minimum {amount_a_min}"
            )
        amount_a, amount_b = amount_a_optimal, amount_b_desired

    if amount_a == 0 or amount_b == 0:
        raise InsufficientLiquidityAmounts(
            f"Deposit rounds to zero at current ratio: ({amount_a}, {amount_b})"
        )

    logger.debug(
        "deposit_sized",
        pair=state.key[-8:],
        amount_a=amount_a,
        amount_b=amount_b,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
    )
    return amount_a, amount_b


def compute_shares_to_mint(
    state: PairState,
    amount0: int,
    amount1: int,
    minimum_liquidity: int,
) -> int:
    """Shares minted for a deposit given in canonical order.

    First deposit: floor(sqrt(amount0 * amount1)), which must exceed
    minimum_liquidity. Later deposits: the smaller of the two pro-rata
    claims, min(amount0 * T / reserve0, amount1 * T / reserve1).

    Raises:
        InsufficientLiquidity: If the first deposit does not clear the floor
            or a later deposit mints zero shares
    """
    if state.total_shares == 0:
        shares = floor_sqrt((S(amount0) * S(amount1)).value)
        if shares <= minimum_liquidity:
            raise InsufficientLiquidity(
                f"First deposit mints {shares} shares, must exceed {minimum_liquidity}"
            )
        return shares

    total = S(state.total_shares)
    shares = (S(amount0) * total // S(state.reserve0)).min(S(amount1) * total // S(state.reserve1))
    if shares == 0:
        raise InsufficientLiquidity("Deposit too small to mint any shares")
    return shares.value


def compute_redemption(state: PairState, liquidity: int) -> tuple[int, int]:
    """Assets released for burning liquidity shares, in canonical order.

    Floors both amounts, so summed over any split of the supply the
    redemptions never exceed the reserves.
    """
    total = S(state.total_shares)
    amount0 = S(liquidity) * S(state.reserve0) // total
    amount1 = S(liquidity) * S(state.reserve1) // total
    return amount0.value, amount1.value


def apply_deposit(state: PairState, amount0: int, amount1: int, shares: int, to: str) -> None:
    """Add canonical-order amounts to reserves and credit shares to `to`."""
    state.reserve0 = (S(state.reserve0) + S(amount0)).to_uint256()
    state.reserve1 = (S(state.reserve1) + S(amount1)).to_uint256()
    state.mint(to, shares)


def apply_withdrawal(
    state: PairState,
    holder: str,
    liquidity: int,
    amount0: int,
    amount1: int,
    minimum_liquidity: int,
) -> None:
    """Burn holder's shares and debit canonical-order amounts from reserves.

    Raises:
        InsufficientLiquidityBalance: If holder owns fewer shares
        InsufficientLiquidity: If the remaining supply would be non-zero but
            not above minimum_liquidity
    """
    state.burn(holder, liquidity)
    if 0 < state.total_shares <= minimum_liquidity:
        raise InsufficientLiquidity(
            f"Withdrawal leaves {state.total_shares} shares, must be 0 or above {minimum_liquidity}"
        )
    state.reserve0 = (S(state.reserve0) - S(amount0)).value
    state.reserve1 = (S(state.reserve1) - S(amount1)).value


__all__ = [
    "apply_deposit",
    "apply_withdrawal",
    "compute_deposit_amounts",
    "compute_redemption",
    "compute_shares_to_mint",
]
