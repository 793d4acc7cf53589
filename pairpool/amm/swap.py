"""Exact-input swap sizing and reserve update."""

from __future__ import annotations

import structlog

from pairpool.amm.math import ConstantProduct
from pairpool.errors import InsufficientLiquidity, InsufficientOutputAmount
from pairpool.pools.state import PairState
from pairpool.safe_int import S

logger = structlog.get_logger()


def compute_swap_output(
    state: PairState,
    asset_in: str,
    amount_in: int,
    amount_out_min: int,
    amm: ConstantProduct,
) -> int:
    """Output of an exact-input swap, checked against the slippage floor.

    Raises:
        InsufficientInputAmount: If amount_in is zero
        InsufficientLiquidity: If the pair has an empty reserve
        InsufficientOutputAmount: If the output is zero or below amount_out_min
    """
    reserve_in, reserve_out = state.get_reserves(asset_in)
    amount_out = amm.get_amount_out(amount_in, reserve_in, reserve_out)

    if amount_out == 0 or amount_out < amount_out_min:
        raise InsufficientOutputAmount(
            f"Swap output {amount_out} below minimum {max(amount_out_min, 1)}"
        )

    logger.debug(
        "swap_sized",
        pair=state.key[-8:],
        amount_in=amount_in,
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
    )
    return amount_out


def apply_swap(state: PairState, asset_in: str, amount_in: int, amount_out: int) -> None:
    """Move amount_in into and amount_out out of the reserves.

    Raises:
        InsufficientLiquidity: If the reserve product would decrease
    """
    reserve_in, reserve_out = state.get_reserves(asset_in)
    k_before = S(reserve_in) * S(reserve_out)

    new_reserve_in = (S(reserve_in) + S(amount_in)).to_uint256()
    new_reserve_out = (S(reserve_out) - S(amount_out)).value

    if S(new_reserve_in) * S(new_reserve_out) < k_before:
        raise InsufficientLiquidity(
            f"Swap would decrease reserve product: {reserve_in}*{reserve_out} -> "
            f"{new_reserve_in}*{new_reserve_out}"
        )
    state.set_reserves(asset_in, new_reserve_in, new_reserve_out)


__all__ = ["apply_swap", "compute_swap_output"]
