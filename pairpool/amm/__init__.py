"""Constant product pricing, liquidity and swap math."""

from pairpool.amm.liquidity import (
    apply_deposit,
    apply_withdrawal,
    compute_deposit_amounts,
    compute_redemption,
    compute_shares_to_mint,
)
from pairpool.amm.math import (
    ConstantProduct,
    constant_product,
    direct_hop,
    floor_sqrt,
    quote,
    spot_price,
)
from pairpool.amm.swap import apply_swap, compute_swap_output

__all__ = [
    # Pricing
    "ConstantProduct",
    "constant_product",
    "direct_hop",
    "floor_sqrt",
    "quote",
    "spot_price",
    # Liquidity
    "compute_deposit_amounts",
    "compute_shares_to_mint",
    "compute_redemption",
    "apply_deposit",
    "apply_withdrawal",
    # Swap
    "compute_swap_output",
    "apply_swap",
]
