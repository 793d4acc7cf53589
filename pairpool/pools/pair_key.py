"""Canonical ordering and identity for asset pairs.

Assets are ordered by their 20-byte address value, the same ordering
UniswapV2 uses for token0/token1. The pair key hashes the ABI encoding of
the ordered addresses, so it is identical for either argument order.
"""

from __future__ import annotations

import hashlib

from eth_abi import encode  # type: ignore[attr-defined]

from pairpool.errors import InvalidAssetPair
from pairpool.models.types import is_null_address, is_valid_address, normalize_address


def _validated(asset: object, position: str) -> str:
    if not isinstance(asset, str) or not is_valid_address(normalize_address(asset)):
        raise InvalidAssetPair(f"Invalid {position} asset identifier: {asset!r}")
    if is_null_address(asset):
        raise InvalidAssetPair(f"Null {position} asset identifier")
    return normalize_address(asset)


def sort_assets(asset_a: str, asset_b: str) -> tuple[str, str]:
    """Return (low, high) in canonical order.

    Raises:
        InvalidAssetPair: If either identifier is null or malformed, or
            both name the same asset
    """
    a = _validated(asset_a, "first")
    b = _validated(asset_b, "second")
    if a == b:
        raise InvalidAssetPair(f"Pair needs two distinct assets, got {a} twice")

    # Compare address bytes; equal-length lowercase hex sorts the same way
    if bytes.fromhex(a[2:]) > bytes.fromhex(b[2:]):
        return b, a
    return a, b


def pair_key(asset_a: str, asset_b: str) -> str:
    """Order-independent key for a pair of assets.

    Returns:
        sha256 of abi.encode(address low, address high), 0x-prefixed hex

    Raises:
        InvalidAssetPair: Same conditions as sort_assets
    """
    low, high = sort_assets(asset_a, asset_b)
    encoded = encode(["address", "address"], [bytes.fromhex(low[2:]), bytes.fromhex(high[2:])])
    return "0x" + hashlib.sha256(encoded).hexdigest()


__all__ = ["pair_key", "sort_assets"]
