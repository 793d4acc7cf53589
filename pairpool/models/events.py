"""Pydantic models for the structured records emitted by pool operations.

These are consumed by external indexers, not by the engine. Field aliases
follow the camelCase convention used for serialized records.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Discriminator, Field

from pairpool.models.types import Address, Uint256


class LiquidityAdded(BaseModel):
    """A settled deposit.

    Amounts are in the caller-supplied asset order (asset_a, asset_b).
    """

    kind: Literal["deposit"] = "deposit"
    pair: str = Field(description="Canonical pair key (0x-prefixed sha256 hex)")
    sender: Address = Field(description="Holder the assets were pulled from")
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")
    liquidity: Uint256 = Field(description="Shares minted to the beneficiary")
    to: Address = Field(description="Beneficiary credited with the shares")

    model_config = {"populate_by_name": True, "frozen": True}


class LiquidityRemoved(BaseModel):
    """A settled withdrawal, amounts in the caller-supplied asset order."""

    kind: Literal["withdrawal"] = "withdrawal"
    pair: str
    sender: Address = Field(description="Holder whose shares were burned")
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")
    liquidity: Uint256 = Field(description="Shares burned")
    to: Address = Field(description="Beneficiary receiving the assets")

    model_config = {"populate_by_name": True, "frozen": True}


class Swapped(BaseModel):
    """A settled exact-input swap."""

    kind: Literal["swap"] = "swap"
    pair: str
    sender: Address
    asset_in: Address = Field(alias="assetIn")
    asset_out: Address = Field(alias="assetOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    to: Address

    model_config = {"populate_by_name": True, "frozen": True}


PoolEvent = Annotated[
    LiquidityAdded | LiquidityRemoved | Swapped,
    Discriminator("kind"),
]
