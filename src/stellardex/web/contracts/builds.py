"""Build request and response contracts.

Requests carry the caller's public key and operation parameters; responses
carry an unsigned base64 XDR envelope for client-side signing. Field names
follow the browser client's camelCase wire format.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetRef(BaseModel):
    """Asset in wire form; ``XLM`` with no issuer is native."""

    code: str = Field(..., description="Asset code (XLM for native)")
    issuer: Optional[str] = Field(None, description="Issuer account, absent for native")


class BuildRequest(BaseModel):
    """Fields common to every build request."""

    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(..., alias="publicKey", description="Source account public key")


class TrustlineBuildRequest(BuildRequest):
    asset_code: str = Field(..., alias="assetCode", description="Asset code to trust")
    asset_issuer: Optional[str] = Field(None, alias="assetIssuer", description="Asset issuer")


class PoolTrustlineBuildRequest(BuildRequest):
    asset_a: AssetRef = Field(..., alias="assetA", description="First pool asset (any order)")
    asset_b: AssetRef = Field(..., alias="assetB", description="Second pool asset (any order)")


class DepositBuildRequest(BuildRequest):
    pool_id: str = Field(..., alias="poolId", description="Hex liquidity pool id")
    max_amount_a: Decimal = Field(..., alias="maxAmountA", gt=0, description="Max of asset A to deposit")
    max_amount_b: Decimal = Field(..., alias="maxAmountB", gt=0, description="Max of asset B to deposit")
    min_price: Optional[Decimal] = Field(None, alias="minPrice", gt=0, description="Min A/B price")
    max_price: Optional[Decimal] = Field(None, alias="maxPrice", gt=0, description="Max A/B price")


class WithdrawBuildRequest(BuildRequest):
    pool_id: str = Field(..., alias="poolId", description="Hex liquidity pool id")
    amount: Decimal = Field(..., gt=0, description="Pool shares to redeem")
    min_amount_a: Optional[Decimal] = Field(None, alias="minAmountA", ge=0, description="Min of asset A")
    min_amount_b: Optional[Decimal] = Field(None, alias="minAmountB", ge=0, description="Min of asset B")


class SwapBuildRequest(BuildRequest):
    source_asset: AssetRef = Field(..., alias="sourceAsset", description="Asset to send")
    dest_asset: AssetRef = Field(..., alias="destAsset", description="Asset to receive")
    amount: Decimal = Field(..., gt=0, description="Exact amount to send")
    slippage: Optional[Decimal] = Field(
        None, ge=0, le=100, description="Slippage tolerance in percent (default from settings)"
    )


class UnsignedEnvelope(BaseModel):
    """Unsigned transaction for client-side signing."""

    xdr: str = Field(..., description="Base64 XDR transaction envelope")


class PoolTrustlineEnvelope(UnsignedEnvelope):
    model_config = ConfigDict(populate_by_name=True)

    pool_id: str = Field(..., alias="poolId", description="Hex id of the pool being trusted")


class SwapEnvelope(UnsignedEnvelope):
    model_config = ConfigDict(populate_by_name=True)

    expected_amount: str = Field(..., alias="expectedAmount", description="Quoted destination amount")
    min_amount: str = Field(..., alias="minAmount", description="Minimum accepted destination amount")
    path: list[dict[str, Any]] = Field(default_factory=list, description="Intermediate path assets")
