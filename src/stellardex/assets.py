"""Asset helpers on top of stellar_sdk.

Wire form of an asset is ``{"code": ..., "issuer": ...}``; ``XLM`` without an
issuer is the native asset. Horizon uses ``asset_type``/``asset_code``/
``asset_issuer`` triples and ``native`` / ``CODE:ISSUER`` query strings.
"""

import logging
from typing import Optional

from stellar_sdk import Asset, LiquidityPoolAsset

from stellardex.errors import InvalidAsset

logger = logging.getLogger(__name__)

NATIVE_CODE = "XLM"


def to_asset(code: Optional[str], issuer: Optional[str] = None) -> Asset:
    """Build an Asset from a code and optional issuer.

    Raises:
        InvalidAsset: If the code is empty, the issuer is missing for a
            non-native code, or either fails network validation.
    """
    if not code:
        raise InvalidAsset("Asset code is required")
    if not issuer:
        if code == NATIVE_CODE:
            return Asset.native()
        raise InvalidAsset(f"Asset issuer is required for non-native asset {code}")

    try:
        return Asset(code, issuer)
    except ValueError as e:
        raise InvalidAsset(f"Invalid asset {code}:{issuer}: {e}") from e


def asset_from_dict(data: dict) -> Asset:
    """Build an Asset from its ``{code, issuer}`` wire form."""
    return to_asset(data.get("code"), data.get("issuer"))


def asset_from_horizon(record: dict) -> Asset:
    """Build an Asset from a Horizon ``asset_type``/``asset_code``/``asset_issuer`` record."""
    if record.get("asset_type") == "native":
        return Asset.native()
    return to_asset(record.get("asset_code"), record.get("asset_issuer"))


def asset_to_dict(asset: Asset) -> dict:
    if asset.is_native():
        return {"code": NATIVE_CODE, "issuer": None}
    return {"code": asset.code, "issuer": asset.issuer}


def asset_query_param(asset: Asset) -> str:
    """Horizon query form: ``native`` or ``CODE:ISSUER``."""
    if asset.is_native():
        return "native"
    return f"{asset.code}:{asset.issuer}"


def asset_label(asset: Asset) -> str:
    return NATIVE_CODE if asset.is_native() else asset.code


def order_assets(asset_a: Asset, asset_b: Asset) -> tuple[Asset, Asset]:
    """Return the pair in the network's canonical order.

    Native sorts first, then alphanum4 before alphanum12, then by code and
    finally by issuer.
    """
    if asset_a == asset_b:
        raise InvalidAsset(f"A liquidity pool needs two distinct assets, got {asset_label(asset_a)} twice")
    if LiquidityPoolAsset.is_valid_lexicographic_order(asset_a, asset_b):
        return asset_a, asset_b
    return asset_b, asset_a


def pool_share_asset(asset_a: Asset, asset_b: Asset, fee_bp: int) -> LiquidityPoolAsset:
    """Pool-share asset for a pair, independent of argument order."""
    first, second = order_assets(asset_a, asset_b)
    try:
        return LiquidityPoolAsset(first, second, fee_bp)
    except ValueError as e:
        raise InvalidAsset(f"Invalid liquidity pool parameters: {e}") from e


def liquidity_pool_id(asset_a: Asset, asset_b: Asset, fee_bp: int) -> str:
    """Hex pool id: SHA-256 of the ordered pair plus fee."""
    return pool_share_asset(asset_a, asset_b, fee_bp).liquidity_pool_id
