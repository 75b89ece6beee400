"""Build API endpoints for non-custodial operations.

These endpoints prepare unsigned transactions for client-side signing.
NO signing happens server-side. The client must:
1. Sign the returned ``xdr`` with its wallet
2. POST the signed envelope to ``/submit``
"""

from fastapi import APIRouter, Depends

from stellardex.operations import OperationKind
from stellardex.web.contracts.builds import (
    DepositBuildRequest,
    PoolTrustlineBuildRequest,
    PoolTrustlineEnvelope,
    SwapBuildRequest,
    SwapEnvelope,
    TrustlineBuildRequest,
    UnsignedEnvelope,
    WithdrawBuildRequest,
)
from stellardex.web.dependencies import get_intent_builder
from stellardex.web.services.intent_builder import IntentBuilder

router = APIRouter(prefix="/build", tags=["build"])


@router.post(f"/{OperationKind.TRUSTLINE.value}", response_model=UnsignedEnvelope)
async def build_trustline(
    request: TrustlineBuildRequest,
    builder: IntentBuilder = Depends(get_intent_builder),
) -> UnsignedEnvelope:
    """Build a trustline so the account can hold a non-native asset."""
    return await builder.build(OperationKind.TRUSTLINE, request)


@router.post(f"/{OperationKind.POOL_TRUSTLINE.value}", response_model=PoolTrustlineEnvelope)
async def build_pool_trustline(
    request: PoolTrustlineBuildRequest,
    builder: IntentBuilder = Depends(get_intent_builder),
) -> PoolTrustlineEnvelope:
    """Build a pool-share trustline; also returns the pool id.

    The pool id does not depend on the order of ``assetA`` and ``assetB``.
    """
    return await builder.build(OperationKind.POOL_TRUSTLINE, request)


@router.post(f"/{OperationKind.DEPOSIT.value}", response_model=UnsignedEnvelope)
async def build_deposit(
    request: DepositBuildRequest,
    builder: IntentBuilder = Depends(get_intent_builder),
) -> UnsignedEnvelope:
    """Build a liquidity pool deposit."""
    return await builder.build(OperationKind.DEPOSIT, request)


@router.post(f"/{OperationKind.WITHDRAW.value}", response_model=UnsignedEnvelope)
async def build_withdraw(
    request: WithdrawBuildRequest,
    builder: IntentBuilder = Depends(get_intent_builder),
) -> UnsignedEnvelope:
    """Build a liquidity pool withdrawal."""
    return await builder.build(OperationKind.WITHDRAW, request)


@router.post(f"/{OperationKind.SWAP.value}", response_model=SwapEnvelope)
async def build_swap(
    request: SwapBuildRequest,
    builder: IntentBuilder = Depends(get_intent_builder),
) -> SwapEnvelope:
    """Build a strict-send path payment swap.

    Returns the expected and minimum destination amounts alongside the
    envelope; the minimum is what the network enforces.
    """
    return await builder.build(OperationKind.SWAP, request)
