"""Liquidity pool API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from stellardex.web.dependencies import get_query_facade
from stellardex.web.services.intent_builder import validate_pool_id
from stellardex.web.services.query_facade import QueryFacade

router = APIRouter(prefix="/pools", tags=["pools"])


@router.get("")
async def get_pools(
    reserves: Optional[str] = Query(
        None, description="Comma-separated reserve assets: native or CODE:ISSUER"
    ),
    facade: QueryFacade = Depends(get_query_facade),
) -> list[dict]:
    """List liquidity pools, optionally only those holding the given reserves."""
    return await facade.get_pools(reserves)


@router.get("/{pool_id}")
async def get_pool(
    pool_id: str,
    facade: QueryFacade = Depends(get_query_facade),
) -> dict:
    """Get reserves, total shares and fee for one pool."""
    return await facade.get_pool(validate_pool_id(pool_id))
