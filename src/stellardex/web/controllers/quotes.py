"""Quote and asset lookup endpoints.

Quotes are READ-ONLY path searches; nothing is built or executed.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from stellardex.amounts import to_decimal
from stellardex.assets import to_asset
from stellardex.errors import ValidationError
from stellardex.web.contracts.quotes import PathQuote
from stellardex.web.dependencies import get_query_facade
from stellardex.web.services.intent_builder import amount_str
from stellardex.web.services.query_facade import QueryFacade

router = APIRouter(tags=["quotes"])


@router.get("/quote", response_model=list[PathQuote])
async def get_swap_quote(
    source_code: str = Query(..., alias="sourceCode"),
    dest_code: str = Query(..., alias="destCode"),
    amount: str = Query(..., description="Exact amount to send"),
    source_issuer: Optional[str] = Query(None, alias="sourceIssuer"),
    dest_issuer: Optional[str] = Query(None, alias="destIssuer"),
    facade: QueryFacade = Depends(get_query_facade),
) -> list[PathQuote]:
    """Get candidate strict-send paths, best first.

    Quotes are estimates only: reserves can move before a swap is built.
    """
    value = to_decimal(amount)
    if value <= 0:
        raise ValidationError(f"amount must be positive, got {amount}")

    source = to_asset(source_code, source_issuer)
    dest = to_asset(dest_code, dest_issuer)
    return [quote async for quote in facade.get_swap_quote(source, dest, amount_str(value))]


@router.get("/assets")
async def get_assets(
    code: Optional[str] = Query(None, description="Filter by asset code"),
    facade: QueryFacade = Depends(get_query_facade),
) -> list[dict]:
    """Search issued assets for token selection."""
    return await facade.get_assets(code)
