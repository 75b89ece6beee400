"""Account API endpoints.

Read-only views of account state fetched live from the ledger, plus the
testnet faucet passthrough.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from stellardex.config import get_settings
from stellardex.errors import ValidationError
from stellardex.web.contracts.accounts import AccountResponse, FundRequest
from stellardex.web.contracts.transactions import TransactionHistoryResponse
from stellardex.web.dependencies import get_query_facade
from stellardex.web.services.intent_builder import validate_public_key
from stellardex.web.services.query_facade import QueryFacade

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])


@router.get("/account/{public_key}", response_model=AccountResponse)
async def get_account(
    public_key: str,
    facade: QueryFacade = Depends(get_query_facade),
) -> AccountResponse:
    """Get account id, sequence, balances, subentry count and thresholds."""
    return await facade.get_account(validate_public_key(public_key))


@router.get("/account/{public_key}/transactions", response_model=TransactionHistoryResponse)
async def get_account_transactions(
    public_key: str,
    limit: Optional[int] = Query(None, description="Page size (1-100, default 30)"),
    cursor: Optional[str] = Query(None, description="Cursor from a previous page"),
    facade: QueryFacade = Depends(get_query_facade),
) -> TransactionHistoryResponse:
    """Get one page of the account's transactions, newest first.

    Pass ``next_cursor`` from the previous page to continue; it is null
    when there are no more transactions.
    """
    return await facade.get_transaction_history(validate_public_key(public_key), limit, cursor)


@router.get("/account/{public_key}/pools")
async def get_account_pools(
    public_key: str,
    facade: QueryFacade = Depends(get_query_facade),
) -> list[dict]:
    """Get the account's pool-share balances with pool details attached."""
    return await facade.get_account_pools(validate_public_key(public_key))


@router.post("/fund-testnet")
async def fund_testnet(
    request: FundRequest,
    facade: QueryFacade = Depends(get_query_facade),
) -> dict:
    """Fund a test network account through friendbot."""
    if not get_settings().is_testnet:
        raise ValidationError("Faucet funding is only available on the test network")
    return await facade.fund_testnet(validate_public_key(request.public_key))
