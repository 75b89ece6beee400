"""Read-only query facade over the ledger service.

Passes account, pool, history, asset and path-search queries through to
the ledger with light reshaping. Nothing is cached: pool reserves move
between requests, so every query goes back to the network.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from stellar_sdk import Asset

from stellardex.assets import asset_label
from stellardex.config import Settings, get_settings
from stellardex.errors import NoPathFound, PathSearchError, StellarDexError
from stellardex.horizon.base import LedgerService
from stellardex.web.contracts.accounts import AccountResponse
from stellardex.web.contracts.quotes import PathQuote
from stellardex.web.contracts.transactions import (
    TransactionHistoryResponse,
    TransactionSummary,
)

logger = logging.getLogger(__name__)


class QueryFacade:
    """Service for read-only ledger queries.

    This is a READ-ONLY service that does not build or submit transactions.
    """

    def __init__(self, ledger: LedgerService, settings: Optional[Settings] = None):
        self.ledger = ledger
        self.settings = settings or get_settings()

    async def get_account(self, public_key: str) -> AccountResponse:
        snapshot = await self.ledger.load_account(public_key)
        return AccountResponse(**snapshot.to_dict())

    async def get_pools(self, reserves: Optional[str] = None) -> list[dict]:
        return await self.ledger.liquidity_pools(
            reserves=reserves or None, limit=self.settings.pools_page_limit
        )

    async def get_pool(self, pool_id: str) -> dict:
        return await self.ledger.liquidity_pool(pool_id)

    async def get_account_pools(self, public_key: str) -> list[dict]:
        """Pool-share balances of an account, each enriched with pool details.

        A failed lookup for one pool leaves that entry without
        ``pool_details`` instead of failing the whole list.
        """
        snapshot = await self.ledger.load_account(public_key)
        shares = snapshot.pool_share_balances

        async def enrich(share: dict) -> dict:
            pool_id = share.get("liquidity_pool_id")
            if not pool_id:
                logger.warning(f"Pool share balance without a pool id for {public_key[:8]}...")
                return dict(share)
            try:
                pool = await self.ledger.liquidity_pool(pool_id)
            except StellarDexError as e:
                logger.warning(f"Could not load pool {pool_id} for {public_key[:8]}...: {e}")
                return dict(share)
            return {**share, "pool_details": pool}

        return list(await asyncio.gather(*(enrich(share) for share in shares)))

    def clamp_limit(self, limit: Optional[int]) -> int:
        """History page size within 1..transactions_max_limit."""
        if not limit:
            return self.settings.transactions_default_limit
        return min(max(1, limit), self.settings.transactions_max_limit)

    async def get_transaction_history(
        self,
        public_key: str,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> TransactionHistoryResponse:
        """One page of transactions, newest first.

        ``next_cursor`` is the paging token of the last row when the page is
        full, and None once a short page signals the end of history.
        """
        page_size = self.clamp_limit(limit)
        records = await self.ledger.account_transactions(
            public_key, limit=page_size, cursor=cursor or None, order="desc"
        )

        has_more = len(records) == page_size and len(records) > 0
        return TransactionHistoryResponse(
            transactions=[TransactionSummary.from_horizon(r) for r in records],
            next_cursor=records[-1]["paging_token"] if has_more else None,
        )

    async def find_paths(self, source: Asset, dest: Asset, amount: str) -> list[dict]:
        """Run a strict-send path search, best path first.

        Raises:
            PathSearchError: If the search request fails
            NoPathFound: If no path exists for the pair and amount
        """
        source_code = asset_label(source)
        dest_code = asset_label(dest)
        try:
            records = await self.ledger.strict_send_paths(source, amount, [dest])
        except StellarDexError as e:
            logger.error(f"Path finding error for {source_code} -> {dest_code}: {e}")
            raise PathSearchError(
                f"Failed to find swap path: {e.message}. This may be because there is "
                f"no liquidity pool available for {source_code} to {dest_code}."
            ) from e

        if not records:
            raise NoPathFound(
                f"No swap path found from {source_code} to {dest_code}. There may not be "
                f"enough liquidity or no liquidity pool exists for this pair."
            )
        return records

    async def get_swap_quote(self, source: Asset, dest: Asset, amount: str) -> AsyncIterator[PathQuote]:
        """Candidate paths for a swap, one fresh search per call.

        The iterator is finite and cannot be restarted; call again for a
        new quote.
        """
        for record in await self.find_paths(source, dest, amount):
            yield PathQuote.from_horizon(record)

    async def get_assets(self, code: Optional[str] = None) -> list[dict]:
        return await self.ledger.assets(code=code or None, limit=self.settings.assets_page_limit)

    async def fund_testnet(self, public_key: str) -> dict:
        logger.info(f"Requesting testnet funding for {public_key[:8]}...")
        return await self.ledger.fund_account(public_key)
