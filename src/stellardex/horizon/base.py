"""Abstract ledger query/submission interface.

The builder, gateway and facade depend only on ``LedgerService``; the Horizon
adapter and test fakes both implement it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from stellar_sdk import Account, Asset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountSnapshot:
    """Account state as fetched from the network. Never mutated after load."""

    account_id: str
    sequence: int
    balances: list[dict] = field(default_factory=list)
    subentry_count: int = 0
    thresholds: dict = field(default_factory=dict)

    @classmethod
    def from_horizon(cls, data: dict) -> "AccountSnapshot":
        return cls(
            account_id=data["id"],
            sequence=int(data["sequence"]),
            balances=list(data.get("balances", [])),
            subentry_count=int(data.get("subentry_count", 0)),
            thresholds=dict(data.get("thresholds", {})),
        )

    @property
    def pool_share_balances(self) -> list[dict]:
        return [b for b in self.balances if b.get("asset_type") == "liquidity_pool_shares"]

    def to_source_account(self) -> Account:
        """Fresh SDK account object; the builder bumps its sequence on build."""
        return Account(self.account_id, self.sequence)

    def to_dict(self) -> dict:
        return {
            "id": self.account_id,
            "sequence": str(self.sequence),
            "balances": self.balances,
            "subentry_count": self.subentry_count,
            "thresholds": self.thresholds,
        }


class LedgerService(ABC):
    """Ledger query and submission capability."""

    @abstractmethod
    async def load_account(self, account_id: str) -> AccountSnapshot:
        """Load current account state.

        Raises:
            AccountNotFound: If the account does not exist
            RemoteUnavailable: If the service cannot be reached
        """
        pass

    @abstractmethod
    async def liquidity_pools(self, reserves: Optional[str] = None, limit: int = 20) -> list[dict]:
        """List liquidity pools, optionally filtered by reserve assets."""
        pass

    @abstractmethod
    async def liquidity_pool(self, pool_id: str) -> dict:
        """Get a single liquidity pool."""
        pass

    @abstractmethod
    async def account_transactions(
        self,
        account_id: str,
        limit: int,
        cursor: Optional[str] = None,
        order: str = "desc",
    ) -> list[dict]:
        """One page of an account's transactions, ordered by paging token."""
        pass

    @abstractmethod
    async def strict_send_paths(
        self,
        source_asset: Asset,
        source_amount: str,
        destination_assets: list[Asset],
    ) -> list[dict]:
        """Candidate strict-send paths, best first."""
        pass

    @abstractmethod
    async def submit_transaction(self, envelope_xdr: str) -> dict:
        """Submit a signed envelope once.

        Raises:
            SubmissionRejected: If the network refuses the transaction
        """
        pass

    @abstractmethod
    async def assets(self, code: Optional[str] = None, limit: int = 20) -> list[dict]:
        """Search issued assets, optionally by code."""
        pass

    @abstractmethod
    async def network_status(self) -> dict:
        """Root document of the ledger service: passphrase and latest ledger."""
        pass

    @abstractmethod
    async def fund_account(self, account_id: str) -> dict:
        """Fund a test network account through the faucet."""
        pass

    async def close(self) -> None:
        """Release transport resources."""
        return None
