"""Pytest configuration and fixtures."""

import dataclasses
import os
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from stellar_sdk import Asset, Keypair, Network, TransactionEnvelope

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["NETWORK"] = "TESTNET"
os.environ["HORIZON_URL"] = "http://horizon.test"
os.environ["FRIENDBOT_URL"] = "http://friendbot.test"

from stellardex.assets import asset_query_param, liquidity_pool_id
from stellardex.config import get_settings
from stellardex.errors import (
    AccountNotFound,
    HorizonRequestError,
    SubmissionRejected,
)
from stellardex.horizon.base import AccountSnapshot, LedgerService

PASSPHRASE = Network.TESTNET_NETWORK_PASSPHRASE


class FakeLedger(LedgerService):
    """In-memory ledger with Horizon-like behavior for the tests.

    Submission checks the envelope's sequence number against the stored
    account and advances it, so a replayed envelope fails with tx_bad_seq.
    """

    def __init__(self):
        self.accounts: dict[str, AccountSnapshot] = {}
        self.pools: dict[str, dict] = {}
        self.failing_pools: set[str] = set()
        self.transactions: dict[str, list[dict]] = {}
        self.asset_records: list[dict] = []
        self.paths: list[dict] = []
        self.path_error: Optional[Exception] = None
        self.submit_error: Optional[SubmissionRejected] = None
        self.status_error: Optional[Exception] = None
        self.passphrase = get_settings().network_passphrase

        self.calls: list[str] = []
        self.path_requests: list[tuple] = []
        self.submitted: list[str] = []
        self.funded: list[str] = []

    def add_account(self, account_id: str, sequence: int = 100, balances: Optional[list] = None) -> AccountSnapshot:
        snapshot = AccountSnapshot(
            account_id=account_id,
            sequence=sequence,
            balances=balances if balances is not None else [
                {"asset_type": "native", "balance": "10000.0000000"}
            ],
            subentry_count=0,
            thresholds={"low_threshold": 0, "med_threshold": 0, "high_threshold": 0},
        )
        self.accounts[account_id] = snapshot
        return snapshot

    def add_pool(self, asset_a: Asset, asset_b: Asset, total_shares: str = "1000.0000000") -> dict:
        pool_id = liquidity_pool_id(asset_a, asset_b, 30)
        record = {
            "id": pool_id,
            "fee_bp": 30,
            "type": "constant_product",
            "total_shares": total_shares,
            "reserves": [
                {"asset": asset_query_param(asset_a), "amount": "5000.0000000"},
                {"asset": asset_query_param(asset_b), "amount": "4750.0000000"},
            ],
        }
        self.pools[pool_id] = record
        return record

    def add_transactions(self, account_id: str, count: int) -> list[dict]:
        records = [
            {
                "id": f"tx{i:04d}",
                "hash": f"{i:064x}",
                "created_at": f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}Z",
                "successful": True,
                "fee_charged": "100",
                "operation_count": 1,
                "source_account": account_id,
                "paging_token": str(1000 + i),
            }
            for i in range(1, count + 1)
        ]
        self.transactions[account_id] = records
        return records

    async def load_account(self, account_id: str) -> AccountSnapshot:
        self.calls.append("load_account")
        if account_id not in self.accounts:
            raise AccountNotFound(f"Account not found: {account_id}")
        return self.accounts[account_id]

    async def liquidity_pools(self, reserves: Optional[str] = None, limit: int = 20) -> list[dict]:
        self.calls.append("liquidity_pools")
        pools = list(self.pools.values())
        if reserves:
            wanted = set(reserves.split(","))
            pools = [p for p in pools if wanted <= {r["asset"] for r in p["reserves"]}]
        return pools[:limit]

    async def liquidity_pool(self, pool_id: str) -> dict:
        self.calls.append("liquidity_pool")
        if pool_id in self.failing_pools or pool_id not in self.pools:
            raise HorizonRequestError("Resource Missing", status=404, title="Resource Missing")
        return self.pools[pool_id]

    async def account_transactions(
        self,
        account_id: str,
        limit: int,
        cursor: Optional[str] = None,
        order: str = "desc",
    ) -> list[dict]:
        self.calls.append("account_transactions")
        records = sorted(
            self.transactions.get(account_id, []),
            key=lambda r: int(r["paging_token"]),
            reverse=(order == "desc"),
        )
        if cursor:
            if order == "desc":
                records = [r for r in records if int(r["paging_token"]) < int(cursor)]
            else:
                records = [r for r in records if int(r["paging_token"]) > int(cursor)]
        return records[:limit]

    async def strict_send_paths(self, source_asset, source_amount, destination_assets) -> list[dict]:
        self.calls.append("strict_send_paths")
        self.path_requests.append((source_asset, source_amount, destination_assets))
        if self.path_error:
            raise self.path_error
        return list(self.paths)

    async def submit_transaction(self, envelope_xdr: str) -> dict:
        self.calls.append("submit_transaction")
        self.submitted.append(envelope_xdr)
        if self.submit_error:
            raise self.submit_error

        envelope = TransactionEnvelope.from_xdr(envelope_xdr, PASSPHRASE)
        source = envelope.transaction.source.account_id
        sequence = envelope.transaction.sequence
        account = self.accounts.get(source)
        if account is None or sequence != account.sequence + 1:
            extras = {
                "envelope_xdr": envelope_xdr,
                "result_codes": {"transaction": "tx_bad_seq"},
            }
            raise SubmissionRejected(
                "Transaction Failed: tx_bad_seq",
                result_codes=extras["result_codes"],
                extras=extras,
            )

        self.accounts[source] = dataclasses.replace(account, sequence=sequence)
        return {
            "hash": envelope.hash_hex(),
            "ledger": 4242,
            "successful": True,
            "envelope_xdr": envelope_xdr,
        }

    async def assets(self, code: Optional[str] = None, limit: int = 20) -> list[dict]:
        self.calls.append("assets")
        records = [a for a in self.asset_records if not code or a["asset_code"] == code]
        return records[:limit]

    async def network_status(self) -> dict:
        self.calls.append("network_status")
        if self.status_error:
            raise self.status_error
        return {
            "network_passphrase": self.passphrase,
            "history_latest_ledger": 1234567,
            "core_latest_ledger": 1234568,
        }

    async def fund_account(self, account_id: str) -> dict:
        self.calls.append("fund_account")
        self.funded.append(account_id)
        self.add_account(account_id, sequence=1)
        return {"successful": True, "hash": "f" * 64}


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def user_keypair() -> Keypair:
    return Keypair.random()


@pytest.fixture
def issuer_keypair() -> Keypair:
    return Keypair.random()


@pytest.fixture
def usdc(issuer_keypair) -> Asset:
    return Asset("USDC", issuer_keypair.public_key)


@pytest.fixture
def funded_account(ledger, user_keypair) -> AccountSnapshot:
    """Account with 10000 XLM at sequence 100."""
    return ledger.add_account(user_keypair.public_key, sequence=100)


@pytest.fixture
def test_app(ledger):
    """Create test application backed by the fake ledger."""
    from stellardex.api.app import create_app
    from stellardex.web.dependencies import get_ledger

    app = create_app()
    app.dependency_overrides[get_ledger] = lambda: ledger
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def decode():
    """Decode a test network envelope."""

    def _decode(xdr: str) -> TransactionEnvelope:
        return TransactionEnvelope.from_xdr(xdr, PASSPHRASE)

    return _decode
