"""Request and response contracts for the web layer.

These Pydantic models define the API interface for web clients.
Build contracts describe unsigned envelopes only; nothing here carries keys.
"""

from stellardex.web.contracts.accounts import AccountResponse, FundRequest
from stellardex.web.contracts.builds import (
    AssetRef,
    DepositBuildRequest,
    PoolTrustlineBuildRequest,
    PoolTrustlineEnvelope,
    SwapBuildRequest,
    SwapEnvelope,
    TrustlineBuildRequest,
    UnsignedEnvelope,
    WithdrawBuildRequest,
)
from stellardex.web.contracts.quotes import PathQuote
from stellardex.web.contracts.transactions import (
    SubmitRequest,
    TransactionHistoryResponse,
    TransactionSummary,
)

__all__ = [
    # Account contracts
    "AccountResponse",
    "FundRequest",
    # Build contracts
    "AssetRef",
    "TrustlineBuildRequest",
    "PoolTrustlineBuildRequest",
    "DepositBuildRequest",
    "WithdrawBuildRequest",
    "SwapBuildRequest",
    "UnsignedEnvelope",
    "PoolTrustlineEnvelope",
    "SwapEnvelope",
    # Quote contracts
    "PathQuote",
    # Transaction contracts
    "SubmitRequest",
    "TransactionSummary",
    "TransactionHistoryResponse",
]
