"""Transaction history and submission contracts."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmitRequest(BaseModel):
    """Signed envelope to forward to the network."""

    model_config = ConfigDict(populate_by_name=True)

    signed_xdr: str = Field(..., alias="signedXdr", description="Signed base64 XDR envelope")


class TransactionSummary(BaseModel):
    """One row of an account's transaction history."""

    id: str
    hash: str
    created_at: str
    successful: bool
    fee_charged: str
    operation_count: int
    source_account: str
    paging_token: str

    @classmethod
    def from_horizon(cls, record: dict) -> "TransactionSummary":
        return cls(
            id=record["id"],
            hash=record["hash"],
            created_at=record["created_at"],
            successful=record.get("successful", False),
            fee_charged=str(record.get("fee_charged", "0")),
            operation_count=int(record.get("operation_count", 0)),
            source_account=record["source_account"],
            paging_token=record["paging_token"],
        )


class TransactionHistoryResponse(BaseModel):
    """A page of transactions, newest first."""

    transactions: list[TransactionSummary] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(
        None, description="Cursor for the next page; null at end of history"
    )
