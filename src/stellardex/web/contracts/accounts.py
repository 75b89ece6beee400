"""Account contracts."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AccountResponse(BaseModel):
    """Account snapshot as shown to the client."""

    id: str = Field(..., description="Account public key")
    sequence: str = Field(..., description="Current sequence number")
    balances: list[dict[str, Any]] = Field(default_factory=list, description="Raw balance records")
    subentry_count: int = Field(default=0)
    thresholds: dict[str, Any] = Field(default_factory=dict)


class FundRequest(BaseModel):
    """Testnet faucet request."""

    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(..., alias="publicKey", description="Account to fund")
