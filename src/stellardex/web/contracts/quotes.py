"""Swap quote contracts."""

from typing import Any

from pydantic import BaseModel, Field


class PathQuote(BaseModel):
    """One candidate strict-send path. Non-binding; valid only at fetch time."""

    destination_amount: str = Field(..., description="Estimated amount received")
    path: list[dict[str, Any]] = Field(default_factory=list, description="Intermediate assets")
    source_amount: str = Field(..., description="Exact amount sent")

    @classmethod
    def from_horizon(cls, record: dict) -> "PathQuote":
        return cls(
            destination_amount=record["destination_amount"],
            path=list(record.get("path", [])),
            source_amount=record["source_amount"],
        )
