"""Ledger access: the LedgerService interface and its Horizon implementation."""

from stellardex.horizon.base import AccountSnapshot, LedgerService
from stellardex.horizon.client import HorizonClient

__all__ = [
    "AccountSnapshot",
    "LedgerService",
    "HorizonClient",
]
