"""Write operations the builder can encode into a transaction."""

from enum import Enum


class OperationKind(str, Enum):
    """One ledger operation per transaction intent.

    The value doubles as the build endpoint path segment.
    """

    TRUSTLINE = "trustline"
    POOL_TRUSTLINE = "pool-trustline"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SWAP = "swap"
