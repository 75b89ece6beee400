"""Web boundary layer for non-custodial operations.

SECURITY PRINCIPLES:
1. This layer never holds or derives private keys.
2. Write operations return unsigned envelopes; the client signs them with
   its own wallet and hands the signed envelope back for submission.
3. All other operations are read-only passthroughs to the ledger.
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
