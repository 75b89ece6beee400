"""HTTP controllers for web API endpoints.

SECURITY: These controllers MUST NOT:
- Access private keys
- Sign transactions

All operations are read-only, prepare data for client-side signing, or
forward an envelope the client has already signed.
"""

from stellardex.web.controllers.accounts import router as accounts_router
from stellardex.web.controllers.builds import router as builds_router
from stellardex.web.controllers.pools import router as pools_router
from stellardex.web.controllers.quotes import router as quotes_router
from stellardex.web.controllers.transactions import router as transactions_router

__all__ = [
    "accounts_router",
    "builds_router",
    "pools_router",
    "quotes_router",
    "transactions_router",
]
