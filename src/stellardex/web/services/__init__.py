"""Web services for the non-custodial Stellar backend.

SECURITY: These services MUST NOT:
- Access private keys or secret seeds
- Sign transactions

These services CAN:
- Query ledger state (accounts, pools, paths, history)
- Prepare unsigned transactions for client signing
- Forward envelopes the client has already signed
"""

from stellardex.web.services.intent_builder import IntentBuilder
from stellardex.web.services.query_facade import QueryFacade
from stellardex.web.services.submission_gateway import SubmissionGateway

__all__ = [
    "IntentBuilder",
    "QueryFacade",
    "SubmissionGateway",
]
