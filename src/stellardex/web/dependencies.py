"""FastAPI dependency providers for web services.

One Horizon client is shared per process; tests override ``get_ledger``.
"""

from functools import lru_cache

from fastapi import Depends

from stellardex.config import get_settings
from stellardex.horizon import HorizonClient, LedgerService
from stellardex.web.services import IntentBuilder, QueryFacade, SubmissionGateway


@lru_cache
def get_ledger() -> LedgerService:
    """Get the process-wide ledger client."""
    return HorizonClient(get_settings())


def get_query_facade(ledger: LedgerService = Depends(get_ledger)) -> QueryFacade:
    return QueryFacade(ledger, get_settings())


def get_intent_builder(ledger: LedgerService = Depends(get_ledger)) -> IntentBuilder:
    settings = get_settings()
    return IntentBuilder(ledger, settings, QueryFacade(ledger, settings))


def get_submission_gateway(ledger: LedgerService = Depends(get_ledger)) -> SubmissionGateway:
    return SubmissionGateway(ledger, get_settings())
