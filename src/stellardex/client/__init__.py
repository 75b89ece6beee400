"""Client-side workflow: backend API client, signer port, orchestrator and quotes."""

from stellardex.client.api import StellarDexApi
from stellardex.client.quotes import QuoteRefresher
from stellardex.client.signer import KeypairSigner, Signer
from stellardex.client.workflow import (
    Notification,
    OperationOutcome,
    WorkflowOrchestrator,
    WorkflowState,
)

__all__ = [
    "StellarDexApi",
    "QuoteRefresher",
    "Signer",
    "KeypairSigner",
    "Notification",
    "OperationOutcome",
    "WorkflowOrchestrator",
    "WorkflowState",
]
