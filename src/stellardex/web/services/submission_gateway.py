"""Submission gateway for client-signed transactions.

Forwards a signed envelope to the network exactly once. A rejection is
final for that envelope: the client must rebuild with a fresh sequence
number to try again.
"""

import logging
from typing import Optional

from stellar_sdk import TransactionBuilder

from stellardex.config import Settings, get_settings
from stellardex.errors import ValidationError
from stellardex.horizon.base import LedgerService

logger = logging.getLogger(__name__)


class SubmissionGateway:
    """Forwards signed envelopes to the ledger. No retries."""

    def __init__(self, ledger: LedgerService, settings: Optional[Settings] = None):
        self.ledger = ledger
        self.settings = settings or get_settings()

    def parse(self, signed_xdr: str):
        """Decode a signed envelope for this network.

        Raises:
            ValidationError: If the XDR is malformed or carries no signature
        """
        if not signed_xdr:
            raise ValidationError("signedXdr is required")
        try:
            envelope = TransactionBuilder.from_xdr(signed_xdr, self.settings.network_passphrase)
        except Exception as e:
            raise ValidationError(f"Invalid transaction envelope: {e}") from e

        if not envelope.signatures:
            raise ValidationError("Transaction envelope is not signed")
        return envelope

    async def submit(self, signed_xdr: str) -> dict:
        """Submit a signed envelope.

        Returns:
            The network's submission result

        Raises:
            ValidationError: If the envelope cannot be decoded or is unsigned
            SubmissionRejected: If the network refuses it; result codes are kept
            RemoteUnavailable: If the network cannot be reached
        """
        envelope = self.parse(signed_xdr)
        tx_hash = envelope.hash_hex()
        logger.info(f"Submitting transaction {tx_hash}")
        return await self.ledger.submit_transaction(signed_xdr)
