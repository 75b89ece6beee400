"""Signer interface for client-side transaction signing.

Signing flow:
1. Backend builds an unsigned envelope
2. Envelope is handed to a signer together with the network name
3. Signer returns the signed envelope, or raises SignerRejected
4. Signed envelope goes back to the backend for submission

The browser wallet extension is one signer; ``KeypairSigner`` is a local
implementation for scripts and test network use.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from stellar_sdk import Keypair, TransactionEnvelope

from stellardex.config import NETWORK_PASSPHRASES
from stellardex.errors import SignerRejected

logger = logging.getLogger(__name__)


def network_passphrase(network: str) -> str:
    """Map a network name (TESTNET or PUBLIC) to its passphrase."""
    try:
        return NETWORK_PASSPHRASES[network.upper()]
    except KeyError:
        raise SignerRejected(f"Unknown network: {network}") from None


class Signer(ABC):
    """Holds the private key; the backend never sees it."""

    @abstractmethod
    async def get_public_key(self) -> Optional[str]:
        """Public key of the connected account, or None if not connected."""
        pass

    @abstractmethod
    async def sign(self, envelope_xdr: str, network: str = "TESTNET") -> str:
        """Sign an envelope.

        Args:
            envelope_xdr: Unsigned base64 XDR envelope
            network: Network name the envelope is bound to

        Returns:
            Signed base64 XDR envelope

        Raises:
            SignerRejected: If the user declines or the signer is unavailable
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class KeypairSigner(Signer):
    """Signs with an in-memory Stellar keypair.

    WARNING: The secret seed is held in memory. Intended for test network
    accounts and automation, not for funds that matter.
    """

    def __init__(self, keypair: Keypair):
        if not keypair.can_sign():
            raise SignerRejected("Keypair has no secret seed and cannot sign")
        self._keypair = keypair

    @classmethod
    def from_secret(cls, secret: str) -> "KeypairSigner":
        try:
            return cls(Keypair.from_secret(secret))
        except ValueError as e:
            raise SignerRejected(f"Invalid secret seed: {e}") from e

    async def get_public_key(self) -> Optional[str]:
        return self._keypair.public_key

    async def sign(self, envelope_xdr: str, network: str = "TESTNET") -> str:
        passphrase = network_passphrase(network)
        try:
            envelope = TransactionEnvelope.from_xdr(envelope_xdr, passphrase)
        except Exception as e:
            raise SignerRejected(f"Cannot decode transaction for signing: {e}") from e

        source = envelope.transaction.source.account_id
        if source != self._keypair.public_key:
            raise SignerRejected(
                f"Transaction source {source[:8]}... does not match signer "
                f"{self._keypair.public_key[:8]}..."
            )

        envelope.sign(self._keypair)
        logger.debug(f"Signed transaction {envelope.hash_hex()} for {network.upper()}")
        return envelope.to_xdr()

    def __repr__(self) -> str:
        return f"KeypairSigner(public_key={self._keypair.public_key[:8]}...)"
