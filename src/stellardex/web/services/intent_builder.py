"""Intent builder for unsigned Stellar transactions.

This service builds unsigned transaction envelopes for client-side signing.
NO signing or submission happens here - this is non-custodial.

Every intent carries exactly one operation, the network base fee, a
validity window of ``tx_timeout`` seconds and the source account's
current sequence number plus one. Account state is always loaded fresh.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel
from stellar_sdk import StrKey, TransactionBuilder

from stellardex.amounts import MAX_AMOUNT, format_amount, min_amount_with_slippage, truncate
from stellardex.assets import (
    asset_from_dict,
    asset_from_horizon,
    asset_label,
    pool_share_asset,
    to_asset,
)
from stellardex.config import Settings, get_settings
from stellardex.errors import InvalidAsset, ValidationError
from stellardex.horizon.base import AccountSnapshot, LedgerService
from stellardex.operations import OperationKind
from stellardex.web.contracts.builds import (
    DepositBuildRequest,
    PoolTrustlineBuildRequest,
    PoolTrustlineEnvelope,
    SwapBuildRequest,
    SwapEnvelope,
    TrustlineBuildRequest,
    UnsignedEnvelope,
    WithdrawBuildRequest,
)
from stellardex.web.services.query_facade import QueryFacade

logger = logging.getLogger(__name__)

POOL_ID_LENGTH = 64


def validate_public_key(public_key: str) -> str:
    """Reject malformed account ids before any remote call."""
    if not public_key or not StrKey.is_valid_ed25519_public_key(public_key):
        raise ValidationError(f"Invalid public key: {public_key!r}")
    return public_key


def validate_pool_id(pool_id: str) -> str:
    if len(pool_id) != POOL_ID_LENGTH:
        raise ValidationError(f"Invalid liquidity pool id: {pool_id!r}")
    try:
        bytes.fromhex(pool_id)
    except ValueError as e:
        raise ValidationError(f"Invalid liquidity pool id: {pool_id!r}") from e
    return pool_id.lower()


def amount_str(value: Decimal, field: str = "amount") -> str:
    """Format an amount, rejecting more than 7 decimal places or more than the ledger can hold."""
    if truncate(value) != value:
        raise ValidationError(f"{field} must have at most 7 decimal places, got {value}")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field} must not exceed {MAX_AMOUNT}, got {value}")
    return format_amount(value)


class IntentBuilder:
    """Builds unsigned transaction envelopes for client-side signing.

    This service NEVER:
    - Accesses private keys
    - Signs transactions
    - Submits transactions

    Each operation kind has its own handler; ``build()`` dispatches on
    ``OperationKind`` so callers need no knowledge of the HTTP routes.
    """

    def __init__(
        self,
        ledger: LedgerService,
        settings: Optional[Settings] = None,
        query: Optional[QueryFacade] = None,
    ):
        self.ledger = ledger
        self.settings = settings or get_settings()
        self.query = query or QueryFacade(ledger, self.settings)
        self._handlers: dict[OperationKind, Callable[..., Awaitable[BaseModel]]] = {
            OperationKind.TRUSTLINE: self.build_trustline,
            OperationKind.POOL_TRUSTLINE: self.build_pool_trustline,
            OperationKind.DEPOSIT: self.build_deposit,
            OperationKind.WITHDRAW: self.build_withdraw,
            OperationKind.SWAP: self.build_swap,
        }

    async def build(self, kind: OperationKind, request: BaseModel) -> BaseModel:
        """Build an unsigned intent for any supported operation kind."""
        try:
            handler = self._handlers[OperationKind(kind)]
        except (ValueError, KeyError):
            raise ValidationError(f"Unsupported operation: {kind}") from None
        return await handler(request)

    async def _load_source(self, public_key: str) -> AccountSnapshot:
        validate_public_key(public_key)
        return await self.ledger.load_account(public_key)

    def _new_transaction(self, snapshot: AccountSnapshot) -> TransactionBuilder:
        return TransactionBuilder(
            source_account=snapshot.to_source_account(),
            network_passphrase=self.settings.network_passphrase,
            base_fee=self.settings.base_fee,
        )

    @contextmanager
    def _parameter_errors(self, kind: OperationKind):
        """SDK argument checks raise ValueError; report them as bad input."""
        try:
            yield
        except ValueError as e:
            raise ValidationError(f"Invalid {kind.value} parameters: {e}") from e

    def _finish(self, builder: TransactionBuilder, kind: OperationKind, snapshot: AccountSnapshot) -> str:
        with self._parameter_errors(kind):
            xdr = builder.set_timeout(self.settings.tx_timeout).build().to_xdr()

        logger.info(
            f"Built {kind.value} intent for {snapshot.account_id[:8]}... "
            f"(sequence {snapshot.sequence + 1})"
        )
        return xdr

    async def build_trustline(self, request: TrustlineBuildRequest) -> UnsignedEnvelope:
        """Build a change-trust transaction for a non-native asset.

        Args:
            request: Account, asset code and issuer

        Returns:
            UnsignedEnvelope for client to sign

        Raises:
            InvalidAsset: If the issuer is missing or the asset is native
        """
        asset = to_asset(request.asset_code, request.asset_issuer)
        if asset.is_native():
            raise InvalidAsset("XLM is the native asset and does not require a trustline")

        snapshot = await self._load_source(request.public_key)
        builder = self._new_transaction(snapshot).append_change_trust_op(asset=asset)
        return UnsignedEnvelope(xdr=self._finish(builder, OperationKind.TRUSTLINE, snapshot))

    async def build_pool_trustline(self, request: PoolTrustlineBuildRequest) -> PoolTrustlineEnvelope:
        """Build a change-trust transaction for liquidity pool shares.

        The two assets are put in canonical order first, so either argument
        order yields the same pool id.
        """
        asset_a = asset_from_dict(request.asset_a.model_dump())
        asset_b = asset_from_dict(request.asset_b.model_dump())
        share_asset = pool_share_asset(asset_a, asset_b, self.settings.pool_fee_bp)

        snapshot = await self._load_source(request.public_key)
        builder = self._new_transaction(snapshot).append_change_trust_op(asset=share_asset)
        return PoolTrustlineEnvelope(
            xdr=self._finish(builder, OperationKind.POOL_TRUSTLINE, snapshot),
            pool_id=share_asset.liquidity_pool_id,
        )

    async def build_deposit(self, request: DepositBuildRequest) -> UnsignedEnvelope:
        """Build a liquidity pool deposit.

        Price bounds fall back to the configured defaults, which are wide
        enough to accept almost any pool price.
        """
        pool_id = validate_pool_id(request.pool_id)
        max_a = amount_str(request.max_amount_a, "maxAmountA")
        max_b = amount_str(request.max_amount_b, "maxAmountB")
        min_price = format_amount(request.min_price) if request.min_price else self.settings.deposit_min_price
        max_price = format_amount(request.max_price) if request.max_price else self.settings.deposit_max_price
        if Decimal(min_price) > Decimal(max_price):
            raise ValidationError(f"minPrice {min_price} exceeds maxPrice {max_price}")

        snapshot = await self._load_source(request.public_key)
        with self._parameter_errors(OperationKind.DEPOSIT):
            builder = self._new_transaction(snapshot).append_liquidity_pool_deposit_op(
                liquidity_pool_id=pool_id,
                max_amount_a=max_a,
                max_amount_b=max_b,
                min_price=min_price,
                max_price=max_price,
            )
        return UnsignedEnvelope(xdr=self._finish(builder, OperationKind.DEPOSIT, snapshot))

    async def build_withdraw(self, request: WithdrawBuildRequest) -> UnsignedEnvelope:
        """Build a liquidity pool withdrawal. Minimums default to zero."""
        pool_id = validate_pool_id(request.pool_id)
        shares = amount_str(request.amount, "amount")
        min_a = amount_str(request.min_amount_a, "minAmountA") if request.min_amount_a else "0"
        min_b = amount_str(request.min_amount_b, "minAmountB") if request.min_amount_b else "0"

        snapshot = await self._load_source(request.public_key)
        with self._parameter_errors(OperationKind.WITHDRAW):
            builder = self._new_transaction(snapshot).append_liquidity_pool_withdraw_op(
                liquidity_pool_id=pool_id,
                amount=shares,
                min_amount_a=min_a,
                min_amount_b=min_b,
            )
        return UnsignedEnvelope(xdr=self._finish(builder, OperationKind.WITHDRAW, snapshot))

    async def build_swap(self, request: SwapBuildRequest) -> SwapEnvelope:
        """Build a strict-send path payment back to the source account.

        Takes the best path from a fresh search and protects it with a
        minimum destination amount derived from the slippage tolerance.

        Raises:
            NoPathFound: If the search returns no paths
            PathSearchError: If the search itself fails
        """
        source = asset_from_dict(request.source_asset.model_dump())
        dest = asset_from_dict(request.dest_asset.model_dump())
        if source == dest:
            raise InvalidAsset(f"Cannot swap {asset_label(source)} for itself")
        send_amount = amount_str(request.amount, "amount")
        slippage = request.slippage if request.slippage is not None else self.settings.default_slippage

        snapshot = await self._load_source(request.public_key)
        paths = await self.query.find_paths(source, dest, send_amount)

        best = paths[0]
        expected = best["destination_amount"]
        min_amount = format_amount(min_amount_with_slippage(expected, slippage))
        hops = [asset_from_horizon(hop) for hop in best.get("path", [])]

        logger.debug(
            f"Swap {send_amount} {asset_label(source)} -> {asset_label(dest)}: "
            f"expected {expected}, min {min_amount}, {len(hops)} hop(s)"
        )

        with self._parameter_errors(OperationKind.SWAP):
            builder = self._new_transaction(snapshot).append_path_payment_strict_send_op(
                destination=snapshot.account_id,
                send_asset=source,
                send_amount=send_amount,
                dest_asset=dest,
                dest_min=min_amount,
                path=hops,
            )
        return SwapEnvelope(
            xdr=self._finish(builder, OperationKind.SWAP, snapshot),
            expected_amount=expected,
            min_amount=min_amount,
            path=list(best.get("path", [])),
        )
