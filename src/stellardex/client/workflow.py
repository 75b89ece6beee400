"""Client workflow orchestrator for write operations.

Each user-initiated write runs build -> external sign -> submit:

    IDLE -> BUILDING -> AWAITING_SIGNATURE -> SUBMITTING -> SETTLED_SUCCESS
                                                          -> SETTLED_FAILURE

A failure while building or signing goes straight to SETTLED_FAILURE;
nothing is submitted after the signer declines.

A settled operation always refreshes the account, pool list and pool
positions, whatever the outcome. Only one write runs at a time per session
and a signed envelope is handed to the backend at most once.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from stellardex.assets import asset_from_dict, order_assets
from stellardex.client.api import StellarDexApi
from stellardex.client.signer import Signer
from stellardex.errors import (
    DuplicateSubmission,
    SignerRejected,
    StellarDexError,
    WriteInProgress,
)
from stellardex.operations import OperationKind

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    """State of the current write operation."""

    IDLE = "idle"
    BUILDING = "building"
    AWAITING_SIGNATURE = "awaiting_signature"
    SUBMITTING = "submitting"
    SETTLED_SUCCESS = "settled_success"
    SETTLED_FAILURE = "settled_failure"


ACTIVE_STATES = (
    WorkflowState.BUILDING,
    WorkflowState.AWAITING_SIGNATURE,
    WorkflowState.SUBMITTING,
)


@dataclass
class Notification:
    """A transient message for the user (toast)."""

    level: str  # loading, success, error
    message: str
    operation: Optional[OperationKind] = None


@dataclass
class OperationOutcome:
    """Result of one write operation."""

    kind: OperationKind
    state: WorkflowState = WorkflowState.IDLE
    build: dict = field(default_factory=dict)
    result: Optional[dict] = None
    error: Optional[StellarDexError] = None

    @property
    def success(self) -> bool:
        return self.state == WorkflowState.SETTLED_SUCCESS


class WorkflowOrchestrator:
    """Sequences write operations for one connected account."""

    def __init__(
        self,
        api: StellarDexApi,
        signer: Signer,
        public_key: str,
        network: str = "TESTNET",
        on_notify: Optional[Callable[[Notification], None]] = None,
        on_state_change: Optional[Callable[[WorkflowState], None]] = None,
    ):
        self.api = api
        self.signer = signer
        self.public_key = public_key
        self.network = network
        self.on_notify = on_notify
        self.on_state_change = on_state_change

        self.state = WorkflowState.IDLE
        self.transitions: list[WorkflowState] = [WorkflowState.IDLE]
        self.notifications: list[Notification] = []

        # Read state, replaced wholesale on refresh
        self.account: Optional[dict] = None
        self.pools: list[dict] = []
        self.account_pools: list[dict] = []

        self._submitted: set[str] = set()

    @classmethod
    async def connect(
        cls,
        api: StellarDexApi,
        signer: Signer,
        network: str = "TESTNET",
        **kwargs,
    ) -> "WorkflowOrchestrator":
        """Connect to the signer's account and load its state."""
        public_key = await signer.get_public_key()
        if not public_key:
            raise SignerRejected("Wallet is not connected. Install or unlock the wallet extension.")

        orchestrator = cls(api, signer, public_key, network, **kwargs)
        await orchestrator.refresh()
        orchestrator._notify("success", "Wallet connected!")
        return orchestrator

    @property
    def busy(self) -> bool:
        return self.state in ACTIVE_STATES

    def _transition(self, state: WorkflowState) -> None:
        logger.debug(f"Workflow {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)
        if self.on_state_change:
            self.on_state_change(state)

    def _notify(self, level: str, message: str, kind: Optional[OperationKind] = None) -> None:
        notification = Notification(level=level, message=message, operation=kind)
        self.notifications.append(notification)
        if self.on_notify:
            self.on_notify(notification)

    async def refresh(self) -> None:
        """Reload account, pools and pool positions.

        Each read is independent; a failed one keeps its previous value.
        """
        results = await asyncio.gather(
            self.api.get_account(self.public_key),
            self.api.get_pools(),
            self.api.get_account_pools(self.public_key),
            return_exceptions=True,
        )
        names = ("account", "pools", "account_pools")

        for name, result in zip(names, results):
            if isinstance(result, StellarDexError):
                logger.warning(f"Refresh of {name} failed: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            setattr(self, name, result)

    async def submit_signed(self, signed_xdr: str) -> dict:
        """Submit a signed envelope. Each envelope can be submitted only once.

        Raises:
            DuplicateSubmission: If this envelope was already handed over
        """
        if signed_xdr in self._submitted:
            raise DuplicateSubmission(
                "This signed transaction was already submitted; build a new one to retry"
            )
        self._submitted.add(signed_xdr)
        return await self.api.submit(signed_xdr)

    async def _sign(self, envelope_xdr: str) -> str:
        """Ask the signer for a signature; any signer failure is a rejection."""
        try:
            return await self.signer.sign(envelope_xdr, self.network)
        except StellarDexError:
            raise
        except Exception as e:
            logger.error(f"Signer {self.signer!r} failed: {e}")
            raise SignerRejected(f"Signer error: {e}") from e

    def _settle_failure(self, outcome: OperationOutcome, error: StellarDexError) -> None:
        outcome.error = error
        self._transition(WorkflowState.SETTLED_FAILURE)
        self._notify("error", error.message, outcome.kind)

    async def execute(
        self,
        kind: OperationKind,
        payload: dict,
        describe: Optional[Callable[[dict], str]] = None,
    ) -> OperationOutcome:
        """Run one write operation through build, sign and submit.

        Errors never escape: they settle the operation as failed and are
        reported through ``notifications`` and the returned outcome.

        Raises:
            WriteInProgress: If another write is still running
        """
        if self.busy:
            raise WriteInProgress(f"Cannot start {kind.value} while another operation is {self.state.value}")

        outcome = OperationOutcome(kind=kind)
        self._transition(WorkflowState.BUILDING)
        try:
            outcome.build = await self.api.build(kind, {"publicKey": self.public_key, **payload})

            self._transition(WorkflowState.AWAITING_SIGNATURE)
            self._notify("loading", "Please confirm in your wallet...", kind)
            signed_xdr = await self._sign(outcome.build["xdr"])

            self._transition(WorkflowState.SUBMITTING)
            self._notify("loading", "Submitting transaction...", kind)
            outcome.result = await self.submit_signed(signed_xdr)
        except StellarDexError as e:
            logger.warning(f"{kind.value} failed in {self.state.value}: [{e.kind}] {e.message}")
            self._settle_failure(outcome, e)
        except Exception as e:
            logger.exception(f"Unexpected error during {kind.value} in {self.state.value}")
            self._settle_failure(outcome, StellarDexError(f"Unexpected error during {kind.value}: {e}"))
        else:
            self._transition(WorkflowState.SETTLED_SUCCESS)
            message = describe(outcome.build) if describe else f"{kind.value} confirmed"
            self._notify("success", message, kind)

        outcome.state = self.state
        await self.refresh()
        return outcome

    async def add_trustline(self, asset_code: str, asset_issuer: Optional[str]) -> OperationOutcome:
        return await self.execute(
            OperationKind.TRUSTLINE,
            {"assetCode": asset_code, "assetIssuer": asset_issuer},
            describe=lambda build: f"Trustline added for {asset_code}!",
        )

    async def add_pool_trustline(self, asset_a: dict, asset_b: dict) -> OperationOutcome:
        return await self.execute(
            OperationKind.POOL_TRUSTLINE,
            {"assetA": asset_a, "assetB": asset_b},
            describe=lambda build: f"Pool trustline created for {asset_a['code']}/{asset_b['code']}",
        )

    async def deposit(
        self,
        pool_id: str,
        max_amount_a: str,
        max_amount_b: str,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
    ) -> OperationOutcome:
        return await self.execute(
            OperationKind.DEPOSIT,
            {
                "poolId": pool_id,
                "maxAmountA": max_amount_a,
                "maxAmountB": max_amount_b,
                "minPrice": min_price,
                "maxPrice": max_price,
            },
            describe=lambda build: "Liquidity added successfully!",
        )

    async def withdraw(
        self,
        pool_id: str,
        amount: str,
        min_amount_a: Optional[str] = None,
        min_amount_b: Optional[str] = None,
    ) -> OperationOutcome:
        return await self.execute(
            OperationKind.WITHDRAW,
            {
                "poolId": pool_id,
                "amount": amount,
                "minAmountA": min_amount_a,
                "minAmountB": min_amount_b,
            },
            describe=lambda build: "Liquidity withdrawn successfully!",
        )

    async def swap(
        self,
        source_asset: dict,
        dest_asset: dict,
        amount: str,
        slippage: Optional[str] = None,
    ) -> OperationOutcome:
        payload = {"sourceAsset": source_asset, "destAsset": dest_asset, "amount": amount}
        if slippage is not None:
            payload["slippage"] = slippage

        def describe(build: dict) -> str:
            expected = Decimal(build["expectedAmount"]).quantize(Decimal("0.0001"))
            return f"Swapped {amount} {source_asset['code']} for ~{expected} {dest_asset['code']}"

        return await self.execute(OperationKind.SWAP, payload, describe=describe)

    async def add_liquidity(
        self,
        asset_a: dict,
        asset_b: dict,
        amount_a: str,
        amount_b: str,
    ) -> list[OperationOutcome]:
        """Create the pool trustline, then deposit into the pool.

        Two separate write operations. Amounts are matched to the pool's
        canonical asset order before the deposit is built. The deposit is
        skipped if the trustline step fails.
        """
        trust = await self.add_pool_trustline(asset_a, asset_b)
        if not trust.success:
            return [trust]

        first, _ = order_assets(asset_from_dict(asset_a), asset_from_dict(asset_b))
        if first != asset_from_dict(asset_a):
            amount_a, amount_b = amount_b, amount_a

        deposit = await self.deposit(trust.build["poolId"], amount_a, amount_b)
        return [trust, deposit]

    async def fund_testnet(self) -> bool:
        """Fund the connected account from the test network faucet."""
        try:
            await self.api.fund_testnet(self.public_key)
        except StellarDexError as e:
            self._notify("error", e.message or "Failed to fund account")
            return False
        self._notify("success", "Account funded with 10,000 XLM!")
        await self.refresh()
        return True
