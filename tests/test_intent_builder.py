"""Tests for the unsigned intent builder."""

import time
from decimal import Decimal

import pytest
from stellar_sdk import (
    Asset,
    ChangeTrust,
    Keypair,
    LiquidityPoolDeposit,
    LiquidityPoolWithdraw,
    PathPaymentStrictSend,
)

from stellardex.assets import liquidity_pool_id
from stellardex.errors import (
    AccountNotFound,
    InvalidAsset,
    NoPathFound,
    PathSearchError,
    RemoteUnavailable,
    ValidationError,
)
from stellardex.operations import OperationKind
from stellardex.web.contracts.builds import (
    DepositBuildRequest,
    PoolTrustlineBuildRequest,
    SwapBuildRequest,
    TrustlineBuildRequest,
    WithdrawBuildRequest,
)
from stellardex.web.services.intent_builder import IntentBuilder


@pytest.fixture
def builder(ledger, settings):
    return IntentBuilder(ledger, settings)


@pytest.fixture
def pool_id(usdc):
    return liquidity_pool_id(Asset.native(), usdc, 30)


def swap_request(public_key, usdc, **overrides):
    payload = {
        "publicKey": public_key,
        "sourceAsset": {"code": "XLM"},
        "destAsset": {"code": "USDC", "issuer": usdc.issuer},
        "amount": "100",
    }
    payload.update(overrides)
    return SwapBuildRequest(**payload)


class TestTrustline:
    """Tests for trustline intents."""

    @pytest.mark.asyncio
    async def test_single_change_trust_operation(self, builder, funded_account, usdc, decode):
        """Trustline intent has one ChangeTrust op, base fee, next sequence and a timeout."""
        before = int(time.time())
        result = await builder.build_trustline(TrustlineBuildRequest(
            publicKey=funded_account.account_id,
            assetCode="USDC",
            assetIssuer=usdc.issuer,
        ))

        tx = decode(result.xdr).transaction
        assert len(tx.operations) == 1
        op = tx.operations[0]
        assert isinstance(op, ChangeTrust)
        assert op.asset == usdc
        assert tx.fee == 100
        assert tx.sequence == 101
        assert tx.source.account_id == funded_account.account_id

        max_time = tx.preconditions.time_bounds.max_time
        assert before + 180 <= max_time <= int(time.time()) + 180

    @pytest.mark.asyncio
    async def test_envelope_is_unsigned(self, builder, funded_account, usdc, decode):
        result = await builder.build_trustline(TrustlineBuildRequest(
            publicKey=funded_account.account_id,
            assetCode="USDC",
            assetIssuer=usdc.issuer,
        ))

        assert decode(result.xdr).signatures == []

    @pytest.mark.asyncio
    async def test_missing_issuer_fails_before_remote_call(self, builder, ledger, funded_account):
        with pytest.raises(InvalidAsset):
            await builder.build_trustline(TrustlineBuildRequest(
                publicKey=funded_account.account_id,
                assetCode="USDC",
            ))

        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_native_asset_rejected(self, builder, funded_account):
        with pytest.raises(InvalidAsset):
            await builder.build_trustline(TrustlineBuildRequest(
                publicKey=funded_account.account_id,
                assetCode="XLM",
            ))

    @pytest.mark.asyncio
    async def test_unknown_account(self, builder, user_keypair, usdc):
        with pytest.raises(AccountNotFound):
            await builder.build_trustline(TrustlineBuildRequest(
                publicKey=user_keypair.public_key,
                assetCode="USDC",
                assetIssuer=usdc.issuer,
            ))

    @pytest.mark.asyncio
    async def test_malformed_public_key(self, builder, ledger, usdc):
        with pytest.raises(ValidationError):
            await builder.build_trustline(TrustlineBuildRequest(
                publicKey="GABC",
                assetCode="USDC",
                assetIssuer=usdc.issuer,
            ))

        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_each_build_reads_fresh_sequence(self, builder, ledger, funded_account, usdc, decode):
        request = TrustlineBuildRequest(
            publicKey=funded_account.account_id,
            assetCode="USDC",
            assetIssuer=usdc.issuer,
        )
        first = await builder.build_trustline(request)
        ledger.add_account(funded_account.account_id, sequence=150)
        second = await builder.build_trustline(request)

        assert decode(first.xdr).transaction.sequence == 101
        assert decode(second.xdr).transaction.sequence == 151


class TestPoolTrustline:
    """Tests for pool-share trustline intents."""

    @pytest.mark.asyncio
    async def test_pool_id_independent_of_argument_order(self, builder, funded_account, usdc, decode):
        native = {"code": "XLM"}
        dollar = {"code": "USDC", "issuer": usdc.issuer}

        forward = await builder.build_pool_trustline(PoolTrustlineBuildRequest(
            publicKey=funded_account.account_id, assetA=native, assetB=dollar,
        ))
        backward = await builder.build_pool_trustline(PoolTrustlineBuildRequest(
            publicKey=funded_account.account_id, assetA=dollar, assetB=native,
        ))

        assert forward.pool_id == backward.pool_id == liquidity_pool_id(Asset.native(), usdc, 30)
        op = decode(forward.xdr).transaction.operations[0]
        assert isinstance(op, ChangeTrust)
        assert op.asset.liquidity_pool_id == forward.pool_id
        assert op.asset.asset_a == Asset.native()
        assert op.asset.asset_b == usdc

    @pytest.mark.asyncio
    async def test_same_asset_twice(self, builder, funded_account, usdc):
        dollar = {"code": "USDC", "issuer": usdc.issuer}

        with pytest.raises(InvalidAsset):
            await builder.build_pool_trustline(PoolTrustlineBuildRequest(
                publicKey=funded_account.account_id, assetA=dollar, assetB=dollar,
            ))


class TestDepositWithdraw:
    """Tests for liquidity pool deposit and withdrawal intents."""

    @pytest.mark.asyncio
    async def test_deposit_default_price_bounds(self, builder, funded_account, pool_id, decode):
        result = await builder.build_deposit(DepositBuildRequest(
            publicKey=funded_account.account_id,
            poolId=pool_id,
            maxAmountA="100",
            maxAmountB="95.5",
        ))

        op = decode(result.xdr).transaction.operations[0]
        assert isinstance(op, LiquidityPoolDeposit)
        assert op.liquidity_pool_id == pool_id
        assert Decimal(op.max_amount_a) == Decimal("100")
        assert Decimal(op.max_amount_b) == Decimal("95.5")
        assert Decimal(op.min_price.n) / Decimal(op.min_price.d) == Decimal("0.0000001")
        assert Decimal(op.max_price.n) / Decimal(op.max_price.d) == Decimal("100000000")

    @pytest.mark.asyncio
    async def test_deposit_explicit_price_bounds(self, builder, funded_account, pool_id, decode):
        result = await builder.build_deposit(DepositBuildRequest(
            publicKey=funded_account.account_id,
            poolId=pool_id,
            maxAmountA="10",
            maxAmountB="10",
            minPrice="0.5",
            maxPrice="2",
        ))

        op = decode(result.xdr).transaction.operations[0]
        assert Decimal(op.min_price.n) / Decimal(op.min_price.d) == Decimal("0.5")
        assert Decimal(op.max_price.n) / Decimal(op.max_price.d) == Decimal("2")

    @pytest.mark.asyncio
    async def test_deposit_inverted_price_bounds(self, builder, funded_account, pool_id):
        with pytest.raises(ValidationError):
            await builder.build_deposit(DepositBuildRequest(
                publicKey=funded_account.account_id,
                poolId=pool_id,
                maxAmountA="10",
                maxAmountB="10",
                minPrice="2",
                maxPrice="0.5",
            ))

    @pytest.mark.asyncio
    async def test_deposit_bad_pool_id(self, builder, ledger, funded_account):
        with pytest.raises(ValidationError):
            await builder.build_deposit(DepositBuildRequest(
                publicKey=funded_account.account_id,
                poolId="not-a-pool",
                maxAmountA="10",
                maxAmountB="10",
            ))

        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_deposit_too_many_decimals(self, builder, funded_account, pool_id):
        with pytest.raises(ValidationError):
            await builder.build_deposit(DepositBuildRequest(
                publicKey=funded_account.account_id,
                poolId=pool_id,
                maxAmountA="1.12345678",
                maxAmountB="10",
            ))

    @pytest.mark.asyncio
    async def test_withdraw_default_minimums(self, builder, funded_account, pool_id, decode):
        result = await builder.build_withdraw(WithdrawBuildRequest(
            publicKey=funded_account.account_id,
            poolId=pool_id,
            amount="12.5",
        ))

        op = decode(result.xdr).transaction.operations[0]
        assert isinstance(op, LiquidityPoolWithdraw)
        assert op.liquidity_pool_id == pool_id
        assert Decimal(op.amount) == Decimal("12.5")
        assert Decimal(op.min_amount_a) == 0
        assert Decimal(op.min_amount_b) == 0

    @pytest.mark.asyncio
    async def test_withdraw_explicit_minimums(self, builder, funded_account, pool_id, decode):
        result = await builder.build_withdraw(WithdrawBuildRequest(
            publicKey=funded_account.account_id,
            poolId=pool_id,
            amount="12.5",
            minAmountA="6",
            minAmountB="5.9",
        ))

        op = decode(result.xdr).transaction.operations[0]
        assert Decimal(op.min_amount_a) == Decimal("6")
        assert Decimal(op.min_amount_b) == Decimal("5.9")

    @pytest.mark.asyncio
    async def test_withdraw_amount_above_ledger_maximum(self, builder, ledger, funded_account, pool_id):
        with pytest.raises(ValidationError) as exc_info:
            await builder.build_withdraw(WithdrawBuildRequest(
                publicKey=funded_account.account_id,
                poolId=pool_id,
                amount="1000000000000",
            ))

        assert "922337203685.4775807" in exc_info.value.message
        assert ledger.calls == []


class TestSwap:
    """Tests for strict-send swap intents."""

    @pytest.mark.asyncio
    async def test_swap_uses_best_path_and_slippage(self, builder, ledger, funded_account, usdc, decode):
        hop_issuer = Keypair.random().public_key
        ledger.paths = [
            {
                "source_amount": "100.0000000",
                "destination_amount": "95.1234567",
                "path": [{"asset_type": "credit_alphanum4", "asset_code": "EURC", "asset_issuer": hop_issuer}],
            },
            {"source_amount": "100.0000000", "destination_amount": "90.0000000", "path": []},
        ]

        result = await builder.build_swap(swap_request(funded_account.account_id, usdc, slippage="1"))

        assert result.expected_amount == "95.1234567"
        assert result.min_amount == "94.1722221"
        assert len(result.path) == 1

        op = decode(result.xdr).transaction.operations[0]
        assert isinstance(op, PathPaymentStrictSend)
        assert op.send_asset == Asset.native()
        assert Decimal(op.send_amount) == Decimal("100")
        assert op.dest_asset == usdc
        assert Decimal(op.dest_min) == Decimal("94.1722221")
        assert op.destination.account_id == funded_account.account_id
        assert op.path == [Asset("EURC", hop_issuer)]

    @pytest.mark.asyncio
    async def test_swap_default_slippage(self, builder, ledger, funded_account, usdc):
        ledger.paths = [{"source_amount": "100", "destination_amount": "50.0000000", "path": []}]

        result = await builder.build_swap(swap_request(funded_account.account_id, usdc))

        assert Decimal(result.min_amount) == Decimal("49.5")
        assert Decimal(result.min_amount) <= Decimal(result.expected_amount)

    @pytest.mark.asyncio
    async def test_swap_requests_fresh_path(self, builder, ledger, funded_account, usdc):
        ledger.paths = [{"source_amount": "100", "destination_amount": "50", "path": []}]

        await builder.build_swap(swap_request(funded_account.account_id, usdc))

        source, amount, destinations = ledger.path_requests[-1]
        assert source == Asset.native()
        assert Decimal(amount) == Decimal("100")
        assert destinations == [usdc]

    @pytest.mark.asyncio
    async def test_no_path(self, builder, ledger, funded_account, usdc):
        ledger.paths = []

        with pytest.raises(NoPathFound) as exc_info:
            await builder.build_swap(swap_request(funded_account.account_id, usdc))

        assert "XLM" in exc_info.value.message
        assert "USDC" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_path_search_failure(self, builder, ledger, funded_account, usdc):
        ledger.path_error = RemoteUnavailable("connection refused")

        with pytest.raises(PathSearchError) as exc_info:
            await builder.build_swap(swap_request(funded_account.account_id, usdc))

        assert "Failed to find swap path" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_swap_same_asset(self, builder, ledger, funded_account):
        request = SwapBuildRequest(
            publicKey=funded_account.account_id,
            sourceAsset={"code": "XLM"},
            destAsset={"code": "XLM"},
            amount="1",
        )

        with pytest.raises(InvalidAsset):
            await builder.build_swap(request)

        assert ledger.calls == []


class TestDispatch:
    """Tests for building by operation kind."""

    @pytest.mark.asyncio
    async def test_build_by_kind(self, builder, funded_account, usdc, decode):
        request = TrustlineBuildRequest(
            publicKey=funded_account.account_id,
            assetCode="USDC",
            assetIssuer=usdc.issuer,
        )

        by_kind = await builder.build(OperationKind.TRUSTLINE, request)
        by_value = await builder.build("trustline", request)

        assert isinstance(decode(by_kind.xdr).transaction.operations[0], ChangeTrust)
        assert decode(by_value.xdr).transaction.sequence == 101

    @pytest.mark.asyncio
    async def test_unknown_kind(self, builder):
        with pytest.raises(ValidationError):
            await builder.build("mint", None)
