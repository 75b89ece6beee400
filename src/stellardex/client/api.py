"""HTTP client for the Stellar DEX backend.

Mirrors the backend's endpoints one method per route. ``{error, kind}``
responses come back as the matching typed error from ``stellardex.errors``.
"""

import logging
from typing import Any, Optional

import httpx

from stellardex.config import get_settings
from stellardex.errors import RemoteUnavailable, error_from_payload
from stellardex.operations import OperationKind

logger = logging.getLogger(__name__)


class StellarDexApi:
    """Async client for the ``/api/stellar`` endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._http_client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=get_settings().http_timeout)
        return self._http_client

    async def _call(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(
                method, f"{self.base_url}{path}", params=params, json=json
            )
        except httpx.TransportError as e:
            logger.error(f"Backend request failed: {method} {path}: {e}")
            raise RemoteUnavailable(f"Backend unavailable: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if not isinstance(payload, dict):
                payload = {"error": f"Request failed with HTTP {response.status_code}"}
            raise error_from_payload(payload)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Backend returned a non-JSON body: {method} {path}")
            raise RemoteUnavailable(
                f"Backend returned an invalid response (HTTP {response.status_code})"
            ) from e

    # Queries

    async def get_account(self, public_key: str) -> dict:
        return await self._call("GET", f"/account/{public_key}")

    async def get_transactions(
        self, public_key: str, limit: Optional[int] = None, cursor: Optional[str] = None
    ) -> dict:
        params = {}
        if limit:
            params["limit"] = limit
        if cursor:
            params["cursor"] = cursor
        return await self._call("GET", f"/account/{public_key}/transactions", params=params)

    async def get_pools(self, reserves: Optional[str] = None) -> list[dict]:
        params = {"reserves": reserves} if reserves else None
        return await self._call("GET", "/pools", params=params)

    async def get_pool(self, pool_id: str) -> dict:
        return await self._call("GET", f"/pools/{pool_id}")

    async def get_account_pools(self, public_key: str) -> list[dict]:
        return await self._call("GET", f"/account/{public_key}/pools")

    async def get_swap_quote(
        self,
        source_code: str,
        source_issuer: Optional[str],
        dest_code: str,
        dest_issuer: Optional[str],
        amount: str,
    ) -> list[dict]:
        params = {"sourceCode": source_code, "destCode": dest_code, "amount": amount}
        if source_issuer:
            params["sourceIssuer"] = source_issuer
        if dest_issuer:
            params["destIssuer"] = dest_issuer
        return await self._call("GET", "/quote", params=params)

    async def get_assets(self, code: Optional[str] = None) -> list[dict]:
        params = {"code": code} if code else None
        return await self._call("GET", "/assets", params=params)

    async def fund_testnet(self, public_key: str) -> dict:
        return await self._call("POST", "/fund-testnet", json={"publicKey": public_key})

    # Builds

    async def build(self, kind: OperationKind, payload: dict) -> dict:
        """Request an unsigned envelope for any operation kind."""
        return await self._call("POST", f"/build/{OperationKind(kind).value}", json=payload)

    async def build_trustline(self, public_key: str, asset_code: str, asset_issuer: Optional[str]) -> dict:
        return await self.build(
            OperationKind.TRUSTLINE,
            {"publicKey": public_key, "assetCode": asset_code, "assetIssuer": asset_issuer},
        )

    async def build_pool_trustline(self, public_key: str, asset_a: dict, asset_b: dict) -> dict:
        return await self.build(
            OperationKind.POOL_TRUSTLINE,
            {"publicKey": public_key, "assetA": asset_a, "assetB": asset_b},
        )

    async def build_deposit(
        self,
        public_key: str,
        pool_id: str,
        max_amount_a: str,
        max_amount_b: str,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
    ) -> dict:
        return await self.build(
            OperationKind.DEPOSIT,
            {
                "publicKey": public_key,
                "poolId": pool_id,
                "maxAmountA": max_amount_a,
                "maxAmountB": max_amount_b,
                "minPrice": min_price,
                "maxPrice": max_price,
            },
        )

    async def build_withdraw(
        self,
        public_key: str,
        pool_id: str,
        amount: str,
        min_amount_a: Optional[str] = None,
        min_amount_b: Optional[str] = None,
    ) -> dict:
        return await self.build(
            OperationKind.WITHDRAW,
            {
                "publicKey": public_key,
                "poolId": pool_id,
                "amount": amount,
                "minAmountA": min_amount_a,
                "minAmountB": min_amount_b,
            },
        )

    async def build_swap(
        self,
        public_key: str,
        source_asset: dict,
        dest_asset: dict,
        amount: str,
        slippage: Optional[str] = None,
    ) -> dict:
        payload = {
            "publicKey": public_key,
            "sourceAsset": source_asset,
            "destAsset": dest_asset,
            "amount": amount,
        }
        if slippage is not None:
            payload["slippage"] = slippage
        return await self.build(OperationKind.SWAP, payload)

    # Submission

    async def submit(self, signed_xdr: str) -> dict:
        return await self._call("POST", "/submit", json={"signedXdr": signed_xdr})

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
