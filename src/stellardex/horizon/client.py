"""Horizon REST adapter.

Talks to a Horizon server over httpx. Transport failures become
``RemoteUnavailable``; Horizon problem documents become
``HorizonRequestError`` (or ``SubmissionRejected`` for transaction
submission) with the ``extras`` object kept intact.
"""

import logging
from typing import Optional

import httpx
from stellar_sdk import Asset

from stellardex.assets import asset_query_param
from stellardex.config import Settings, get_settings
from stellardex.errors import (
    AccountNotFound,
    HorizonRequestError,
    RemoteUnavailable,
    SubmissionRejected,
)
from stellardex.horizon.base import AccountSnapshot, LedgerService

logger = logging.getLogger(__name__)


def _problem_message(data: dict, status: int) -> str:
    title = data.get("title") or f"Horizon returned HTTP {status}"
    detail = data.get("detail")
    return f"{title}: {detail}" if detail else title


def _submission_message(data: dict, status: int) -> str:
    result_codes = (data.get("extras") or {}).get("result_codes") or {}
    tx_code = result_codes.get("transaction")
    op_codes = [code for code in result_codes.get("operations") or [] if code != "op_success"]

    message = data.get("title") or f"Transaction submission failed (HTTP {status})"
    if tx_code:
        message = f"{message}: {tx_code}"
    if op_codes:
        message = f"{message} ({', '.join(op_codes)})"
    return message


class HorizonClient(LedgerService):
    """LedgerService backed by a Horizon server."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.horizon_url.rstrip("/")
        self._http_client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.http_timeout,
                headers={"Accept": "application/json"},
            )
        return self._http_client

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.request(method, url, params=params, data=data)
        except httpx.TransportError as e:
            logger.error(f"Horizon request failed: {method} {url}: {e}")
            raise RemoteUnavailable(f"Ledger service unavailable: {e}") from e

    async def _get_json(self, path: str, params: Optional[dict] = None) -> dict:
        response = await self._request("GET", f"{self.base_url}{path}", params=params)
        data = self._json_body(response)
        if response.status_code >= 400:
            logger.debug(f"Horizon GET {path} returned {response.status_code}")
            raise HorizonRequestError(
                _problem_message(data, response.status_code),
                status=response.status_code,
                title=data.get("title"),
                extras=data.get("extras"),
            )
        return data

    @staticmethod
    def _json_body(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"records": body}

    @staticmethod
    def _records(data: dict) -> list[dict]:
        return list(data.get("_embedded", {}).get("records", []))

    async def load_account(self, account_id: str) -> AccountSnapshot:
        try:
            data = await self._get_json(f"/accounts/{account_id}")
        except HorizonRequestError as e:
            if e.status == 404:
                raise AccountNotFound(f"Account not found: {account_id}") from e
            raise
        return AccountSnapshot.from_horizon(data)

    async def network_status(self) -> dict:
        return await self._get_json("/")

    async def liquidity_pools(self, reserves: Optional[str] = None, limit: int = 20) -> list[dict]:
        params: dict = {"limit": limit}
        if reserves:
            params["reserves"] = reserves
        return self._records(await self._get_json("/liquidity_pools", params=params))

    async def liquidity_pool(self, pool_id: str) -> dict:
        return await self._get_json(f"/liquidity_pools/{pool_id}")

    async def account_transactions(
        self,
        account_id: str,
        limit: int,
        cursor: Optional[str] = None,
        order: str = "desc",
    ) -> list[dict]:
        params: dict = {"limit": limit, "order": order}
        if cursor:
            params["cursor"] = cursor
        try:
            data = await self._get_json(f"/accounts/{account_id}/transactions", params=params)
        except HorizonRequestError as e:
            if e.status == 404:
                raise AccountNotFound(f"Account not found: {account_id}") from e
            raise
        return self._records(data)

    async def strict_send_paths(
        self,
        source_asset: Asset,
        source_amount: str,
        destination_assets: list[Asset],
    ) -> list[dict]:
        params = {
            "source_amount": source_amount,
            "destination_assets": ",".join(asset_query_param(a) for a in destination_assets),
        }
        if source_asset.is_native():
            params["source_asset_type"] = "native"
        else:
            params["source_asset_type"] = source_asset.type
            params["source_asset_code"] = source_asset.code
            params["source_asset_issuer"] = source_asset.issuer
        return self._records(await self._get_json("/paths/strict-send", params=params))

    async def submit_transaction(self, envelope_xdr: str) -> dict:
        response = await self._request(
            "POST", f"{self.base_url}/transactions", data={"tx": envelope_xdr}
        )
        data = self._json_body(response)
        if response.status_code >= 400:
            extras = data.get("extras")
            result_codes = (extras or {}).get("result_codes")
            logger.warning(
                "Transaction rejected by network: status=%s result_codes=%s",
                response.status_code,
                result_codes,
            )
            raise SubmissionRejected(
                _submission_message(data, response.status_code),
                result_codes=result_codes,
                extras=extras,
            )
        logger.info(f"Transaction accepted: {data.get('hash')} (ledger {data.get('ledger')})")
        return data

    async def assets(self, code: Optional[str] = None, limit: int = 20) -> list[dict]:
        params: dict = {"limit": limit}
        if code:
            params["asset_code"] = code
        return self._records(await self._get_json("/assets", params=params))

    async def fund_account(self, account_id: str) -> dict:
        response = await self._request(
            "GET", self.settings.friendbot_url, params={"addr": account_id}
        )
        data = self._json_body(response)
        if response.status_code >= 400:
            raise HorizonRequestError(
                _problem_message(data, response.status_code),
                status=response.status_code,
                title=data.get("title"),
                extras=data.get("extras"),
            )
        return data

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
