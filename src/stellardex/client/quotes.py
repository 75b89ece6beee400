"""Debounced swap quote refresh.

Every input change restarts a short debounce timer and bumps a request
token. Only the result of the most recent request is ever published;
anything older is cancelled or, if it resolves anyway, discarded.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from stellardex.client.api import StellarDexApi
from stellardex.config import get_settings
from stellardex.errors import NoPathFound, StellarDexError

logger = logging.getLogger(__name__)

NO_PATH_MESSAGE = "No swap path found. There may not be enough liquidity for this pair."


@dataclass(frozen=True)
class QuoteInput:
    source: dict
    dest: dict
    amount: str


def _is_positive(amount: str) -> bool:
    try:
        return bool(amount) and Decimal(amount) > 0
    except InvalidOperation:
        return False


class QuoteRefresher:
    """Keeps the best quote for the latest swap inputs."""

    def __init__(
        self,
        api: StellarDexApi,
        debounce: Optional[float] = None,
        on_update: Optional[Callable[["QuoteRefresher"], None]] = None,
    ):
        self.api = api
        if debounce is None:
            debounce = get_settings().quote_debounce_ms / 1000
        self.debounce = debounce
        self.on_update = on_update

        self.quote: Optional[dict] = None
        self.error: Optional[str] = None
        self.loading = False
        self.inputs: Optional[QuoteInput] = None

        self._token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def token(self) -> int:
        return self._token

    def update(self, source: dict, dest: dict, amount: str) -> int:
        """Schedule a quote for new inputs, superseding any pending request.

        Returns:
            The token of the new request
        """
        self._token += 1
        token = self._token
        self._cancel_pending()
        self.inputs = QuoteInput(source=source, dest=dest, amount=amount)

        if not _is_positive(amount):
            self._publish(quote=None, error=None)
            return token

        self._task = asyncio.get_running_loop().create_task(self._run(token, self.inputs))
        return token

    def _cancel_pending(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    def _publish(self, quote: Optional[dict], error: Optional[str]) -> None:
        self.quote = quote
        self.error = error
        self.loading = False
        if self.on_update:
            self.on_update(self)

    async def _run(self, token: int, request: QuoteInput) -> None:
        await asyncio.sleep(self.debounce)
        if token != self._token:
            return
        self.loading = True
        try:
            quotes = await self.api.get_swap_quote(
                request.source["code"],
                request.source.get("issuer"),
                request.dest["code"],
                request.dest.get("issuer"),
                request.amount,
            )
        except StellarDexError as e:
            if token != self._token:
                logger.debug(f"Discarding stale quote error for request {token}")
                return
            message = NO_PATH_MESSAGE if isinstance(e, NoPathFound) else e.message
            self._publish(quote=None, error=message)
            return

        if token != self._token:
            logger.debug(f"Discarding stale quote for request {token} (latest {self._token})")
            return
        if quotes:
            self._publish(quote=quotes[0], error=None)
        else:
            self._publish(quote=None, error=NO_PATH_MESSAGE)

    async def wait(self) -> None:
        """Wait for the pending request, if any, to finish."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def close(self) -> None:
        self._token += 1
        task = self._task
        self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
