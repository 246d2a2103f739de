"""
Binance Price Input - Spot price of one trading pair.

Endpoints used (public, no authentication):
- /exchangeInfo?symbol=<SYMBOL> - Symbol existence, checked once at startup
- /ticker/price?symbol=<SYMBOL> - Latest price, every gather cycle

Error bodies on any non-200 status look like {"code": -1121, "msg": "Invalid symbol."}.
"""

import asyncio
import logging
from datetime import datetime, timezone

import aiohttp

from price_input.accumulator import Accumulator
from price_input.base import BasePriceInput, HttpResult
from price_input.endpoints import resolve_endpoints
from price_input.exceptions import GatherError, InitializationError
from price_input.models import PriceTick, RemoteErrorPayload, ResolvedEndpoints


logger = logging.getLogger(__name__)


class BinancePriceInput(BasePriceInput):
    """
    Binance spot price input.

    Initialization is strict: any non-200 from exchangeInfo rejects the
    input. Gathering is lenient: a non-200 from the price endpoint is
    reported, then the same body is still tried as a tick.
    """

    MEASUREMENT = "binance"

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "binance"

    def resolve_endpoints(self) -> ResolvedEndpoints:
        """Resolve price and exchange-info URLs for the configured symbol."""
        logger.debug(f"[{self.name}] Creating URLs")
        return resolve_endpoints(self._config.base_url, self.symbol)

    async def verify(self) -> None:
        """Check exchangeInfo for the symbol; any 200 means it exists."""
        url = self._endpoints.exchange_info_url

        try:
            result = await self._get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise InitializationError(
                f"failed to get response from {url}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=url,
                original_error=e,
            ) from e

        if result.status == 200:
            return

        payload = self._decode_error_payload(result, InitializationError)
        raise InitializationError(
            f"binance responded with status {payload.msg} (code {payload.code}) for symbol {self.symbol}",
            source_name=self.name,
            symbol=self.symbol,
            request_url=url,
            status_code=result.status,
            remote_code=payload.code,
            remote_message=payload.msg,
        )

    async def poll(self, acc: Accumulator) -> None:
        """Fetch, decode and parse the current price into one metric."""
        url = self._endpoints.price_url

        try:
            result = await self._get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            acc.add_error(GatherError(
                f"failed to get response from {url}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=url,
                original_error=e,
            ))
            return

        if result.status != 200:
            try:
                payload = self._decode_error_payload(result, GatherError)
            except GatherError as e:
                acc.add_error(e)
                return
            acc.add_error(GatherError(
                f"binance responded with status {payload.msg} (code {payload.code}) for symbol {self.symbol}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=url,
                status_code=result.status,
                remote_code=payload.code,
                remote_message=payload.msg,
            ))
            # Not a hard stop: the body may still hold a usable tick.

        try:
            tick = PriceTick.from_json(result.json())
        except ValueError as e:
            acc.add_error(GatherError(
                f"cannot decode response from {url}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=url,
                status_code=result.status,
                original_error=e,
            ))
            return

        fields: dict[str, float] = {}
        try:
            fields["price"] = float(tick.price.strip())
        except ValueError as e:
            acc.add_error(GatherError(
                f"cannot parse price {tick.price!r}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=url,
                status_code=result.status,
                original_error=e,
            ))

        acc.add_fields(self.MEASUREMENT, fields, self._tags, datetime.now(timezone.utc))

    def _decode_error_payload(self, result: HttpResult, error_cls: type) -> RemoteErrorPayload:
        """Decode a non-200 body, raising `error_cls` when it is not an error payload."""
        try:
            return RemoteErrorPayload.from_json(result.json())
        except ValueError as e:
            raise error_cls(
                f"cannot decode response from {result.url}",
                source_name=self.name,
                symbol=self.symbol,
                request_url=result.url,
                status_code=result.status,
                original_error=e,
            ) from e
