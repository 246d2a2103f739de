"""
Shared fixtures for price input tests.

BinanceStub serves /api/v3/exchangeInfo and /api/v3/ticker/price from a
local aiohttp server so the inputs exercise real HTTP, timeouts included.
"""

import asyncio
from typing import Any, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from price_input import CollectorConfig


class BinanceStub:
    """Configurable stand-in for the Binance public API."""

    def __init__(self) -> None:
        self.exchange_info_response: tuple[int, Any] = (200, {"symbols": [{"symbol": "BTCUSDT"}]})
        self.price_response: tuple[int, Any] = (200, {"symbol": "BTCUSDT", "price": "50000.12"})
        self.price_delay = 0.0
        self.exchange_info_delay = 0.0
        self.requests: list[dict[str, Any]] = []
        self.base_url: Optional[str] = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/v3/exchangeInfo", self._exchange_info)
        app.router.add_get("/api/v3/ticker/price", self._price)
        return app

    def requests_to(self, path: str) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["path"].endswith(path)]

    async def _exchange_info(self, request: web.Request) -> web.StreamResponse:
        return await self._respond(request, self.exchange_info_response, self.exchange_info_delay)

    async def _price(self, request: web.Request) -> web.StreamResponse:
        return await self._respond(request, self.price_response, self.price_delay)

    async def _respond(self, request: web.Request, response: tuple[int, Any], delay: float) -> web.StreamResponse:
        self.requests.append({
            "path": request.path,
            "query": dict(request.query),
            "headers": dict(request.headers),
        })
        if delay:
            await asyncio.sleep(delay)

        status, body = response
        if isinstance(body, (dict, list)):
            return web.json_response(body, status=status)
        return web.Response(status=status, text=body, content_type="application/json")


@pytest_asyncio.fixture
async def binance_stub():
    """Running BinanceStub; base_url points at its /api/v3 root."""
    stub = BinanceStub()
    server = TestServer(stub.app())
    await server.start_server()
    stub.base_url = str(server.make_url("/api/v3"))
    try:
        yield stub
    finally:
        await server.close()


@pytest.fixture
def make_config():
    """Build a CollectorConfig pointed at a stub."""
    def _make(stub: BinanceStub, **overrides) -> CollectorConfig:
        values = {
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "timeout": 2.0,
            "base_url": stub.base_url,
        }
        values.update(overrides)
        return CollectorConfig(**values)
    return _make
