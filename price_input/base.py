"""
Base Price Input - Abstract interface for all price inputs.

Lifecycle:
    UNVALIDATED --initialize()--> VALIDATED --gather()--> VALIDATED ...
                          \\----> REJECTED (terminal)

Every input:
1. Implements resolve_endpoints() - Build its URLs from the configuration
2. Implements verify() - One-time remote check, raises InitializationError
3. Implements poll() - One gather cycle, reports failures to the accumulator
4. Declares a name used for logging and registration
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

import aiohttp

from price_input import __version__
from price_input.accumulator import Accumulator
from price_input.exceptions import GatherError, InitializationError, PriceInputError
from price_input.models import CollectorConfig, InputState, ResolvedEndpoints


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResult:
    """Status and fully read body of one HTTP call."""
    url: str
    status: int
    body: bytes
    latency_ms: float

    def json(self) -> Any:
        """Parse the body as JSON; raises ValueError when it is not JSON."""
        return json.loads(self.body)


class BasePriceInput(ABC):
    """
    Abstract base class for price inputs.

    The HTTP session is shared by every call this input makes and is not
    modified after creation. Each call gets its own deadline.
    """

    def __init__(
        self,
        config: CollectorConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._owns_session = session is None
        self._headers = self._build_headers()

        self._state = InputState.UNVALIDATED
        self._tags: Mapping[str, str] = MappingProxyType({})
        self._endpoints: Optional[ResolvedEndpoints] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this input."""
        pass

    @abstractmethod
    def resolve_endpoints(self) -> ResolvedEndpoints:
        """
        Build the URLs this input queries.

        Raises:
            ConfigurationError: If the configured base URL is unusable
        """
        pass

    @abstractmethod
    async def verify(self) -> None:
        """
        Confirm with the remote service that the configured symbol exists.

        Raises:
            InitializationError: If verification fails for any reason
        """
        pass

    @abstractmethod
    async def poll(self, acc: Accumulator) -> None:
        """
        Run one gather cycle.

        Per-cycle failures go to acc.add_error(); this must not raise them.
        """
        pass

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    @property
    def config(self) -> CollectorConfig:
        return self._config

    @property
    def state(self) -> InputState:
        return self._state

    @property
    def symbol(self) -> str:
        return self._config.symbol

    @property
    def tags(self) -> Mapping[str, str]:
        return self._tags

    @property
    def endpoints(self) -> Optional[ResolvedEndpoints]:
        return self._endpoints

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    async def initialize(self) -> None:
        """
        Validate configuration and verify the symbol remotely.

        Succeeds once; a rejected input stays rejected.

        Raises:
            ConfigurationError: Invalid configuration (no network call made)
            InitializationError: Remote verification failed
        """
        if self._state == InputState.VALIDATED:
            return
        if self._state == InputState.REJECTED:
            raise InitializationError(
                "input was rejected during an earlier initialization",
                source_name=self.name,
                symbol=self.symbol,
            )

        logger.debug(f"[{self.name}] Validating configuration")
        try:
            self._config.validate()
            self._tags = self._config.tags()
            self._endpoints = self.resolve_endpoints()

            logger.info(f"[{self.name}] Verifying requested symbol {self.symbol}")
            await self.verify()
        except PriceInputError:
            self._state = InputState.REJECTED
            raise

        self._state = InputState.VALIDATED
        logger.info(f"[{self.name}] Input initialized successfully for {self.symbol}")

    async def gather(self, acc: Accumulator) -> None:
        """
        Run one gather cycle against an initialized input.

        Raises:
            InitializationError: If called before a successful initialize()
        """
        if self._state != InputState.VALIDATED:
            raise InitializationError(
                f"cannot gather in state {self._state.value}",
                source_name=self.name,
                symbol=self.symbol,
            )

        try:
            await self.poll(acc)
        except (aiohttp.ClientError, PriceInputError, ValueError) as e:
            acc.add_error(GatherError(
                f"unexpected failure during gather: {e}",
                source_name=self.name,
                symbol=self.symbol,
                original_error=e,
            ))

    # --------------------------------------------------------
    # HTTP
    # --------------------------------------------------------

    def _build_headers(self) -> Mapping[str, str]:
        """Fixed request headers, read-only for the life of the input."""
        return MappingProxyType({
            "User-Agent": f"price-input/{__version__}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _get(self, url: str) -> HttpResult:
        """
        GET `url` under a fresh deadline and read the whole body.

        The response is released before returning on every path.
        Transport failures and deadline expiry propagate as
        aiohttp.ClientError / asyncio.TimeoutError.
        """
        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        start_time = time.monotonic()
        async with session.get(url, headers=dict(self._headers), timeout=timeout) as response:
            body = await response.read()
            status = response.status

        latency_ms = (time.monotonic() - start_time) * 1000
        logger.debug(f"[{self.name}] GET {url} -> {status} in {latency_ms:.1f}ms")
        return HttpResult(url=url, status=status, body=body, latency_ms=latency_ms)

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BasePriceInput":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, symbol={self.symbol}, state={self._state.value})>"
