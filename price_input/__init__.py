"""
Price Input Package - Spot price collection for a telemetry agent.

Polls the current price of one trading pair and hands it to the host's
metric pipeline as a tagged, timestamped measurement.

Features:
- Configuration validated before any network call
- Symbol verified once against the remote service at startup
- Timeout-bounded gather cycles that never raise into the host
- Partial failures still emit the metric, without the price field

Quick Start:
    from price_input import (
        BinancePriceInput,
        CollectorConfig,
        MemoryAccumulator,
    )

    async def collect():
        config = CollectorConfig(base_asset="BTC", quote_asset="USDT")
        async with BinancePriceInput(config) as source:
            await source.initialize()

            acc = MemoryAccumulator()
            await source.gather(acc)

            for metric in acc.metrics:
                print(f"{metric.timestamp}: {metric.tags} {metric.fields}")
            for error in acc.errors:
                print(f"error: {error}")

Adding New Inputs:
    1. Create class extending BasePriceInput
    2. Implement: name, resolve_endpoints(), verify(), poll()
    3. Register with InputRegistry.add()
"""

__version__ = "1.0.0"

from price_input.accumulator import Accumulator, LoggingAccumulator, MemoryAccumulator
from price_input.base import BasePriceInput, HttpResult
from price_input.endpoints import resolve_endpoints
from price_input.exceptions import (
    ConfigurationError,
    GatherError,
    InitializationError,
    PriceInputError,
    RemoteCallError,
)
from price_input.models import (
    CollectorConfig,
    InputState,
    Metric,
    PriceTick,
    RemoteErrorPayload,
    ResolvedEndpoints,
    parse_duration,
    sample_config,
)
from price_input.providers import BinancePriceInput
from price_input.registry import InputRegistry, get_default_registry


__all__ = [
    # Base
    "BasePriceInput",
    "HttpResult",

    # Models
    "CollectorConfig",
    "InputState",
    "Metric",
    "PriceTick",
    "RemoteErrorPayload",
    "ResolvedEndpoints",
    "parse_duration",
    "sample_config",
    "resolve_endpoints",

    # Accumulators
    "Accumulator",
    "MemoryAccumulator",
    "LoggingAccumulator",

    # Exceptions
    "PriceInputError",
    "ConfigurationError",
    "RemoteCallError",
    "InitializationError",
    "GatherError",

    # Providers
    "BinancePriceInput",

    # Registry
    "InputRegistry",
    "get_default_registry",
]
