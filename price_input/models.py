"""
Price Input Models - Configuration and payload structures.

Everything here is immutable once built: the collector computes its
configuration, tags and endpoints once at initialization and only reads
them afterwards.
"""

import logging
import math
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from price_input.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://api.binance.com/api/v3"
DEFAULT_TIMEOUT_SECONDS = 5.0

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ns|us|µs|ms|s|m|h)?\s*$")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

SAMPLE_CONFIG = """\
# Current spot price of a trading pair from the Binance public API
binance:
  ## Base asset of the trading pair, e.g. BTC
  base_asset: "BTC"

  ## Quote asset of the trading pair, e.g. USDT
  quote_asset: "USDT"

  ## Timeout for each HTTP request. Accepts seconds or a duration
  ## string ("5s", "500ms"). Set to 0 to disable the client-side deadline.
  # timeout: "5s"

  ## API root the endpoints are resolved against.
  # base_url: "https://api.binance.com/api/v3"
"""


def sample_config() -> str:
    """Return the documented sample configuration."""
    return SAMPLE_CONFIG


def parse_duration(value: Union[str, int, float, None], key: str = "timeout") -> Optional[float]:
    """
    Parse a duration into seconds.

    Numbers are taken as seconds. Strings may carry a unit suffix
    (ns, us, ms, s, m, h); a bare number string is seconds.
    None means "not set" and is returned unchanged.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid duration for {key}: {value!r}", config_key=key)
    if isinstance(value, (int, float)):
        return float(value)

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ConfigurationError(f"Invalid duration for {key}: {value!r}", config_key=key)

    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


# ============================================================
# LIFECYCLE
# ============================================================

class InputState(Enum):
    """Lifecycle state of a price input."""
    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    REJECTED = "rejected"


# ============================================================
# CONFIGURATION
# ============================================================

@dataclass(frozen=True)
class CollectorConfig:
    """
    Collector configuration.

    Symbol is the case-preserving concatenation of base and quote asset.
    A timeout of 0 disables the client-side deadline; leaving it unset
    keeps the 5 second default.
    """

    base_asset: str
    """Base asset code, e.g. BTC."""

    quote_asset: str
    """Quote asset code, e.g. USDT."""

    timeout: float = DEFAULT_TIMEOUT_SECONDS
    """Per-request deadline in seconds (0 = no deadline)."""

    base_url: str = DEFAULT_BASE_URL
    """API root the endpoints are resolved against."""

    @property
    def symbol(self) -> str:
        """Canonical trading pair symbol."""
        return f"{self.base_asset}{self.quote_asset}"

    @property
    def request_timeout(self) -> Optional[float]:
        """Deadline to apply to a single request, None when disabled."""
        return self.timeout if self.timeout > 0 else None

    def tags(self) -> Mapping[str, str]:
        """Tag set attached to every emitted metric."""
        return MappingProxyType({
            "base": self.base_asset,
            "quote": self.quote_asset,
        })

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid setting."""
        if not self.base_asset or not self.quote_asset:
            raise ConfigurationError(
                "base_asset and quote_asset cannot be empty",
                config_key="base_asset" if not self.base_asset else "quote_asset",
            )
        if not math.isfinite(self.timeout):
            raise ConfigurationError(
                f"timeout must be a finite number of seconds: {self.timeout}",
                config_key="timeout",
            )
        if self.timeout < 0:
            raise ConfigurationError(
                f"timeout cannot be negative: {self.timeout}",
                config_key="timeout",
            )
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty", config_key="base_url")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CollectorConfig":
        """Build configuration from a plain mapping (e.g. parsed YAML)."""
        known = {"base_asset", "quote_asset", "timeout", "base_url"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        timeout = parse_duration(data.get("timeout"))
        return cls(
            base_asset=str(data.get("base_asset") or ""),
            quote_asset=str(data.get("quote_asset") or ""),
            timeout=DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout,
            base_url=str(data.get("base_url") or DEFAULT_BASE_URL),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path], section: str = "binance") -> "CollectorConfig":
        """
        Load configuration from a YAML file.

        The settings may sit at the top level or under a `binance` section.
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config from {path}",
                original_error=e,
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        if isinstance(data.get(section), dict):
            data = data[section]
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> "CollectorConfig":
        """Load configuration from environment variables (and .env)."""
        load_dotenv()
        timeout = parse_duration(os.getenv("PRICE_INPUT_TIMEOUT") or None)
        return cls(
            base_asset=os.getenv("PRICE_INPUT_BASE_ASSET", ""),
            quote_asset=os.getenv("PRICE_INPUT_QUOTE_ASSET", ""),
            timeout=DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout,
            base_url=os.getenv("PRICE_INPUT_BASE_URL", DEFAULT_BASE_URL),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "base_asset": self.base_asset,
            "quote_asset": self.quote_asset,
            "symbol": self.symbol,
            "timeout": self.timeout,
            "base_url": self.base_url,
        }


@dataclass(frozen=True)
class ResolvedEndpoints:
    """Absolute URLs queried by the input."""
    price_url: str
    exchange_info_url: str


# ============================================================
# WIRE PAYLOADS
# ============================================================

_REQUIRED = object()


def _typed(data: Mapping[str, Any], key: str, kind: type, default: Any = _REQUIRED) -> Any:
    if default is _REQUIRED and key not in data:
        raise ValueError(f"field {key!r} is missing")
    value = data.get(key, default)
    # bool is an int subclass; the remote never sends one for these keys
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class RemoteErrorPayload:
    """Error body returned by the remote service on a non-200 status."""
    code: int
    msg: str

    @classmethod
    def from_json(cls, data: Any) -> "RemoteErrorPayload":
        """Decode from parsed JSON; raises ValueError on a wrong shape."""
        if not isinstance(data, dict):
            raise ValueError(f"error payload must be an object, got {type(data).__name__}")
        return cls(
            code=_typed(data, "code", int, 0),
            msg=_typed(data, "msg", str, ""),
        )


@dataclass(frozen=True)
class PriceTick:
    """Success payload of the price endpoint. Price arrives as a string."""
    symbol: str
    price: str

    @classmethod
    def from_json(cls, data: Any) -> "PriceTick":
        """
        Decode from parsed JSON; raises ValueError on a wrong shape.

        `price` is required: an error payload read as a tick must not
        turn into a tick with an empty price.
        """
        if not isinstance(data, dict):
            raise ValueError(f"tick payload must be an object, got {type(data).__name__}")
        return cls(
            symbol=_typed(data, "symbol", str, ""),
            price=_typed(data, "price", str),
        )


# ============================================================
# METRIC
# ============================================================

@dataclass(frozen=True)
class Metric:
    """One timestamped measurement handed to the accumulator."""
    name: str
    fields: dict[str, float]
    tags: dict[str, str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "fields": dict(self.fields),
            "tags": dict(self.tags),
            "timestamp": self.timestamp.isoformat(),
        }
