"""
Endpoint Resolver - Builds the query URLs for a symbol.

Pure and deterministic; never touches the network.
"""

from urllib.parse import urlencode, urlsplit

from price_input.exceptions import ConfigurationError
from price_input.models import ResolvedEndpoints


PRICE_PATH = "/ticker/price"
EXCHANGE_INFO_PATH = "/exchangeInfo"


def build_url(base_url: str, path: str, symbol: str) -> str:
    """Join `path` onto `base_url` and append `symbol=<symbol>`."""
    try:
        parts = urlsplit(base_url)
        host = parts.hostname
    except ValueError as e:
        raise ConfigurationError(
            f"failed to parse url {base_url!r}",
            config_key="base_url",
            original_error=e,
        ) from e

    if parts.scheme not in ("http", "https") or not host:
        raise ConfigurationError(
            f"failed to parse url {base_url!r}: expected an absolute http(s) URL",
            config_key="base_url",
        )
    if parts.query or parts.fragment:
        raise ConfigurationError(
            f"base url {base_url!r} must not carry a query or fragment",
            config_key="base_url",
        )

    return f"{base_url.rstrip('/')}{path}?{urlencode({'symbol': symbol})}"


def resolve_endpoints(base_url: str, symbol: str) -> ResolvedEndpoints:
    """Resolve the price and exchange-info URLs for `symbol`."""
    return ResolvedEndpoints(
        price_url=build_url(base_url, PRICE_PATH, symbol),
        exchange_info_url=build_url(base_url, EXCHANGE_INFO_PATH, symbol),
    )
