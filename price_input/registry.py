"""
Input Registry - Named factories for price inputs.

The host agent looks inputs up by name and builds one instance per
configured collector; nothing downstream depends on a specific provider.
"""

import logging
from typing import Callable, Optional

import aiohttp

from price_input.base import BasePriceInput
from price_input.exceptions import ConfigurationError
from price_input.models import CollectorConfig
from price_input.providers import BinancePriceInput


logger = logging.getLogger(__name__)


InputFactory = Callable[[CollectorConfig, Optional[aiohttp.ClientSession]], BasePriceInput]


class InputRegistry:
    """
    Registry of price input factories.

    Usage:
        registry = InputRegistry()
        registry.add("binance", BinancePriceInput)

        price_input = registry.create("binance", config)
        await price_input.initialize()
    """

    def __init__(self) -> None:
        self._factories: dict[str, InputFactory] = {}

    def add(self, name: str, factory: InputFactory) -> None:
        """Register a factory under `name`, replacing any previous one."""
        if name in self._factories:
            logger.warning(f"Input '{name}' already registered, replacing")
        self._factories[name] = factory
        logger.debug(f"Registered input '{name}'")

    def remove(self, name: str) -> Optional[InputFactory]:
        """Unregister an input."""
        return self._factories.pop(name, None)

    def list_inputs(self) -> list[str]:
        """Registered input names, sorted."""
        return sorted(self._factories)

    def create(
        self,
        name: str,
        config: CollectorConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> BasePriceInput:
        """
        Build an uninitialized input.

        Raises:
            ConfigurationError: If no input is registered under `name`
        """
        factory = self._factories.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown input '{name}' (available: {', '.join(self.list_inputs()) or 'none'})",
                config_key="input",
            )
        return factory(config, session)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


# Global registry instance
_default_registry: Optional[InputRegistry] = None


def get_default_registry() -> InputRegistry:
    """Get the default registry with the built-in inputs registered."""
    global _default_registry
    if _default_registry is None:
        _default_registry = InputRegistry()
        _default_registry.add("binance", BinancePriceInput)
    return _default_registry
