"""
Providers package - Price input implementations.
"""

from price_input.providers.binance import BinancePriceInput


__all__ = [
    "BinancePriceInput",
]
