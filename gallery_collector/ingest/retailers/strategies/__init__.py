"""Retailer strategy registry."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns
from gallery_collector.ingest.retailers.strategies.asos_strategy import AsosStrategy
from gallery_collector.ingest.retailers.strategies.default_strategy import DefaultStrategy
from gallery_collector.ingest.retailers.strategies.hm_strategy import HMStrategy
from gallery_collector.ingest.retailers.strategies.next_strategy import NextStrategy
from gallery_collector.ingest.retailers.strategies.pinterest_strategy import PinterestStrategy
from gallery_collector.ingest.retailers.strategies.zalando_strategy import ZalandoStrategy
from gallery_collector.ingest.retailers.strategies.zara_strategy import ZaraStrategy


_STRATEGIES: dict[str, RetailerStrategy] = {
    "next": NextStrategy(),
    "hm": HMStrategy(),
    "zara": ZaraStrategy(),
    "asos": AsosStrategy(),
    "zalando": ZalandoStrategy(),
    "pinterest": PinterestStrategy(),
}


def get_strategy_for_retailer(retailer: str | None) -> RetailerStrategy:
    """Return strategy instance for retailer."""
    if not retailer:
        return DefaultStrategy()
    return _STRATEGIES.get(retailer.lower(), DefaultStrategy())


def register_strategy(retailer: str, strategy: RetailerStrategy) -> None:
    _STRATEGIES[retailer.lower()] = strategy


__all__ = [
    "RetailerStrategy",
    "compile_patterns",
    "get_strategy_for_retailer",
    "register_strategy",
]
