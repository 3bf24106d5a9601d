"""Pinterest strategy.

Pins are re-shares of anything, so a brand hit alone is not enough.
"""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class PinterestStrategy(RetailerStrategy):
    retailer = "pinterest"
    product_page_patterns = compile_patterns(r"/pin/\d+")
    noisy = True
