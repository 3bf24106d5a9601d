"""Next retailer strategy."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class NextStrategy(RetailerStrategy):
    retailer = "next"
    product_page_patterns = compile_patterns(
        r"/style/[a-z0-9]+(?:/[a-z0-9]+)?",
        r"/g\d+s\d+/\d+",
    )
