"""Default strategy for retailers without specific rules, including the "other" bucket."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class DefaultStrategy(RetailerStrategy):
    retailer = "default"
    # Common product-page path shapes across shops
    product_page_patterns = compile_patterns(
        r"/products?/[^/?#]+",
        r"/p/[^/?#]+",
        r"/prd/\d+",
        r"/item/[^/?#]+",
        r"/dp/[a-z0-9]{10}",
        r"/\d{6,}(?:[/.?#]|$)",
    )
    noisy = True
