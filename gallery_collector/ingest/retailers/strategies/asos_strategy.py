"""ASOS retailer strategy."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class AsosStrategy(RetailerStrategy):
    retailer = "asos"
    product_page_patterns = compile_patterns(r"/prd/\d+")
