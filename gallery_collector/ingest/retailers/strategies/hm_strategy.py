"""H&M retailer strategy."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class HMStrategy(RetailerStrategy):
    retailer = "hm"
    product_page_patterns = compile_patterns(r"productpage\.\d{7,}\.html")
