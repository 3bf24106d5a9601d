"""Zara retailer strategy."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class ZaraStrategy(RetailerStrategy):
    retailer = "zara"
    product_page_patterns = compile_patterns(r"-p\d{6,}\.html")
