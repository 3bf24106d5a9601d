"""Zalando retailer strategy."""

from __future__ import annotations

from gallery_collector.ingest.retailers.strategies.base import RetailerStrategy, compile_patterns


class ZalandoStrategy(RetailerStrategy):
    retailer = "zalando"
    # Article codes look like HW123E00A-Q11
    product_page_patterns = compile_patterns(r"-[a-z0-9]{9}-[a-z0-9]{3}\.html")
