"""Retailer-specific strategy base classes."""

from __future__ import annotations

import re
from typing import Pattern, Sequence


class RetailerStrategy:
    """Base retailer strategy implementation.

    ``product_page_patterns`` describe the URL shape of a single product page.
    ``noisy`` retailers always need an apparel keyword to pass the relevance gate.
    """

    retailer: str = "generic"
    product_page_patterns: Sequence[Pattern[str]] = ()
    noisy: bool = False

    def is_product_page(self, url: str) -> bool:
        """True when ``url`` looks like a single product listing."""
        return any(pattern.search(url or "") for pattern in self.product_page_patterns)

    def requires_keyword_gate(self, url: str) -> bool:
        """Whether a candidate from this retailer also needs an apparel keyword."""
        if self.noisy:
            return True
        return not self.is_product_page(url)


def compile_patterns(*patterns: str) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)
