"""Style keys: one id per product listing, per retailer."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import unquote

from gallery_collector.normalize.urls import normalize_path_key

logger = logging.getLogger(__name__)

StyleIdExtractor = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class StyleKey:
    """Canonical style key container."""

    retailer: str
    raw_id: str

    def as_string(self) -> str:
        return f"{self.retailer}:{self.raw_id}"


def pattern_extractor(*patterns: str, transform: Callable[[str], str] = str.lower) -> StyleIdExtractor:
    """Extractor returning the first capture group of the first matching pattern."""
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns]

    def extract(url: str) -> Optional[str]:
        for pattern in compiled:
            match = pattern.search(url)
            if match:
                return transform(match.group(1))
        return None

    return extract


class StyleKeyMapper:
    """
    Map retailer product URLs to style keys.

    Colour/size variants and tracking parameters collapse onto the same key.
    Retailers without an extractor, or URLs no extractor matches, fall back
    to the normalized host + path.
    """

    _extractors: dict[str, StyleIdExtractor] = {
        # /style/st123456/a12345 -> st123456
        "next": pattern_extractor(r"/style/([a-z0-9]+)", r"/g\d+s\d+/(\d+)"),
        # productpage.1234567001.html -> 1234567 (last three digits are the colour)
        "hm": pattern_extractor(r"productpage\.(\d{7})\d*\.html", r"[?&]article=(\d{7})"),
        # -p01234567.html?v1=... -> 01234567
        "zara": pattern_extractor(r"-p(\d{6,})\.html", r"[?&]v1=(\d+)"),
        "asos": pattern_extractor(r"/prd/(\d+)", r"[?&]productId=(\d+)"),
        # -hw123e00a-q11.html -> hw123e00a (suffix is the colour)
        "zalando": pattern_extractor(r"-([a-z0-9]{9})-[a-z0-9]{3}\.html"),
        "pinterest": pattern_extractor(r"/pin/(\d+)"),
    }

    def register(self, retailer: str, extractor: StyleIdExtractor) -> None:
        """Add or replace the extractor for a retailer."""
        self._extractors = {**self._extractors, retailer.lower(): extractor}

    def extract_style_id(self, retailer: str, url: Optional[str]) -> Optional[str]:
        """Retailer-specific id from a URL, or None."""
        if not retailer or not url:
            return None
        extractor = self._extractors.get(retailer.lower())
        if extractor is None:
            return None
        return extractor(unquote(url))

    def style_key(self, retailer: str, url: str) -> StyleKey:
        retailer = (retailer or "").lower()
        raw_id = self.extract_style_id(retailer, url)
        if not raw_id:
            raw_id = normalize_path_key(url)
        return StyleKey(retailer=retailer, raw_id=raw_id)

    def key_string(self, retailer: str, url: str) -> str:
        return self.style_key(retailer, url).as_string()


style_key_mapper = StyleKeyMapper()
