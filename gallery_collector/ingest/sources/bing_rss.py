"""Bing web search RSS source."""

from __future__ import annotations

from gallery_collector.ingest.result_parser import parse_rss_items
from gallery_collector.ingest.sources.base import SearchSource


class BingRssSource(SearchSource):
    name = "bing_rss"
    results_per_page = 10

    def build_url(self, query: str, page: int) -> str:
        # Bing's "first" is 1-based
        return (
            f"https://www.bing.com/search?format=rss&q={self.encode(query)}"
            f"&first={self.offset(page) + 1}&count={self.results_per_page}"
        )

    def parse(self, body: str):
        return parse_rss_items(body)
