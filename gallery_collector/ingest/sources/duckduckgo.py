"""DuckDuckGo HTML source. Results carry no image, so product pages must be fetched."""

from __future__ import annotations

from gallery_collector.ingest.result_parser import parse_duckduckgo_results
from gallery_collector.ingest.sources.base import SearchSource


class DuckDuckGoSource(SearchSource):
    name = "duckduckgo"
    results_per_page = 30
    requires_page_fetch = True

    def build_url(self, query: str, page: int) -> str:
        url = f"https://html.duckduckgo.com/html/?q={self.encode(query)}&kl=uk-en"
        if page:
            url += f"&s={self.offset(page)}"
        return url

    def parse(self, body: str):
        return parse_duckduckgo_results(body)
