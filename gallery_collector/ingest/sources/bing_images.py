"""Bing Images source: image + click-through page pairs from the HTML result grid."""

from __future__ import annotations

from gallery_collector.ingest.result_parser import parse_image_blobs
from gallery_collector.ingest.sources.base import SearchSource


class BingImagesSource(SearchSource):
    name = "bing_images"
    results_per_page = 35

    def build_url(self, query: str, page: int) -> str:
        # Paging: first=0, 35, 70...
        return (
            f"https://www.bing.com/images/search?q={self.encode(query)}"
            f"&first={self.offset(page)}&count={self.results_per_page}&form=HDRSC2"
        )

    def parse(self, body: str):
        return parse_image_blobs(body)
