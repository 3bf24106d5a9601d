"""Search source registry."""

from __future__ import annotations

from typing import Type

import httpx

from gallery_collector.config import Settings
from gallery_collector.ingest.rate_limiter import RequestPacer
from gallery_collector.ingest.sources.base import SearchSource
from gallery_collector.ingest.sources.bing_images import BingImagesSource
from gallery_collector.ingest.sources.bing_rss import BingRssSource
from gallery_collector.ingest.sources.duckduckgo import DuckDuckGoSource


_SOURCES: dict[str, Type[SearchSource]] = {
    "bing_images": BingImagesSource,
    "bing_rss": BingRssSource,
    "duckduckgo": DuckDuckGoSource,
}


def get_source(
    backend: str,
    client: httpx.AsyncClient,
    config: Settings,
    pacer: RequestPacer,
) -> SearchSource:
    """Instantiate the source for ``backend``.

    Raises:
        ValueError: If the backend is not registered
    """
    if backend not in _SOURCES:
        raise ValueError(f"Unknown search backend: {backend}. Available: {list(_SOURCES)}")
    return _SOURCES[backend](client, config, pacer)


def register_source(backend: str, source_class: Type[SearchSource]) -> None:
    _SOURCES[backend] = source_class


__all__ = [
    "SearchSource",
    "BingImagesSource",
    "BingRssSource",
    "DuckDuckGoSource",
    "get_source",
    "register_source",
]
