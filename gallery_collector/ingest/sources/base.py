"""Base class for search-engine sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List
from urllib.parse import quote_plus

import httpx

from gallery_collector.config import Settings
from gallery_collector.ingest.http_client import FetchError, fetch_with_policy, policy_from_settings
from gallery_collector.ingest.rate_limiter import RequestPacer
from gallery_collector.logging_config import get_logger
from gallery_collector.models import Candidate, SearchResponse


class SearchSource(ABC):
    """
    A search backend: builds result-page URLs, fetches them and parses the markup.

    ``search`` never raises for network or HTTP failures; those come back as an
    empty ``SearchResponse`` with ``error`` set.
    """

    name: str = "generic"
    results_per_page: int = 10
    requires_page_fetch: bool = False

    def __init__(self, client: httpx.AsyncClient, config: Settings, pacer: RequestPacer):
        self.client = client
        self.config = config
        self.pacer = pacer
        self.policy = policy_from_settings(self.name, config)
        self.log = get_logger(__name__, backend=self.name)

    @staticmethod
    def encode(query: str) -> str:
        return quote_plus(query)

    def offset(self, page: int) -> int:
        return page * self.results_per_page

    @abstractmethod
    def build_url(self, query: str, page: int) -> str:
        """URL of result page ``page`` (0-based) for ``query``."""

    @abstractmethod
    def parse(self, body: str) -> List[Candidate]:
        """Extract candidates from a raw response body."""

    async def search(self, query: str, page: int = 0) -> SearchResponse:
        """Fetch one result page."""
        url = self.build_url(query, page)
        await self.pacer.wait()
        try:
            resp = await fetch_with_policy(
                self.client,
                url,
                self.policy,
                headers={"Accept-Language": self.config.accept_language},
            )
        except FetchError as e:
            self.log.warning(f"{self.name}: no results for page {page} of {query!r}: {e}")
            return SearchResponse(url=url, status_code=e.status_code, error=str(e))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.log.warning(f"{self.name}: HTTP error for page {page} of {query!r}: {type(e).__name__}: {e}")
            return SearchResponse(url=url, error=f"{type(e).__name__}: {e}")

        return SearchResponse(url=url, status_code=resp.status_code, raw_body=resp.text)
