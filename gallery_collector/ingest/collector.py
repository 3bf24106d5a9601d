"""Collection loop: queries -> result pages -> candidates -> relevance filter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from gallery_collector.config import Settings
from gallery_collector.detect.relevance import RelevanceFilter
from gallery_collector.ingest.debug_store import DebugStore
from gallery_collector.ingest.page_enricher import PageEnricher
from gallery_collector.ingest.sources.base import SearchSource
from gallery_collector.models import Candidate

logger = logging.getLogger(__name__)

ADD = "ADD"
SKIP_NO_IMAGE = "SKIP_NO_IMAGE"
SKIP_DUPLICATE = "SKIP_DUPLICATE_URL"


@dataclass
class CollectionResult:
    candidates: List[Candidate] = field(default_factory=list)
    pages_fetched: int = 0
    candidates_seen: int = 0
    failed_pages: int = 0


class CandidateCollector:
    """
    Runs every query through the search source, one page at a time.

    A query stops paging when a page fails or yields no candidates.
    Collection stops once ``max_candidates`` candidates were kept.
    """

    def __init__(
        self,
        config: Settings,
        source: SearchSource,
        relevance: RelevanceFilter,
        debug_store: DebugStore,
        enricher: Optional[PageEnricher] = None,
    ):
        self.config = config
        self.source = source
        self.relevance = relevance
        self.debug_store = debug_store
        self.enricher = enricher
        if enricher is None and source.requires_page_fetch:
            logger.warning(f"{source.name} results have no images and no page enricher is set")

    @property
    def fetch_pages(self) -> bool:
        return self.enricher is not None

    async def collect(self, queries: Sequence[str]) -> CollectionResult:
        result = CollectionResult()
        seen_pairs: set[tuple[str, str]] = set()

        for query_index, query in enumerate(queries):
            if self._full(result):
                break
            logger.info(f"Query {query_index + 1}/{len(queries)}: {query}")

            for page in range(self.config.max_pages_per_query):
                if self._full(result):
                    break

                response = await self.source.search(query, page)
                logger.info(
                    f"{self.source.name} page={page} status={response.status_code} "
                    f"chars={len(response.raw_body)} url={response.url}"
                )
                if not response.ok:
                    result.failed_pages += 1
                    break

                result.pages_fetched += 1
                self.debug_store.write_snapshot(self.source.name, query_index, page, response.raw_body)

                parsed = self.source.parse(response.raw_body)
                logger.info(f"Parsed candidates: {len(parsed)}")
                if not parsed:
                    break

                for candidate in parsed:
                    result.candidates_seen += 1
                    pair = (candidate.product_url, candidate.image_url)
                    if pair in seen_pairs:
                        continue
                    seen_pairs.add(pair)

                    await self._process(candidate, result)
                    if self._full(result):
                        break

        logger.info(
            f"Collected {len(result.candidates)} candidates from {result.pages_fetched} pages "
            f"({result.candidates_seen} seen, {result.failed_pages} failed pages)"
        )
        return result

    def _full(self, result: CollectionResult) -> bool:
        return len(result.candidates) >= self.config.max_candidates

    async def _process(self, candidate: Candidate, result: CollectionResult) -> None:
        # Classify first so pages are only fetched for allow-listed domains
        if self.fetch_pages and self.relevance.classify(candidate) is not None:
            candidate = await self.enricher.enrich(candidate)

        if not candidate.image_url:
            self.debug_store.record(SKIP_NO_IMAGE, candidate.product_url, candidate.image_url)
            return

        decision = self.relevance.evaluate(candidate)
        if not decision.allowed:
            self.debug_store.record(
                f"SKIP_{decision.reason.upper()}",
                candidate.product_url,
                candidate.image_url,
                retailer=decision.retailer,
                reason=decision.reason,
            )
            return

        result.candidates.append(candidate)
        self.debug_store.record(
            ADD,
            candidate.product_url,
            candidate.image_url,
            retailer=candidate.retailer,
            reason=decision.reason,
        )
