"""Collector entry point."""

import asyncio
import logging
import sys
from collections import Counter
from typing import Optional

import httpx

from gallery_collector.config import Settings, settings
from gallery_collector.detect.relevance import build_relevance_filter
from gallery_collector.ingest.collector import CandidateCollector
from gallery_collector.ingest.debug_store import DebugStore
from gallery_collector.ingest.http_client import create_client
from gallery_collector.ingest.page_enricher import PageEnricher
from gallery_collector.ingest.rate_limiter import RequestPacer
from gallery_collector.ingest.sources import get_source
from gallery_collector.logging_config import setup_logging
from gallery_collector.models import RunSummary
from gallery_collector.output.dedupe import Deduplicator
from gallery_collector.output.writer import GalleryWriter, OutputWriteError
from gallery_collector.search.query_builder import query_builder

logger = logging.getLogger(__name__)


async def run(
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunSummary:
    """
    One collection run: search, filter, dedupe, write.

    Args:
        config: Run settings
        transport: Optional httpx transport (tests pass a MockTransport)

    Raises:
        OutputWriteError: If the output file cannot be written
    """
    summary = RunSummary()
    queries = query_builder.from_settings(config)
    summary.queries = len(queries)
    logger.info(
        f"Collector starting: backend={config.search_backend} mode={config.relevance_mode} "
        f"queries={len(queries)} max_items={config.max_items}"
    )

    debug_store = DebugStore(config)
    pacer = RequestPacer(config.request_delay_seconds)

    async with create_client(config, transport=transport) as client:
        source = get_source(config.search_backend, client, config, pacer)
        enricher = PageEnricher(client, config, pacer) if config.needs_page_fetch else None
        collector = CandidateCollector(
            config,
            source,
            build_relevance_filter(config),
            debug_store,
            enricher=enricher,
        )
        collected = await collector.collect(queries)

    summary.pages_fetched = collected.pages_fetched
    summary.product_pages_fetched = enricher.pages_fetched if enricher else 0
    summary.candidates_seen = collected.candidates_seen
    summary.candidates_kept = len(collected.candidates)

    debug_store.flush()

    final = Deduplicator.from_settings(config).dedupe(collected.candidates)
    summary.retailer_counts = dict(Counter(item.retailer for item in final))

    summary.output_written = GalleryWriter.from_settings(config).write(final)
    summary.items_written = len(final) if summary.output_written else 0

    logger.info(
        f"Finished. Total items written: {summary.items_written} "
        f"(per retailer: {summary.retailer_counts}, "
        f"product pages fetched: {summary.product_pages_fetched})"
    )
    return summary


def main(config: Optional[Settings] = None) -> int:
    """Run the collector and return the process exit code.

    Only an output write failure is fatal. Anything else is logged and the
    run still exits 0 so a scheduler does not report an empty search day as
    an outage.
    """
    config = config or settings
    setup_logging(config)

    try:
        asyncio.run(run(config))
    except OutputWriteError:
        logger.exception("Fatal error: output not written")
        return 1
    except Exception:
        logger.exception("Collector failed; previous output left in place")
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
