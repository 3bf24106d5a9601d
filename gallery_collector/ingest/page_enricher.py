"""Fetch product pages to fill in the image and page text of a candidate."""

from __future__ import annotations

import logging

import httpx

from gallery_collector.config import Settings
from gallery_collector.ingest.http_client import FetchError, fetch_with_policy, policy_from_settings
from gallery_collector.ingest.json_extractor import extract_page_image, extract_page_text
from gallery_collector.ingest.rate_limiter import RequestPacer
from gallery_collector.models import Candidate
from gallery_collector.normalize.urls import absolutize, is_http_url

logger = logging.getLogger(__name__)


class PageEnricher:
    """
    Fetches a candidate's product page.

    Sets ``page_text`` and, when the candidate has no image yet, ``image_url``.
    Fetch failures leave the candidate unchanged.
    """

    def __init__(self, client: httpx.AsyncClient, config: Settings, pacer: RequestPacer):
        self.client = client
        self.config = config
        self.pacer = pacer
        self.policy = policy_from_settings("product_page", config)
        self.pages_fetched = 0

    async def enrich(self, candidate: Candidate) -> Candidate:
        await self.pacer.wait()
        try:
            resp = await fetch_with_policy(
                self.client,
                candidate.product_url,
                self.policy,
                headers={"Accept-Language": self.config.accept_language},
            )
        except FetchError as e:
            logger.debug(f"Product page fetch failed for {candidate.product_url}: {e}")
            return candidate
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Product page fetch failed for {candidate.product_url}: {type(e).__name__}")
            return candidate

        self.pages_fetched += 1
        page_html = resp.text
        candidate.page_text = extract_page_text(page_html, self.config.page_text_max_chars)

        if not candidate.image_url:
            image = extract_page_image(page_html)
            if image:
                resolved = absolutize(image, str(resp.url))
                if is_http_url(resolved):
                    candidate.image_url = resolved

        return candidate
