"""Deduplication of collected candidates into gallery items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from gallery_collector.config import Settings
from gallery_collector.detect.image_score import score_image_url
from gallery_collector.ingest.product_id_mapper import StyleKeyMapper, style_key_mapper
from gallery_collector.models import OutputItem
from gallery_collector.normalize.urls import is_bing_thumbnail, strip_query

logger = logging.getLogger(__name__)


class GalleryEntry(Protocol):
    retailer: Optional[str]
    product_url: str
    image_url: str


@dataclass
class _Scored:
    item: OutputItem
    score: int
    order: int


class Deduplicator:
    """
    Collapses candidates to one item per style.

    1. Image dedupe: first occurrence of each image URL wins.
    2. Style dedupe: per style key keep the best image score, first seen on ties.
    3. Optional score sort, per-retailer cap, then the overall cap.

    Accepts its own output, and returns it unchanged.
    """

    def __init__(
        self,
        max_items: Optional[int] = None,
        max_per_retailer: Optional[int] = None,
        sort_by_score: bool = False,
        strip_image_query: bool = True,
        mapper: Optional[StyleKeyMapper] = None,
    ):
        self.max_items = max_items
        self.max_per_retailer = max_per_retailer
        self.sort_by_score = sort_by_score
        self.strip_image_query = strip_image_query
        self.mapper = mapper or style_key_mapper

    @classmethod
    def from_settings(cls, config: Settings) -> "Deduplicator":
        return cls(
            max_items=config.max_items,
            max_per_retailer=config.max_per_retailer,
            sort_by_score=config.sort_by_image_score,
            strip_image_query=config.strip_image_query,
        )

    def image_key(self, image_url: str) -> str:
        # Bing thumbnails carry the image id in the query
        if not self.strip_image_query or is_bing_thumbnail(image_url):
            return image_url.strip()
        return strip_query(image_url)

    def style_key(self, item: GalleryEntry) -> str:
        return self.mapper.key_string(item.retailer or "", item.product_url)

    def dedupe_images(self, items: Iterable[GalleryEntry]) -> List[OutputItem]:
        """Drop incomplete items and repeated image URLs, keeping first-seen order."""
        seen = set()
        unique: List[OutputItem] = []
        for item in items:
            if not (item.retailer and item.product_url and item.image_url):
                continue
            key = self.image_key(item.image_url)
            if key in seen:
                continue
            seen.add(key)
            unique.append(OutputItem(
                retailer=item.retailer,
                product_url=item.product_url,
                image_url=item.image_url,
            ))
        return unique

    def best_per_style(self, items: Iterable[OutputItem]) -> List[_Scored]:
        """One entry per style key; group order follows first appearance."""
        groups: dict[str, _Scored] = {}
        for order, item in enumerate(items):
            scored = _Scored(item=item, score=score_image_url(item.image_url), order=order)
            key = self.style_key(item)
            current = groups.get(key)
            if current is None:
                groups[key] = scored
            elif scored.score > current.score:
                # Replacement keeps the group's original position
                groups[key] = _Scored(item=scored.item, score=scored.score, order=current.order)
        return sorted(groups.values(), key=lambda s: s.order)

    def cap(self, scored: List[_Scored]) -> List[OutputItem]:
        if self.sort_by_score:
            scored = sorted(scored, key=lambda s: (-s.score, s.order))

        result: List[OutputItem] = []
        per_retailer: dict[str, int] = {}
        for entry in scored:
            if self.max_items is not None and len(result) >= self.max_items:
                break
            retailer = entry.item.retailer
            if self.max_per_retailer is not None and per_retailer.get(retailer, 0) >= self.max_per_retailer:
                continue
            per_retailer[retailer] = per_retailer.get(retailer, 0) + 1
            result.append(entry.item)
        return result

    def dedupe(self, items: Iterable[GalleryEntry]) -> List[OutputItem]:
        unique_images = self.dedupe_images(items)
        styles = self.best_per_style(unique_images)
        final = self.cap(styles)
        logger.info(
            f"Dedupe: {len(unique_images)} unique images, {len(styles)} styles, {len(final)} kept"
        )
        return final
