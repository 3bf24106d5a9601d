"""Relevance filtering: retailer classification plus brand / keyword / page-shape gates."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence

from gallery_collector.config import RetailerRule, Settings
from gallery_collector.ingest.retailers.strategies import get_strategy_for_retailer
from gallery_collector.models import Candidate, RelevanceDecision
from gallery_collector.normalize.urls import hostname, searchable_text

logger = logging.getLogger(__name__)

# Reasons recorded in the processed log
SKIP_DOMAIN = "unknown_domain"
SKIP_BRAND = "brand_missing"
SKIP_KEYWORD = "apparel_keyword_missing"
SKIP_SHAPE = "not_a_product_page"


class DomainClassifier:
    """Assigns a retailer key from the product URL hostname. First matching rule wins."""

    def __init__(self, rules: Sequence[RetailerRule], unknown_policy: str = "drop", other_key: str = "other"):
        self.rules = list(rules)
        self.unknown_policy = unknown_policy
        self.other_key = other_key

    def match(self, url: str) -> Optional[str]:
        """Configured retailer key for ``url``, or None."""
        host = hostname(url)
        if not host:
            return None
        for rule in self.rules:
            if any(m.lower() in host for m in rule.domain_matchers):
                return rule.key
        return None

    def classify(self, url: str) -> Optional[str]:
        """Retailer key, the "other" bucket, or None (drop) per the unknown-domain policy."""
        retailer = self.match(url)
        if retailer is None and self.unknown_policy == "other" and hostname(url):
            return self.other_key
        return retailer


def brand_variants(brand: str, extra: Iterable[str] = ()) -> List[str]:
    """
    Lowercased spellings of a brand as it shows up in URLs and text.

    "Hot Wheels" -> hot wheels, hot-wheels, hot_wheels, hotwheels, hot+wheels, hot%20wheels
    """
    base = re.sub(r"\s+", " ", (brand or "").strip().lower())
    if not base:
        return []
    words = base.split(" ")
    variants = [
        base,
        "-".join(words),
        "_".join(words),
        "".join(words),
        "+".join(words),
        "%20".join(words),
    ]
    variants.extend(v.strip().lower() for v in extra if v and v.strip())

    seen = set()
    return [v for v in variants if not (v in seen or seen.add(v))]


def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(phrase) + r"(?![a-z0-9])", re.IGNORECASE)


class TextMatcher:
    """Case-insensitive whole-phrase matching over free text and URLs."""

    def __init__(self, phrases: Iterable[str]):
        self.phrases = [p.strip().lower() for p in phrases if p and p.strip()]
        self._text_patterns = [_phrase_pattern(p) for p in self.phrases]
        # URL text has separators turned into spaces; match phrases the same way
        url_phrases = {searchable_text(p).strip() for p in self.phrases}
        self._url_patterns = [_phrase_pattern(p) for p in url_phrases if p]

    def matches(self, *texts: Optional[str], urls: Sequence[Optional[str]] = ()) -> bool:
        for text in texts:
            if text and any(p.search(text) for p in self._text_patterns):
                return True
        for url in urls:
            if url and any(p.search(searchable_text(url)) for p in self._url_patterns):
                return True
        return False


class RelevanceFilter:
    """Base relevance filter: domain allow-list only."""

    mode = "domain"

    def __init__(self, config: Settings):
        self.config = config
        self.classifier = DomainClassifier(
            config.retailers,
            unknown_policy=config.unknown_domain_policy,
            other_key=config.other_retailer_key,
        )
        self.brand = TextMatcher(brand_variants(config.brand, config.brand_variants))
        self.keywords = TextMatcher(config.apparel_keywords)

    def classify(self, candidate: Candidate) -> Optional[str]:
        return self.classifier.classify(candidate.product_url)

    def has_brand(self, candidate: Candidate) -> bool:
        return self.brand.matches(
            candidate.title,
            candidate.page_text,
            urls=(candidate.product_url, candidate.image_url),
        )

    def has_keyword(self, candidate: Candidate) -> bool:
        return self.keywords.matches(
            candidate.title,
            candidate.page_text,
            urls=(candidate.product_url, candidate.image_url),
        )

    def check_other_bucket(self, candidate: Candidate, retailer: str) -> Optional[RelevanceDecision]:
        """The "other" bucket always needs brand and keyword, whatever the mode."""
        if retailer != self.config.other_retailer_key:
            return None
        if not self.has_brand(candidate):
            return RelevanceDecision(allowed=False, retailer=retailer, reason=SKIP_BRAND)
        if not self.has_keyword(candidate):
            return RelevanceDecision(allowed=False, retailer=retailer, reason=SKIP_KEYWORD)
        return None

    def gates(self, candidate: Candidate, retailer: str) -> Optional[RelevanceDecision]:
        """Mode-specific checks; None means pass."""
        return None

    def evaluate(self, candidate: Candidate) -> RelevanceDecision:
        """Decide whether to keep a candidate. Assigns ``candidate.retailer`` when kept."""
        retailer = self.classify(candidate)
        if retailer is None:
            return RelevanceDecision(allowed=False, reason=SKIP_DOMAIN)

        rejected = self.check_other_bucket(candidate, retailer) or self.gates(candidate, retailer)
        if rejected is not None:
            return rejected

        candidate.retailer = retailer
        return RelevanceDecision(allowed=True, retailer=retailer, reason=self.mode)


class DomainOnlyFilter(RelevanceFilter):
    """Keep anything from a configured retailer domain."""

    mode = "domain"


class BrandKeywordFilter(RelevanceFilter):
    """Domain + brand presence, plus an apparel keyword for noisy sources."""

    mode = "brand"

    def gates(self, candidate: Candidate, retailer: str) -> Optional[RelevanceDecision]:
        if not self.has_brand(candidate):
            return RelevanceDecision(allowed=False, retailer=retailer, reason=SKIP_BRAND)

        strategy = get_strategy_for_retailer(retailer)
        if strategy.requires_keyword_gate(candidate.product_url) and not self.has_keyword(candidate):
            return RelevanceDecision(allowed=False, retailer=retailer, reason=SKIP_KEYWORD)
        return None


class ProductPageFilter(BrandKeywordFilter):
    """Brand/keyword gates plus a retailer product-page URL shape."""

    mode = "strict"

    def gates(self, candidate: Candidate, retailer: str) -> Optional[RelevanceDecision]:
        rejected = super().gates(candidate, retailer)
        if rejected is not None:
            return rejected
        if not get_strategy_for_retailer(retailer).is_product_page(candidate.product_url):
            return RelevanceDecision(allowed=False, retailer=retailer, reason=SKIP_SHAPE)
        return None


_FILTERS = {
    "domain": DomainOnlyFilter,
    "brand": BrandKeywordFilter,
    "strict": ProductPageFilter,
}


def build_relevance_filter(config: Settings) -> RelevanceFilter:
    """Relevance filter for ``config.relevance_mode``."""
    try:
        filter_class = _FILTERS[config.relevance_mode]
    except KeyError:
        raise ValueError(
            f"Unknown relevance mode: {config.relevance_mode}. Available: {list(_FILTERS)}"
        ) from None
    return filter_class(config)
