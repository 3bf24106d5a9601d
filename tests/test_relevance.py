"""Tests for retailer classification and relevance gates."""

import pytest

from gallery_collector.config import Settings
from gallery_collector.detect.relevance import (
    SKIP_BRAND,
    SKIP_DOMAIN,
    SKIP_KEYWORD,
    SKIP_SHAPE,
    BrandKeywordFilter,
    DomainClassifier,
    DomainOnlyFilter,
    ProductPageFilter,
    brand_variants,
    build_relevance_filter,
)
from gallery_collector.ingest.retailers.strategies import get_strategy_for_retailer
from gallery_collector.models import Candidate


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def _candidate(product_url, image_url="https://img.test/a.jpg", title=""):
    return Candidate(product_url=product_url, image_url=image_url, title=title)


class TestDomainClassifier:

    def setup_method(self):
        self.config = _settings()

    def test_next_domain(self):
        classifier = DomainClassifier(self.config.retailers)
        assert classifier.classify("https://www.next.co.uk/style/abc/123") == "next"

    def test_case_insensitive_hostname(self):
        classifier = DomainClassifier(self.config.retailers)
        assert classifier.classify("https://WWW2.HM.COM/en_gb/productpage.1234567001.html") == "hm"

    def test_domain_in_path_does_not_count(self):
        classifier = DomainClassifier(self.config.retailers)
        assert classifier.classify("https://example.test/redirect/next.co.uk") is None

    def test_unknown_domain_dropped_or_other(self):
        url = "https://example-blog.test/post"
        assert DomainClassifier(self.config.retailers, unknown_policy="drop").classify(url) is None
        assert DomainClassifier(self.config.retailers, unknown_policy="other").classify(url) == "other"

    def test_first_rule_wins(self):
        config = _settings(retailers=[
            {"key": "first", "domain_matchers": ["shop.test"]},
            {"key": "second", "domain_matchers": ["shop.test"]},
        ])
        assert DomainClassifier(config.retailers).classify("https://shop.test/x") == "first"


def test_brand_variants():
    variants = brand_variants("Hot  Wheels", extra=["HW"])
    assert variants[0] == "hot wheels"
    assert {"hot-wheels", "hot_wheels", "hotwheels", "hw"} <= set(variants)
    assert brand_variants("") == []


class TestBrandKeywordFilter:

    def setup_method(self):
        self.filter = BrandKeywordFilter(_settings())

    def test_product_page_with_brand_in_title(self):
        candidate = _candidate("https://www.next.co.uk/style/st123/a456", title="Hot Wheels Graphic Top")
        decision = self.filter.evaluate(candidate)
        assert decision.allowed
        assert candidate.retailer == "next"

    def test_brand_in_url(self):
        candidate = _candidate("https://www.asos.com/asos-design/hot-wheels-print-tee/prd/203040")
        assert self.filter.evaluate(candidate).allowed

    def test_brand_missing(self):
        candidate = _candidate("https://www.next.co.uk/style/st123/a456", title="Dinosaur top")
        decision = self.filter.evaluate(candidate)
        assert not decision.allowed
        assert decision.reason == SKIP_BRAND
        assert candidate.retailer is None

    def test_unknown_domain(self):
        decision = self.filter.evaluate(_candidate("https://example-blog.test/hot-wheels-tee"))
        assert not decision.allowed
        assert decision.reason == SKIP_DOMAIN

    def test_pinterest_needs_keyword(self):
        pin = _candidate("https://www.pinterest.co.uk/pin/123456/", title="Hot Wheels birthday cake")
        assert self.filter.evaluate(pin).reason == SKIP_KEYWORD

        pin = _candidate("https://www.pinterest.co.uk/pin/123456/", title="Hot Wheels hoodie for boys")
        assert self.filter.evaluate(pin).allowed

    def test_non_product_page_needs_keyword(self):
        listing = _candidate("https://www.next.co.uk/shop/brand-hot-wheels")
        assert self.filter.evaluate(listing).reason == SKIP_KEYWORD

        listing = _candidate("https://www.next.co.uk/shop/brand-hot-wheels-joggers")
        assert self.filter.evaluate(listing).allowed

    def test_keyword_matches_whole_words(self):
        pin = _candidate("https://www.pinterest.com/pin/1/", title="Hot Wheels stop motion")
        assert self.filter.evaluate(pin).reason == SKIP_KEYWORD

    def test_page_text_counts(self):
        candidate = _candidate("https://www.zara.com/uk/en/print-p01234567.html")
        candidate.page_text = "Hot Wheels print"
        assert self.filter.evaluate(candidate).allowed


class TestOtherBucket:

    def test_other_bucket_requires_brand_and_keyword(self):
        config = _settings(unknown_domain_policy="other")
        for filter_class in (DomainOnlyFilter, BrandKeywordFilter, ProductPageFilter):
            relevance = filter_class(config)
            no_keyword = _candidate("https://shop.test/products/hot-wheels-car")
            assert relevance.evaluate(no_keyword).reason == SKIP_KEYWORD

        kept = _candidate("https://shop.test/products/hot-wheels-kids-hoodie")
        decision = BrandKeywordFilter(config).evaluate(kept)
        assert decision.allowed
        assert kept.retailer == "other"
        assert "other" in config.retailer_keys


class TestModes:

    def test_domain_only_ignores_brand(self):
        relevance = DomainOnlyFilter(_settings())
        candidate = _candidate("https://www.zara.com/uk/en/plain-p01234567.html")
        assert relevance.evaluate(candidate).allowed

    def test_strict_requires_product_shape(self):
        relevance = ProductPageFilter(_settings())
        listing = _candidate("https://www.next.co.uk/shop/brand-hot-wheels-joggers")
        assert relevance.evaluate(listing).reason == SKIP_SHAPE

        product = _candidate("https://www.next.co.uk/style/st1/a1", title="Hot Wheels joggers")
        assert relevance.evaluate(product).allowed

    @pytest.mark.parametrize("mode,expected", [
        ("domain", DomainOnlyFilter),
        ("brand", BrandKeywordFilter),
        ("strict", ProductPageFilter),
    ])
    def test_build_relevance_filter(self, mode, expected):
        assert type(build_relevance_filter(_settings(relevance_mode=mode))) is expected


def test_strategy_registry():
    assert get_strategy_for_retailer("next").is_product_page("https://www.next.co.uk/style/abc/123")
    assert get_strategy_for_retailer("pinterest").requires_keyword_gate("https://www.pinterest.com/pin/1/")
    assert not get_strategy_for_retailer("asos").requires_keyword_gate("https://www.asos.com/x/prd/1")
    assert get_strategy_for_retailer(None).retailer == "default"
