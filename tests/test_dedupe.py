"""Tests for image scoring, style keys and deduplication."""

from gallery_collector.config import Settings
from gallery_collector.detect.image_score import score_image_url
from gallery_collector.ingest.product_id_mapper import StyleKeyMapper, pattern_extractor
from gallery_collector.models import Candidate, OutputItem
from gallery_collector.output.dedupe import Deduplicator


def _item(retailer, product_url, image_url):
    return Candidate(product_url=product_url, image_url=image_url, retailer=retailer)


class TestImageScore:

    def test_original_beats_thumbnail(self):
        assert score_image_url("https://img.test/originals/a.jpg") > score_image_url("https://img.test/thumbs/a.jpg")

    def test_bing_thumbnail_penalized(self):
        assert score_image_url("https://tse1.mm.bing.net/th?id=OIP.abc") < 0

    def test_width_parameter(self):
        assert score_image_url("https://img.test/p.jpg?w=1200") > score_image_url("https://img.test/p.jpg?w=100")

    def test_dimensions_in_path(self):
        assert score_image_url("https://img.test/1600x1600/p.jpg") > score_image_url("https://img.test/150x150/p.jpg")

    def test_pinterest_sizes(self):
        assert score_image_url("https://i.pinimg.com/736x/aa/bb.jpg") > score_image_url("https://i.pinimg.com/236x/aa/bb.jpg")

    def test_empty(self):
        assert score_image_url("") < score_image_url("https://img.test/p.jpg")


class TestStyleKeyMapper:

    def setup_method(self):
        self.mapper = StyleKeyMapper()

    def test_hm_colour_variants_share_key(self):
        a = self.mapper.key_string("hm", "https://www2.hm.com/en_gb/productpage.1234567001.html")
        b = self.mapper.key_string("hm", "https://www2.hm.com/en_gb/productpage.1234567002.html?x=1")
        assert a == b == "hm:1234567"

    def test_next_style_id(self):
        assert self.mapper.key_string("next", "https://www.next.co.uk/style/ST123/A456#1") == "next:st123"

    def test_zalando_colour_suffix_ignored(self):
        a = self.mapper.key_string("zalando", "https://www.zalando.co.uk/hot-wheels-tee-hw123e00a-q11.html")
        b = self.mapper.key_string("zalando", "https://www.zalando.co.uk/hot-wheels-tee-hw123e00a-k12.html")
        assert a == b == "zalando:hw123e00a"

    def test_fallback_to_path(self):
        a = self.mapper.key_string("other", "https://www.shop.test/Hot-Wheels-Tee/?utm_source=x")
        b = self.mapper.key_string("other", "https://shop.test/hot-wheels-tee")
        assert a == b == "other:shop.test/hot-wheels-tee"

    def test_register_extractor(self):
        self.mapper.register("shop", pattern_extractor(r"/sku/(\w+)"))
        assert self.mapper.key_string("shop", "https://shop.test/sku/AB12?c=red") == "shop:ab12"
        # Registration is per instance
        assert StyleKeyMapper().extract_style_id("shop", "https://shop.test/sku/AB12") is None


class TestDeduplicator:

    def test_image_dedupe_ignores_query(self):
        items = [
            _item("asos", "https://www.asos.com/a/prd/1", "https://img.test/a.jpg?w=100"),
            _item("asos", "https://www.asos.com/b/prd/2", "https://img.test/a.jpg?w=200"),
        ]
        result = Deduplicator().dedupe(items)
        assert [i.product_url for i in result] == ["https://www.asos.com/a/prd/1"]

    def test_bing_thumbnails_keep_their_id(self):
        items = [
            _item("asos", "https://www.asos.com/a/prd/1", "https://tse1.mm.bing.net/th?id=OIP.aaa&pid=Api"),
            _item("asos", "https://www.asos.com/b/prd/2", "https://tse1.mm.bing.net/th?id=OIP.bbb&pid=Api"),
            _item("asos", "https://www.asos.com/c/prd/3", "https://tse1.mm.bing.net/th?id=OIP.aaa&pid=Api"),
        ]
        result = Deduplicator().dedupe(items)
        assert [i.product_url for i in result] == [
            "https://www.asos.com/a/prd/1",
            "https://www.asos.com/b/prd/2",
        ]

    def test_image_dedupe_exact_when_not_stripping(self):
        items = [
            _item("asos", "https://www.asos.com/a/prd/1", "https://img.test/a.jpg?w=100"),
            _item("asos", "https://www.asos.com/b/prd/2", "https://img.test/a.jpg?w=200"),
        ]
        assert len(Deduplicator(strip_image_query=False).dedupe(items)) == 2

    def test_higher_score_wins_within_style(self):
        items = [
            _item("next", "https://www.next.co.uk/style/st1/a1", "https://img.test/thumbs/1.jpg"),
            _item("asos", "https://www.asos.com/x/prd/9", "https://img.test/9.jpg"),
            _item("next", "https://www.next.co.uk/style/st1/a2?colour=red", "https://img.test/originals/1.jpg"),
        ]
        result = Deduplicator().dedupe(items)
        assert result == [
            OutputItem("next", "https://www.next.co.uk/style/st1/a2?colour=red", "https://img.test/originals/1.jpg"),
            OutputItem("asos", "https://www.asos.com/x/prd/9", "https://img.test/9.jpg"),
        ]

    def test_tie_keeps_first_seen(self):
        items = [
            _item("asos", "https://www.asos.com/x/prd/9", "https://img.test/first.jpg"),
            _item("asos", "https://www.asos.com/y/prd/9", "https://img.test/second.jpg"),
        ]
        result = Deduplicator().dedupe(items)
        assert [i.image_url for i in result] == ["https://img.test/first.jpg"]

    def test_incomplete_items_dropped(self):
        items = [
            _item(None, "https://www.asos.com/x/prd/1", "https://img.test/1.jpg"),
            _item("asos", "", "https://img.test/2.jpg"),
            _item("asos", "https://www.asos.com/x/prd/3", ""),
        ]
        assert Deduplicator().dedupe(items) == []

    def test_truncation_prefers_higher_scores(self):
        items = [
            _item("next", "https://www.next.co.uk/style/st1/a", "https://img.test/originals/1.jpg"),
            _item("next", "https://www.next.co.uk/style/st2/a", "https://img.test/thumbs/2.jpg"),
            _item("next", "https://www.next.co.uk/style/st3/a", "https://img.test/large/3.jpg"),
            _item("next", "https://www.next.co.uk/style/st4/a", "https://img.test/4.jpg"),
        ]
        unsorted = Deduplicator(max_items=2).dedupe(items)
        assert [i.image_url for i in unsorted] == ["https://img.test/originals/1.jpg", "https://img.test/thumbs/2.jpg"]

        ranked = Deduplicator(max_items=2, sort_by_score=True).dedupe(items)
        assert [i.image_url for i in ranked] == ["https://img.test/originals/1.jpg", "https://img.test/large/3.jpg"]

    def test_per_retailer_cap(self):
        items = [_item("pinterest", f"https://www.pinterest.com/pin/{n}/", f"https://i.pinimg.com/originals/{n}.jpg") for n in range(5)]
        items.append(_item("asos", "https://www.asos.com/x/prd/1", "https://img.test/1.jpg"))
        result = Deduplicator(max_per_retailer=2).dedupe(items)
        assert [i.retailer for i in result] == ["pinterest", "pinterest", "asos"]

    def test_output_style_keys_unique_and_idempotent(self):
        config = Settings(_env_file=None, max_items=5, max_per_retailer=3, sort_by_image_score=True)
        dedupe = Deduplicator.from_settings(config)
        items = []
        for n in range(4):
            items.append(_item("hm", f"https://www2.hm.com/en_gb/productpage.{1000000 + n}001.html", f"https://img.test/hm/{n}/thumb.jpg"))
            items.append(_item("hm", f"https://www2.hm.com/en_gb/productpage.{1000000 + n}002.html", f"https://img.test/hm/{n}/large.jpg"))
            items.append(_item("zara", f"https://www.zara.com/uk/en/tee-p0{n}123456.html", f"https://img.test/zara/{n}.jpg"))

        once = dedupe.dedupe(items)
        keys = [dedupe.style_key(i) for i in once]
        assert len(keys) == len(set(keys))
        assert len(once) == 5
        assert {i.retailer for i in once} <= config.retailer_keys
        assert all(i.retailer and i.product_url and i.image_url for i in once)

        assert dedupe.dedupe(once) == once
