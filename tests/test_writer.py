"""Tests for the gallery output writer."""

import json

import pytest

from gallery_collector.models import OutputItem
from gallery_collector.output.writer import GalleryWriter, OutputWriteError

ITEMS = [
    OutputItem("next", "https://www.next.co.uk/style/st1/a1", "https://img.test/1.jpg"),
    OutputItem("asos", "https://www.asos.com/x/prd/2", "https://img.test/2.jpg"),
]


def test_writes_flat_array(tmp_path):
    path = tmp_path / "data" / "gallery.json"
    assert GalleryWriter(path).write(ITEMS) is True

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [
        {"retailer": "next", "product_url": "https://www.next.co.uk/style/st1/a1", "image_url": "https://img.test/1.jpg"},
        {"retailer": "asos", "product_url": "https://www.asos.com/x/prd/2", "image_url": "https://img.test/2.jpg"},
    ]
    assert not (tmp_path / "data" / "gallery.json.tmp").exists()


def test_empty_result_keeps_previous_file(tmp_path):
    path = tmp_path / "gallery.json"
    GalleryWriter(path).write(ITEMS)
    before = path.read_text(encoding="utf-8")

    assert GalleryWriter(path, min_items=1).write([]) is False
    assert path.read_text(encoding="utf-8") == before


def test_empty_result_written_when_no_previous_file(tmp_path):
    path = tmp_path / "gallery.json"
    assert GalleryWriter(path).write([]) is True
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_ratio_guard(tmp_path):
    path = tmp_path / "gallery.json"
    many = [OutputItem("asos", f"https://www.asos.com/x/prd/{n}", f"https://img.test/{n}.jpg") for n in range(10)]
    GalleryWriter(path).write(many)

    writer = GalleryWriter(path, min_ratio=0.5)
    assert writer.write(many[:4]) is False
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 10

    assert writer.write(many[:5]) is True
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 5


def test_unwritable_path_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(OutputWriteError):
        GalleryWriter(blocker / "gallery.json").write(ITEMS)


def test_failed_replace_removes_temporary_file(tmp_path):
    # A directory in the way makes the final rename fail after the temp file is written
    path = tmp_path / "gallery.json"
    path.mkdir()

    with pytest.raises(OutputWriteError):
        GalleryWriter(path).write(ITEMS)
    assert not (tmp_path / "gallery.json.tmp").exists()
