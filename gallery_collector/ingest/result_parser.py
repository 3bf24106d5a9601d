"""Extract (product URL, image URL) candidates from raw search-engine markup.

Parsing is best-effort: a malformed item or blob is skipped, never raised.
"""

import html
import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from selectolax.parser import HTMLParser

from gallery_collector.models import Candidate
from gallery_collector.normalize.urls import absolutize, is_http_url

logger = logging.getLogger(__name__)

# RSS
_ITEM_RE = re.compile(r"<item\b[^>]*>(.*?)</item>", re.IGNORECASE | re.DOTALL)
_LINK_RE = re.compile(r"<link\b[^>]*>(.*?)</link>", re.IGNORECASE | re.DOTALL)
_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_DESCRIPTION_RE = re.compile(r"<description\b[^>]*>(.*?)</description>", re.IGNORECASE | re.DOTALL)
_CDATA_RE = re.compile(r"^\s*<!\[CDATA\[(.*?)\]\]>\s*$", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")

# Image sources in priority order
_RSS_IMAGE_RES = [
    re.compile(r"<media:thumbnail\b[^>]*?\burl\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<media:content\b[^>]*?\burl\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<enclosure\b[^>]*?\burl\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE),
]
_IMG_SRC_RE = re.compile(r"<img\b[^>]*?\bsrc\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)

# Bing Images metadata attribute, e.g. m="{&quot;murl&quot;:...}"
_BLOB_RE = re.compile(r'\sm="([^"]+)"')
IMAGE_BLOB_KEYS = ("murl", "imgurl", "turl")
PRODUCT_BLOB_KEYS = ("purl",)
TITLE_BLOB_KEYS = ("t", "desc")


def _text(fragment: Optional[str]) -> str:
    """Unwrap CDATA, unescape entities and trim."""
    if not fragment:
        return ""
    cdata = _CDATA_RE.match(fragment)
    if cdata:
        fragment = cdata.group(1)
    return html.unescape(fragment).strip()


def _strip_tags(fragment: str) -> str:
    return re.sub(r"\s+", " ", _TAG_RE.sub(" ", fragment)).strip()


def extract_rss_image(item_xml: str) -> Optional[str]:
    """
    Find the image for one RSS ``<item>`` block.

    Order: media:thumbnail, media:content, enclosure, then the first
    ``<img src>`` inside the description. First non-empty wins.
    """
    for pattern in _RSS_IMAGE_RES:
        match = pattern.search(item_xml)
        if match:
            url = html.unescape(match.group(1)).strip()
            if url:
                return url

    description = _DESCRIPTION_RE.search(item_xml)
    if description:
        body = _text(description.group(1))
        match = _IMG_SRC_RE.search(body)
        if match and match.group(1).strip():
            return html.unescape(match.group(1)).strip()
    return None


def parse_rss_items(body: str) -> List[Candidate]:
    """Parse an RSS body into candidates, one per ``<item>`` with link and image."""
    candidates: List[Candidate] = []
    if not body:
        return candidates

    for match in _ITEM_RE.finditer(body):
        item_xml = match.group(1)
        try:
            link = _LINK_RE.search(item_xml)
            product_url = _text(link.group(1)) if link else ""
            if not is_http_url(product_url):
                continue

            image_url = extract_rss_image(item_xml)
            if not image_url:
                logger.debug(f"RSS item without image: {product_url}")
                continue

            title = _TITLE_RE.search(item_xml)
            description = _DESCRIPTION_RE.search(item_xml)
            text_parts = [
                _text(title.group(1)) if title else "",
                _strip_tags(_text(description.group(1))) if description else "",
            ]
            candidates.append(Candidate(
                product_url=product_url,
                image_url=absolutize(image_url, product_url),
                title=" ".join(p for p in text_parts if p),
            ))
        except (AttributeError, ValueError) as e:
            logger.debug(f"Error parsing RSS item: {e}")
            continue

    return candidates


def iter_image_blobs(body: str) -> Iterator[Dict[str, Any]]:
    """Yield every ``m="..."`` attribute that decodes to a JSON object."""
    for match in _BLOB_RE.finditer(body or ""):
        raw = html.unescape(match.group(1))
        try:
            obj = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(obj, dict):
            yield obj


def _first_str(obj: Dict[str, Any], keys) -> str:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def parse_image_blobs(body: str) -> List[Candidate]:
    """
    Parse a Bing Images result page.

    Image from murl / imgurl / turl (in that order), product page from purl.
    Blobs missing either are dropped.
    """
    candidates: List[Candidate] = []
    for obj in iter_image_blobs(body):
        image_url = _first_str(obj, IMAGE_BLOB_KEYS)
        product_url = _first_str(obj, PRODUCT_BLOB_KEYS)
        if not (is_http_url(image_url) and is_http_url(product_url)):
            continue
        candidates.append(Candidate(
            product_url=product_url,
            image_url=image_url,
            title=" ".join(_first_str(obj, (key,)) for key in TITLE_BLOB_KEYS).strip(),
        ))
    return candidates


def resolve_duckduckgo_redirect(href: str) -> str:
    """Unwrap ``/l/?uddg=<encoded url>`` redirect links."""
    if not href:
        return ""
    href = href.strip()
    if href.startswith("//"):
        href = "https:" + href
    try:
        parts = urlsplit(href)
    except ValueError:
        return ""
    if parts.path.startswith("/l/"):
        target = parse_qs(parts.query).get("uddg")
        if target:
            return unquote(target[0])
    return href


def parse_duckduckgo_results(body: str) -> List[Candidate]:
    """
    Parse the DuckDuckGo HTML endpoint.

    Results have no image; the image is filled in by the page enricher.
    """
    candidates: List[Candidate] = []
    if not body:
        return candidates

    tree = HTMLParser(body)
    for node in tree.css("div.result"):
        anchor = node.css_first("a.result__a")
        if anchor is None:
            continue
        product_url = resolve_duckduckgo_redirect(anchor.attributes.get("href") or "")
        if not is_http_url(product_url):
            continue
        snippet = node.css_first(".result__snippet")
        text_parts = [anchor.text(strip=True), snippet.text(strip=True) if snippet else ""]
        candidates.append(Candidate(
            product_url=product_url,
            image_url="",
            title=" ".join(p for p in text_parts if p),
        ))
    return candidates
