"""Extract product image data from a fetched product page."""

import json
from typing import Any, Dict, List, Optional

from selectolax.parser import HTMLParser

META_IMAGE_SELECTORS = [
    'meta[property="og:image:secure_url"]',
    'meta[property="og:image"]',
    'meta[name="og:image"]',
    'meta[name="twitter:image"]',
    'meta[property="twitter:image"]',
    'meta[itemprop="image"]',
]


def extract_json_ld(tree: HTMLParser) -> List[Dict[str, Any]]:
    """
    Extract JSON-LD structured data from script tags.

    ``@graph`` containers and top-level arrays are flattened.
    """
    results: List[Dict[str, Any]] = []
    for script in tree.css('script[type="application/ld+json"]'):
        try:
            data = json.loads(script.text())
        except (json.JSONDecodeError, ValueError):
            continue
        stack = data if isinstance(data, list) else [data]
        for obj in stack:
            if not isinstance(obj, dict):
                continue
            graph = obj.get("@graph")
            if isinstance(graph, list):
                results.extend(o for o in graph if isinstance(o, dict))
            else:
                results.append(obj)
    return results


def _image_value(value: Any) -> Optional[str]:
    """schema.org ``image`` may be a string, a list or an ImageObject."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        for entry in value:
            found = _image_value(entry)
            if found:
                return found
        return None
    if isinstance(value, dict):
        return _image_value(value.get("url") or value.get("contentUrl"))
    return None


def extract_product_image_from_json_ld(objects: List[Dict[str, Any]]) -> Optional[str]:
    """First image of a schema.org Product (or ProductGroup) object."""
    for obj in objects:
        obj_type = obj.get("@type", "")
        if isinstance(obj_type, list):
            obj_type = obj_type[0] if obj_type else ""
        if obj_type in ("Product", "ProductGroup"):
            image = _image_value(obj.get("image"))
            if image:
                return image
    return None


def extract_meta_image(tree: HTMLParser) -> Optional[str]:
    """First non-empty og:/twitter:/itemprop image meta tag."""
    for selector in META_IMAGE_SELECTORS:
        node = tree.css_first(selector)
        if node is None:
            continue
        content = (node.attributes.get("content") or "").strip()
        if content:
            return content
    return None


def extract_link_image(tree: HTMLParser) -> Optional[str]:
    node = tree.css_first('link[rel="image_src"]')
    if node is None:
        return None
    return (node.attributes.get("href") or "").strip() or None


def extract_page_image(html: str) -> Optional[str]:
    """
    Representative product image of a page.

    Order: og:/twitter: meta tags, JSON-LD Product image, ``link[rel=image_src]``.
    """
    if not html:
        return None
    tree = HTMLParser(html)
    return (
        extract_meta_image(tree)
        or extract_product_image_from_json_ld(extract_json_ld(tree))
        or extract_link_image(tree)
    )


def extract_page_text(html: str, max_chars: int = 20000) -> str:
    """Visible text of a page (title + body, scripts and styles removed)."""
    if not html:
        return ""
    tree = HTMLParser(html)
    for node in tree.css("script, style, noscript, template"):
        node.decompose()
    parts = []
    title = tree.css_first("title")
    if title is not None:
        parts.append(title.text(strip=True))
    body = tree.body
    if body is not None:
        parts.append(body.text(separator=" ", strip=True))
    return " ".join(p for p in parts if p)[:max_chars]
