"""URL normalization helpers shared by the relevance filter and deduplicator."""

import re
from typing import Optional
from urllib.parse import unquote, urljoin, urlsplit, urlunsplit

import httpx

_BING_THUMB_HOST_RE = re.compile(r"tse\d*\.mm\.bing\.net$")


def hostname(url: Optional[str]) -> str:
    """Lowercased hostname of ``url``, or empty string when it has none."""
    if not url:
        return ""
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def is_bing_thumbnail(url: Optional[str]) -> bool:
    """Bing thumbnail URLs (`tse1.mm.bing.net/th?id=...`) identify the image by query."""
    if not url:
        return False
    lowered = url.strip().lower()
    try:
        path = urlsplit(lowered).path
    except ValueError:
        return False
    return bool(_BING_THUMB_HOST_RE.match(hostname(lowered))) or "/th?id=" in lowered or path.endswith("/th")


def strip_query(url: str) -> str:
    """Drop query string and fragment."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip()
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def normalize_path_key(url: str) -> str:
    """
    Host + path key used when no retailer-specific id can be extracted.

    Lowercased, ``www.`` dropped, trailing slash removed, query and fragment ignored.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip().lower()
    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    path = re.sub(r"/{2,}", "/", parts.path or "").rstrip("/").lower()
    return f"{host}{path}"


def searchable_text(url: Optional[str]) -> str:
    """URL decoded and lowercased, with path separators turned into spaces."""
    if not url:
        return ""
    text = unquote(unquote(url)).lower()
    return re.sub(r"[/_+\-.?=&]+", " ", text)


def absolutize(url: Optional[str], base_url: str) -> str:
    """Resolve a possibly relative or protocol-relative URL against ``base_url``."""
    if not url:
        return ""
    url = url.strip()
    if url.startswith("//"):
        scheme = urlsplit(base_url).scheme or "https"
        return f"{scheme}:{url}"
    return urljoin(base_url, url)


def is_http_url(url: Optional[str]) -> bool:
    """Absolute http(s) URL that httpx can request (rejects invalid IDNA hosts)."""
    if not url:
        return False
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        return False
    try:
        return bool(httpx.URL(url).host)
    except httpx.InvalidURL:
        return False
