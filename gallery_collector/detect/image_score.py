"""Heuristic image quality score from the image URL alone."""

import re
from urllib.parse import parse_qs, urlsplit

from gallery_collector.normalize.urls import is_bing_thumbnail

_QUALITY_TOKENS = {
    "original": 3,
    "originals": 3,
    "hires": 3,
    "highres": 3,
    "zoom": 2,
    "large": 2,
    "xlarge": 3,
    "full": 2,
    "fullsize": 2,
    "main": 1,
}

_THUMB_TOKENS = {
    "thumb": -3,
    "thumbs": -3,
    "thumbnail": -4,
    "thumbnails": -4,
    "small": -2,
    "tiny": -3,
    "mini": -2,
    "sm": -1,
    "preview": -2,
    "lowres": -3,
    "icon": -3,
}

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")
_DIMENSION_RE = re.compile(r"(?<!\d)(\d{2,4})x(\d{2,4})(?!\d)")
_WIDTH_PARAMS = ("w", "wid", "width", "imwidth", "sw", "resize")

BIG_DIMENSION = 800
SMALL_DIMENSION = 300


def _dimension_score(size: int) -> int:
    if size >= BIG_DIMENSION:
        return 2
    if size < SMALL_DIMENSION:
        return -2
    return 0


def score_image_url(url: str) -> int:
    """
    Score an image URL: higher means more likely to be a large, original image.

    Rewards quality tokens and big explicit dimensions; penalizes thumbnail
    tokens, small dimensions and Bing's thumbnail proxy.
    """
    if not url:
        return -100

    lowered = url.lower()
    try:
        parts = urlsplit(lowered)
    except ValueError:
        return 0

    score = 0
    tokens = set(t for t in _TOKEN_SPLIT_RE.split(parts.path) if t)
    for token in tokens:
        score += _QUALITY_TOKENS.get(token, 0)
        score += _THUMB_TOKENS.get(token, 0)
    if "hi-res" in parts.path:
        score += 3

    if is_bing_thumbnail(lowered):
        score -= 4

    for match in _DIMENSION_RE.finditer(parts.path):
        score += _dimension_score(max(int(match.group(1)), int(match.group(2))))

    # Pinterest serves /236x/, /474x/, /736x/ and /originals/
    pin_width = re.search(r"/(\d{2,4})x/", parts.path)
    if pin_width:
        score += _dimension_score(int(pin_width.group(1)))

    params = parse_qs(parts.query)
    for name in _WIDTH_PARAMS:
        for value in params.get(name, []):
            digits = re.match(r"\d+", value)
            if digits:
                score += _dimension_score(int(digits.group(0)))

    return score
