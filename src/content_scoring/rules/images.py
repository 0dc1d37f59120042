"""Image and video counting."""

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

# Checked before src; lazy loaders keep the real URL here
LAZY_SOURCE_ATTRS = ("data-src", "data-lazy-src", "data-original")
PLACEHOLDER_SOURCE = re.compile(r"placeholder|blank\.|spacer\.|pixel\.|1x1", re.I)
MIN_ALT_CHARS = 5
VIDEO_IFRAME = re.compile(r"youtube\.com|youtu\.be|vimeo\.com", re.I)


@dataclass
class ImageStats:
    images: int = 0
    images_with_alt: int = 0
    videos: int = 0


def effective_source(attrs: dict) -> str:
    for name in LAZY_SOURCE_ATTRS + ("src",):
        value = (attrs.get(name) or "").strip()
        if value:
            return value
    return ""


def is_placeholder(src: str) -> bool:
    return src.lower().startswith("data:") or bool(PLACEHOLDER_SOURCE.search(src))


def has_meaningful_alt(alt: str | None) -> bool:
    """Stricter than presence: trimmed alt text must exceed a minimum length."""
    return len((alt or "").strip()) > MIN_ALT_CHARS


def count_images(soup: BeautifulSoup) -> ImageStats:
    stats = ImageStats()
    for img in soup.find_all("img"):
        attrs = {k.lower(): v if isinstance(v, str) else " ".join(v) for k, v in img.attrs.items()}
        src = effective_source(attrs)
        if not src or is_placeholder(src):
            continue
        stats.images += 1
        if has_meaningful_alt(attrs.get("alt")):
            stats.images_with_alt += 1
    stats.videos = len(soup.find_all("video")) + len(
        soup.find_all("iframe", src=VIDEO_IFRAME)
    )
    return stats
