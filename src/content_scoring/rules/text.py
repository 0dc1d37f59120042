"""Text helpers shared by the extraction rules."""

import bisect
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from bs4 import BeautifulSoup, Tag


WHITESPACE = re.compile(r"\s+")
SENTENCE_SPLIT = re.compile(r"[.!?]+")
# Sentence-terminal punctuation followed by whitespace; "3.5" is not a break
SENTENCE_BREAK = re.compile(r"[.!?]+(?=\s|$)")
QUOTE_CHARS = "\"'“”‘’„«»"
DEDUP_PREFIX_LENGTH = 50
NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


@dataclass
class Candidate:
    """One extracted item plus the key used to drop repeats."""

    dedup_key: str
    item: Any
    extra: dict = field(default_factory=dict)


def normalize_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text or "").strip()


def truncate(text: str, limit: int) -> str:
    text = normalize_whitespace(text)
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def prefix_key(text: str, length: int = DEDUP_PREFIX_LENGTH) -> str:
    """Lowercase, whitespace-collapsed prefix with quote marks removed."""
    cleaned = normalize_whitespace(text).strip(QUOTE_CHARS + " ").lower()
    cleaned = cleaned.translate({ord(c): None for c in QUOTE_CHARS})
    return cleaned[:length]


def dedup_by_key(candidates: Iterable[Candidate], cap: int | None = None) -> list[Candidate]:
    """First occurrence wins, discovery order kept. Empty keys are dropped."""
    seen: set[str] = set()
    out: list[Candidate] = []
    for cand in candidates:
        if not cand.dedup_key or cand.dedup_key in seen:
            continue
        seen.add(cand.dedup_key)
        out.append(cand)
        if cap is not None and len(out) >= cap:
            break
    return out


def strip_non_content(soup: BeautifulSoup) -> None:
    """Remove script/style content in place. Run after JSON-LD has been read."""
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()


def body_text(soup: BeautifulSoup) -> str:
    """Whitespace-collapsed visible text of the body (whole document if no body)."""
    root = soup.find("body") or soup
    return normalize_whitespace(root.get_text(separator=" "))


def element_text(el: Tag | None) -> str:
    if el is None:
        return ""
    return normalize_whitespace(el.get_text(separator=" "))


def tokenize(text: str) -> list[str]:
    return [w for w in WHITESPACE.split(text or "") if w]


def word_count(text: str) -> int:
    return len(tokenize(text))


def sentences(text: str) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT.split(text or "") if s.strip()]


class SentenceIndex:
    """Looks up the sentence that surrounds a character offset."""

    def __init__(self, text: str):
        self.text = text
        self._ends = [m.end() for m in SENTENCE_BREAK.finditer(text)]

    def sentence_at(self, start: int, end: int | None = None) -> str:
        end = start if end is None else end
        i = bisect.bisect_right(self._ends, start)
        begin = self._ends[i - 1] if i > 0 else 0
        j = bisect.bisect_left(self._ends, max(end, start + 1))
        finish = self._ends[j] if j < len(self._ends) else len(self.text)
        return self.text[begin:finish].strip()

    def sentence_end(self, offset: int) -> int:
        j = bisect.bisect_left(self._ends, offset + 1)
        return self._ends[j] if j < len(self._ends) else len(self.text)


def context_window(text: str, start: int, end: int, radius: int = 100) -> str:
    return text[max(0, start - radius): min(len(text), end + radius)].strip()
